"""Recursive dependency tracking from an entry file."""

import logging
import os
from pathlib import Path
from typing import List, Union

from .analyzer import ReferenceExtractor
from .models import (
    FILE_TYPES,
    STYLE_EXTENSIONS,
    DependencyGraph,
    Diagnostic,
    FileKind,
    ProjectContext,
    Statistics,
    TraversalState,
    is_ignored_path,
)
from .resolver import FileLocator, SpecifierResolver, to_alias_path

logger = logging.getLogger(__name__)


class DependencyTracker:
    """Walks module references depth-first and records the dependency graph.

    Every file is expanded at most once, which keeps cyclic imports safe.
    Failures on a single reference are recorded as diagnostics and the walk
    carries on with the remaining references.
    """

    def __init__(self, context: ProjectContext, extractor=None):
        self.context = context
        self.extractor = extractor or ReferenceExtractor()
        self.resolver = SpecifierResolver(context.source_root)
        self.locator = FileLocator()
        self.state = TraversalState()
        self.diagnostics: List[Diagnostic] = []

    def _should_ignore(self, path: Path) -> bool:
        return is_ignored_path(path, self.context.project_root, self.context.exclude_dirs)

    def _record(self, path: Path, stage: str, message: str):
        diagnostic = Diagnostic(file=self.alias(path), stage=stage, message=message)
        logger.debug(f"Skipped during {stage} of {diagnostic.file}: {message}")
        self.diagnostics.append(diagnostic)

    def alias(self, path: Path) -> str:
        return to_alias_path(path, self.context.source_root, self.context.project_root)

    def track(self, file_path: Union[str, Path], depth: int = 0) -> None:
        """Track a file and, recursively, everything it references."""
        if depth > self.context.max_depth:
            return

        path = Path(os.path.normpath(os.path.join(self.context.project_root, file_path)))
        if self._should_ignore(path):
            return

        actual = self.locator.locate(path)
        if actual is None or actual in self.state.visited or self._should_ignore(actual):
            return

        self.state.visited.add(actual)
        dependencies = self.state.graph.setdefault(actual, [])

        kind = FileKind.from_path(actual)
        self._expand(actual, kind, dependencies, depth)

        if kind is FileKind.CODE:
            self._link_companions(actual, dependencies, depth)

    def _expand(self, path: Path, kind: FileKind, dependencies: List[Path], depth: int):
        try:
            content = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            self._record(path, "read", str(e))
            return

        try:
            references = self.extractor.extract(content, kind)
        except Exception as e:
            self._record(path, "extract", str(e))
            return

        for reference in references:
            try:
                candidate = self.resolver.resolve(reference, path)
                if candidate is None:
                    continue

                found = self.locator.locate(candidate)
                if found is None:
                    self._record(path, "locate", f"cannot find '{reference}'")
                    continue

                if self._should_ignore(found):
                    continue

                dependencies.append(found)
                self.track(found, depth + 1)
            except Exception as e:
                self._record(path, "resolve", f"'{reference}': {e}")

    def _link_companions(self, path: Path, dependencies: List[Path], depth: int):
        """Link Foo.less / Foo.css next to Foo.jsx even without an import."""
        for ext in STYLE_EXTENSIONS:
            companion = path.with_suffix(ext)
            try:
                if not companion.is_file() or companion in dependencies:
                    continue
                if self._should_ignore(companion):
                    continue
                dependencies.append(companion)
                self.track(companion, depth + 1)
            except Exception as e:
                self._record(path, "companion", f"'{companion.name}': {e}")

    def get_dependency_graph(self) -> DependencyGraph:
        """Return the graph keyed by alias identifiers with sorted dependency lists."""
        graph = {}
        for path, dependencies in self.state.graph.items():
            graph[self.alias(path)] = sorted(self.alias(dep) for dep in dependencies)
        return graph

    def get_statistics(self) -> Statistics:
        stats = Statistics()
        for path, dependencies in self.state.graph.items():
            ext = path.suffix[1:]
            stats.files_by_type[ext if ext in FILE_TYPES else "other"] += 1
            stats.total_dependencies += len(dependencies)
        stats.total_files = len(self.state.graph)
        return stats

    def get_entry_identifier(self, entry: Path) -> str:
        try:
            return entry.relative_to(self.context.project_root).as_posix()
        except ValueError:
            return entry.as_posix()

    def reset(self):
        """Clear traversal state so the tracker can be reused."""
        self.state = TraversalState()
        self.diagnostics = []
