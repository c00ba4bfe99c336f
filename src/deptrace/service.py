"""Analysis entry points shared by the CLI and the watch mode."""

import dataclasses
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from .exceptions import DeptraceError, EntryFileError, ProjectRootError
from .merger import merge_results
from .models import (
    COMMON_ENTRIES,
    IGNORED_DIRS,
    AnalysisRequest,
    AnalysisResult,
    BatchRequest,
    BatchResult,
    DirectoryNode,
    EntryError,
    EntryValidation,
    ProjectContext,
)
from .resolver import FileLocator
from .tracker import DependencyTracker
from .tree import build_directory_tree, render_tree

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _absolute(path: PathLike, root: Path) -> Path:
    return Path(os.path.normpath(os.path.join(root, path)))


def analyze_dependencies(request: AnalysisRequest) -> AnalysisResult:
    """Trace one entry file and render its graph.

    Raises:
        ProjectRootError: if the project root is not a directory.
        EntryFileError: if the entry is missing, not a file or unreadable.
    """
    context = ProjectContext.create(
        request.project_root,
        max_depth=request.max_depth,
        exclude_dirs=request.exclude_dirs,
    )
    if not context.project_root.is_dir():
        raise ProjectRootError(f"Project root is not a directory: {context.project_root}")

    entry_path = _absolute(request.entry_file, context.project_root)
    if not entry_path.exists():
        raise EntryFileError(str(entry_path))
    if not entry_path.is_file():
        raise EntryFileError(str(entry_path), "is not a file")
    if not os.access(entry_path, os.R_OK):
        raise EntryFileError(str(entry_path), "is not readable")

    logger.info(f"Analysing {entry_path} (project root {context.project_root})")

    tracker = DependencyTracker(context)
    tracker.track(entry_path)

    dependency_graph = tracker.get_dependency_graph()
    tree = build_directory_tree(dependency_graph, root_name=context.source_root.name or "src")
    result = AnalysisResult(
        entry_file=tracker.get_entry_identifier(entry_path),
        dependency_graph=dependency_graph,
        directory_tree=render_tree(tree, max_depth=request.tree_depth, show_deps=request.show_deps),
        statistics=tracker.get_statistics(),
        diagnostics=list(tracker.diagnostics),
    )

    logger.info(
        f"Finished {result.entry_file}: {result.statistics.total_files} files, "
        f"{len(result.diagnostics)} skipped references"
    )
    return result


def is_file_in_project(file_path: PathLike, project_root: PathLike) -> bool:
    """Check whether a path is the project root or lies beneath it."""
    normalized_file = os.path.abspath(file_path)
    normalized_root = os.path.abspath(project_root)
    return normalized_file == normalized_root or normalized_file.startswith(
        normalized_root.rstrip(os.sep) + os.sep
    )


def validate_entry_files(
    entries: Iterable[str], project_root: Optional[PathLike] = None
) -> EntryValidation:
    """Split entries into valid (existing, inside the project) and invalid ones.

    Without a project root every non-empty entry is accepted unchecked.
    Valid entries are returned as absolute paths, invalid ones as given.
    """
    validation = EntryValidation()

    if not project_root:
        validation.valid_entries = [e.strip() for e in entries if e.strip()]
        return validation

    root = Path(os.path.abspath(project_root))
    for entry in entries:
        trimmed = entry.strip()
        if not trimmed:
            continue

        entry_path = _absolute(trimmed, root)
        if entry_path.exists() and is_file_in_project(entry_path, root):
            validation.valid_entries.append(str(entry_path))
        else:
            validation.invalid_entries.append(trimmed)

    return validation


def _analyze_entry(
    request: BatchRequest, entry: str
) -> Tuple[Optional[AnalysisResult], Optional[EntryError]]:
    try:
        return analyze_dependencies(request.for_entry(entry)), None
    except Exception as e:
        logger.error(f"Failed to analyse {entry}: {e}")
        return None, EntryError(entry=entry, error=str(e))


def _run_entries(request: BatchRequest, entries: Sequence[str]):
    # Each call builds its own tracker, so workers never share traversal state
    if request.workers > 1 and len(entries) > 1:
        with ThreadPoolExecutor(max_workers=request.workers) as executor:
            return list(executor.map(lambda entry: _analyze_entry(request, entry), entries))
    return [_analyze_entry(request, entry) for entry in entries]


def analyze_batch(request: BatchRequest) -> BatchResult:
    """Analyse several entry files and merge whatever succeeded."""
    if not request.entries:
        raise DeptraceError("No entry files given")

    project_root = Path(os.path.abspath(request.project_root or Path.cwd()))
    request = dataclasses.replace(request, project_root=project_root)

    validation = validate_entry_files(request.entries, project_root)
    if not validation.valid_entries:
        return BatchResult(
            success=False,
            message="No valid entry files",
            invalid_entries=validation.invalid_entries,
        )

    results: List[AnalysisResult] = []
    errors: List[EntryError] = []
    for result, error in _run_entries(request, validation.valid_entries):
        if error is not None:
            errors.append(error)
        else:
            results.append(result)

    if not results:
        return BatchResult(
            success=False,
            message="All entry files failed to analyse",
            invalid_entries=validation.invalid_entries,
            errors=errors,
        )

    return BatchResult(
        success=True,
        data=merge_results(results),
        invalid_entries=validation.invalid_entries,
        errors=errors,
    )


def find_entry_file(
    project_root: PathLike,
    entry_hint: Optional[str] = None,
    candidates: Iterable[str] = COMMON_ENTRIES,
) -> Optional[Path]:
    """Locate an entry file from a hint or the usual index/main names."""
    root = Path(project_root)

    if entry_hint:
        entry_path = root / entry_hint.lstrip("/.")
        if entry_path.is_file():
            return entry_path

        # Allow extensionless hints and directories with an index file
        found = FileLocator().locate(entry_path)
        if found:
            return found

    for candidate in candidates:
        entry_path = root / candidate
        if entry_path.is_file():
            return entry_path

    return None


def get_directory_tree(
    directory: PathLike,
    max_depth: int = 5,
    ignored_dirs: Iterable[str] = IGNORED_DIRS,
    current_depth: int = 0,
) -> Optional[DirectoryNode]:
    """Return the folder-only structure of a directory, sorted by name."""
    if current_depth >= max_depth:
        return None

    directory = Path(directory)
    ignored = set(ignored_dirs)
    node = DirectoryNode(name=directory.name, path=str(directory))

    try:
        entries = list(directory.iterdir())
    except OSError as e:
        logger.debug(f"Cannot list {directory}: {e}")
        return node

    for entry in entries:
        if entry.name in ignored:
            continue
        try:
            if not entry.is_dir():
                continue
        except OSError:
            continue

        child = get_directory_tree(entry, max_depth, ignored, current_depth + 1)
        if child:
            node.children.append(child)

    node.children.sort(key=lambda child: child.name)
    return node


def get_directory_structure(
    directory: PathLike, max_depth: int = 2, current_depth: int = 0, prefix: str = ""
) -> List[str]:
    """Short text listing of a directory, used in 'no entry found' hints."""
    if current_depth >= max_depth:
        return []

    items: List[str] = []
    try:
        names = sorted(os.listdir(directory))
    except OSError as e:
        logger.debug(f"Cannot list {directory}: {e}")
        return items

    # Only the first 10 entries per directory
    for name in names[:10]:
        full_path = os.path.join(directory, name)
        is_dir = os.path.isdir(full_path)
        marker = "📁" if is_dir else "📄"
        items.append(f"{prefix}{marker} {name}{'/' if is_dir else ''}")

        if is_dir and current_depth < max_depth - 1:
            items.extend(get_directory_structure(full_path, max_depth, current_depth + 1, prefix + "  "))

    return items
