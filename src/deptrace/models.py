"""Data models for deptrace."""

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

ALIAS_PREFIX = "@/"
SOURCE_ROOT_CANDIDATES = ("src", "source", "lib")

# Preference order for references written without an extension.
RESOLVE_EXTENSIONS = (".js", ".jsx", ".ts", ".tsx", ".less", ".css", ".json")
STYLE_EXTENSIONS = (".less", ".css")
FILE_TYPES = ("js", "jsx", "ts", "tsx", "less", "css")

DEPENDENCY_DIRS = ("node_modules",)
IGNORED_DIRS = ("node_modules", ".git", ".svn", ".idea", "dist", "build")
COMMON_ENTRIES = (
    "src/index.js", "src/index.jsx", "src/index.ts", "src/index.tsx",
    "index.js", "index.jsx", "index.ts", "index.tsx",
    "main.js", "app.js",
)

DependencyGraph = Dict[str, List[str]]


class FileKind(str, Enum):
    """Kind of tracked file, decides which reference forms are scanned."""

    CODE = "code"
    STYLE = "style"

    @classmethod
    def from_path(cls, path: Path) -> "FileKind":
        return cls.STYLE if path.suffix in STYLE_EXTENSIONS else cls.CODE


def normalize_pattern(pattern: str) -> str:
    """Bring an exclusion pattern into project-relative POSIX form."""
    pattern = pattern.strip().replace("\\", "/")
    while pattern.startswith("./"):
        pattern = pattern[2:]
    return pattern.strip("/")


def is_ignored_path(path: Path, project_root: Path, exclude_dirs: Tuple[str, ...] = ()) -> bool:
    """Check if a path lies outside the project, under node_modules or an excluded directory.

    Exclusion patterns are plain string matches on the project-relative
    path: a prefix (``dist`` also covers ``distribution/x.js``) or a
    ``pattern/`` substring anywhere (``a/dist/x.js``).
    """
    try:
        relative_path = path.relative_to(project_root)
    except ValueError:
        # Path is not under project_root
        return True

    if any(part in DEPENDENCY_DIRS for part in relative_path.parts):
        return True

    relative_str = relative_path.as_posix()
    return any(
        relative_str.startswith(pattern) or f"{pattern}/" in relative_str
        for pattern in exclude_dirs
    )


@dataclass(frozen=True)
class ProjectContext:
    """Immutable configuration for a single analysis run."""

    project_root: Path
    source_root: Path
    max_depth: int = 30
    exclude_dirs: Tuple[str, ...] = ()

    @classmethod
    def create(
        cls,
        project_root: Optional[Path] = None,
        max_depth: int = 30,
        exclude_dirs: Optional[List[str]] = None,
    ) -> "ProjectContext":
        from .resolver import detect_source_root

        root = Path(os.path.abspath(project_root or Path.cwd()))
        patterns = tuple(
            p for p in (normalize_pattern(e) for e in exclude_dirs or []) if p
        )
        return cls(
            project_root=root,
            source_root=detect_source_root(root),
            max_depth=max_depth,
            exclude_dirs=patterns,
        )


@dataclass
class TraversalState:
    """Visited set and adjacency map owned by one tracker run."""

    visited: Set[Path] = field(default_factory=set)
    graph: Dict[Path, List[Path]] = field(default_factory=dict)


@dataclass
class Diagnostic:
    """A recovered failure recorded while expanding a file."""

    file: str
    stage: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"file": self.file, "stage": self.stage, "message": self.message}


def _empty_file_types() -> Dict[str, int]:
    counts = {name: 0 for name in FILE_TYPES}
    counts["other"] = 0
    return counts


@dataclass
class Statistics:
    """Summary counts for a dependency graph."""

    total_files: int = 0
    total_dependencies: int = 0
    files_by_type: Dict[str, int] = field(default_factory=_empty_file_types)

    def to_dict(self) -> Dict:
        return {
            "totalFiles": self.total_files,
            "totalDependencies": self.total_dependencies,
            "filesByType": dict(self.files_by_type),
        }


@dataclass
class FileRecord:
    """Leaf entry of a rendered tree."""

    name: str
    full_path: str
    dep_count: int = 0


@dataclass
class TreeNode:
    """Directory node built from the vertices of a dependency graph."""

    name: str
    full_path: str
    children: Dict[str, "TreeNode"] = field(default_factory=dict)
    files: List[FileRecord] = field(default_factory=list)


@dataclass
class AnalysisResult:
    """Outcome of tracing a single entry file."""

    entry_file: str
    dependency_graph: DependencyGraph
    directory_tree: str
    statistics: Statistics
    diagnostics: List[Diagnostic] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "entryFile": self.entry_file,
            "dependencyGraph": self.dependency_graph,
            "directoryTree": self.directory_tree,
            "statistics": self.statistics.to_dict(),
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }


@dataclass
class MergedResult:
    """Aggregate of several per-entry analyses over one project."""

    entry_file: str
    dependency_graph: DependencyGraph
    directory_tree: str
    statistics: Statistics
    entry_results: List[AnalysisResult] = field(default_factory=list)

    @property
    def diagnostics(self) -> List[Diagnostic]:
        return [d for r in self.entry_results for d in r.diagnostics]

    def to_dict(self) -> Dict:
        return {
            "entryFile": self.entry_file,
            "dependencyGraph": self.dependency_graph,
            "directoryTree": self.directory_tree,
            "statistics": self.statistics.to_dict(),
            "diagnostics": [d.to_dict() for d in self.diagnostics],
            "entryResults": [
                {
                    "entryFile": r.entry_file,
                    "statistics": r.statistics.to_dict(),
                    "dependencyGraph": r.dependency_graph,
                }
                for r in self.entry_results
            ],
        }


@dataclass
class AnalysisRequest:
    """Options for analysing one entry file."""

    entry_file: str
    project_root: Optional[Path] = None
    max_depth: int = 30
    tree_depth: int = 10
    show_deps: bool = True
    exclude_dirs: List[str] = field(default_factory=list)


@dataclass
class BatchRequest:
    """Options for analysing several entry files of one project."""

    entries: List[str]
    project_root: Optional[Path] = None
    max_depth: int = 30
    tree_depth: int = 10
    show_deps: bool = True
    exclude_dirs: List[str] = field(default_factory=list)
    workers: int = 1

    def for_entry(self, entry: str) -> AnalysisRequest:
        return AnalysisRequest(
            entry_file=entry,
            project_root=self.project_root,
            max_depth=self.max_depth,
            tree_depth=self.tree_depth,
            show_deps=self.show_deps,
            exclude_dirs=list(self.exclude_dirs),
        )


@dataclass
class EntryValidation:
    """Partition of candidate entry files."""

    valid_entries: List[str] = field(default_factory=list)
    invalid_entries: List[str] = field(default_factory=list)


@dataclass
class EntryError:
    """An entry whose traversal failed inside a batch."""

    entry: str
    error: str

    def to_dict(self) -> Dict[str, str]:
        return {"entry": self.entry, "error": self.error}


@dataclass
class BatchResult:
    """Outcome of a batch analysis, successful or not."""

    success: bool
    data: Optional[MergedResult] = None
    message: str = ""
    invalid_entries: List[str] = field(default_factory=list)
    errors: List[EntryError] = field(default_factory=list)

    def to_dict(self) -> Dict:
        payload: Dict = {"success": self.success}
        if self.data is not None:
            payload["data"] = self.data.to_dict()
        if self.message:
            payload["message"] = self.message
        payload["invalidEntries"] = list(self.invalid_entries)
        payload["errors"] = [e.to_dict() for e in self.errors]
        return payload


@dataclass
class DirectoryNode:
    """Folder-only node returned by the directory probe."""

    name: str
    path: str
    children: List["DirectoryNode"] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "name": self.name,
            "path": self.path,
            "children": [c.to_dict() for c in self.children],
        }
