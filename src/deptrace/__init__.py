"""
Deptrace - dependency graphs for JavaScript/TypeScript projects.

Follows the module references of one or more entry files and renders the
result as a graph, a directory tree and a Markdown report.
"""

__version__ = "0.1.0"

from .exceptions import DeptraceError, EntryFileError, ProjectRootError
from .merger import merge_results
from .models import AnalysisRequest, AnalysisResult, BatchRequest, BatchResult, MergedResult
from .monitor import ReportWatcher
from .service import (
    analyze_batch,
    analyze_dependencies,
    find_entry_file,
    validate_entry_files,
)
from .tracker import DependencyTracker

__all__ = [
    "AnalysisRequest",
    "AnalysisResult",
    "BatchRequest",
    "BatchResult",
    "DependencyTracker",
    "DeptraceError",
    "EntryFileError",
    "MergedResult",
    "ProjectRootError",
    "ReportWatcher",
    "analyze_batch",
    "analyze_dependencies",
    "find_entry_file",
    "merge_results",
    "validate_entry_files",
    "__version__",
]
