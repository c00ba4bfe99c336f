"""Custom exceptions for deptrace."""


class DeptraceError(Exception):
    """Base exception for all deptrace errors."""


class EntryFileError(DeptraceError):
    """Raised when an entry file is missing, not a file or unreadable."""

    def __init__(self, path: str, reason: str = "does not exist"):
        self.path = path
        self.reason = reason
        super().__init__(f"Entry file {reason}: {path}")


class ProjectRootError(DeptraceError):
    """Raised when the project root is missing or not a directory."""


class EmptyMergeError(DeptraceError):
    """Raised when there are no analysis results to merge."""
