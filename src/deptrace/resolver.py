"""Turning textual module references into files on disk."""

import os
from pathlib import Path
from typing import Iterable, Optional

from .models import ALIAS_PREFIX, RESOLVE_EXTENSIONS, SOURCE_ROOT_CANDIDATES


def detect_source_root(project_root: Path) -> Path:
    """Return the first of src/, source/ or lib/ that exists, else the project root."""
    for name in SOURCE_ROOT_CANDIDATES:
        candidate = project_root / name
        if candidate.is_dir():
            return candidate
    return project_root


def to_alias_path(path: Path, source_root: Path, project_root: Path) -> str:
    """Render a tracked file in the identifier form used as graph keys.

    Files under the source root get the ``@/`` prefix, other project files
    are shown relative to the project root and anything else keeps its
    absolute form. Separators are always forward slashes.
    """
    try:
        return ALIAS_PREFIX + path.relative_to(source_root).as_posix()
    except ValueError:
        pass
    try:
        return path.relative_to(project_root).as_posix()
    except ValueError:
        return path.as_posix()


class SpecifierResolver:
    """Maps a reference to a candidate absolute path.

    Only two forms are project-local: the ``@/`` alias, rooted at the source
    root, and ``./`` or ``../`` paths relative to the referencing file.
    Everything else is an external package and resolves to ``None``.
    """

    def __init__(self, source_root: Path):
        self.source_root = source_root

    def resolve(self, reference: str, from_file: Path) -> Optional[Path]:
        if reference.startswith(ALIAS_PREFIX):
            remainder = reference[len(ALIAS_PREFIX):]
            return Path(os.path.normpath(os.path.join(self.source_root, remainder)))

        if reference.startswith("./") or reference.startswith("../"):
            return Path(os.path.normpath(os.path.join(from_file.parent, reference)))

        return None


class FileLocator:
    """Finds the concrete file behind a candidate path."""

    def __init__(self, extensions: Iterable[str] = RESOLVE_EXTENSIONS):
        self.extensions = tuple(extensions)

    def locate(self, candidate: Path) -> Optional[Path]:
        if candidate.is_file():
            return candidate

        for ext in self.extensions:
            with_ext = Path(f"{candidate}{ext}")
            if with_ext.is_file():
                return with_ext

        if candidate.is_dir():
            for ext in self.extensions:
                index_file = candidate / f"index{ext}"
                if index_file.is_file():
                    return index_file

        return None
