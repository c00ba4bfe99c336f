"""Reference extraction from code and stylesheet sources."""

import re
from typing import List, Pattern, Tuple

from .models import FileKind

# Static imports, including side-effect imports such as ``import './a.css'``.
IMPORT_PATTERN = re.compile(
    r"""import\s+(?:(?:\{[^}]*\}|\*\s+as\s+\w+|\w+)"""
    r"""(?:\s*,\s*(?:\{[^}]*\}|\*\s+as\s+\w+|\w+))*\s+from\s+)?['"]([^'"]+)['"]"""
)
REQUIRE_PATTERN = re.compile(r"""require\s*\(['"]([^'"]+)['"]\)""")
DYNAMIC_IMPORT_PATTERN = re.compile(r"""import\s*\([^)]*['"]([^'"]+)['"]""")
# lazy(() => import('...')), optionally with a /* webpackChunkName */ comment.
LAZY_IMPORT_PATTERN = re.compile(
    r"""lazy\s*\(\s*\(\)\s*=>\s*import\s*\("""
    r"""(?:/\*[^*]*(?:\*(?!/)[^*]*)*\*/\s*)?['"]([^'"]+)['"]"""
)

STYLE_IMPORT_PATTERN = re.compile(r"""@import\s+['"]([^'"]+)['"]""")
URL_PATTERN = re.compile(r"""url\s*\(['"]([^'"]+)['"]\)""")

CODE_PATTERNS: Tuple[Pattern, ...] = (
    IMPORT_PATTERN,
    REQUIRE_PATTERN,
    DYNAMIC_IMPORT_PATTERN,
    LAZY_IMPORT_PATTERN,
)
STYLE_PATTERNS: Tuple[Pattern, ...] = (STYLE_IMPORT_PATTERN, URL_PATTERN)


class ReferenceExtractor:
    """Extracts raw module references with regular expressions.

    Each pattern runs over the whole content in turn, so references come out
    grouped by form rather than in source order. A reference matched by two
    forms (a lazy wrapper around a dynamic import) is reported twice.
    """

    def extract(self, content: str, kind: FileKind) -> List[str]:
        if kind is FileKind.STYLE:
            return self.analyze_stylesheet(content)
        return self.analyze_javascript(content)

    @staticmethod
    def _scan(content: str, patterns: Tuple[Pattern, ...]) -> List[str]:
        references = []
        for pattern in patterns:
            for match in pattern.finditer(content):
                if match.group(1):
                    references.append(match.group(1))
        return references

    @staticmethod
    def analyze_javascript(content: str) -> List[str]:
        """Extract import, require, dynamic import and lazy import targets."""
        return ReferenceExtractor._scan(content, CODE_PATTERNS)

    @staticmethod
    def analyze_stylesheet(content: str) -> List[str]:
        """Extract @import and url() targets from LESS/CSS."""
        return ReferenceExtractor._scan(content, STYLE_PATTERNS)
