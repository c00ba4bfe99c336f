"""Tests for Markdown report generation."""

import tempfile
from pathlib import Path

from deptrace.merger import merge_results
from deptrace.models import AnalysisResult, Diagnostic, Statistics
from deptrace.report import generate_markdown, group_files, update_report


def _result(entry="src/index.js", graph=None, diagnostics=None):
    graph = graph if graph is not None else {
        "@/index.js": ["@/App.tsx", "@/index.less"],
        "@/App.tsx": [],
        "@/index.less": [],
    }
    stats = Statistics(total_files=len(graph), total_dependencies=sum(len(d) for d in graph.values()))
    stats.files_by_type["js"] = 1
    stats.files_by_type["tsx"] = 1
    stats.files_by_type["less"] = 1
    return AnalysisResult(
        entry_file=entry,
        dependency_graph=graph,
        directory_tree="src/\n├── App.tsx\n├── index.js (2 deps)\n└── index.less",
        statistics=stats,
        diagnostics=diagnostics or [],
    )


def test_group_files():
    """Test grouping of graph keys by file category."""
    groups = group_files({"@/b.js": [], "@/a.jsx": [], "@/x.ts": [], "@/s.css": [], "@/p.json": [], "@/r.md": []})

    assert groups["JavaScript"] == ["@/a.jsx", "@/b.js"]
    assert groups["TypeScript"] == ["@/x.ts"]
    assert groups["Stylesheets"] == ["@/s.css"]
    assert groups["Config"] == ["@/p.json"]
    assert groups["Other"] == ["@/r.md"]


def test_generate_markdown():
    """Test the sections of a single-entry report."""
    content = generate_markdown(_result(), title="My Graph")

    assert content.startswith("# My Graph\n")
    assert "**Entry file:** `src/index.js`" in content
    assert "- **Total files**: 3" in content
    assert "- **Total dependencies**: 2" in content
    assert "- **tsx**: 1 files" in content
    assert "- **ts**:" not in content
    assert "## Directory Structure" in content
    assert '"@/index.js": [' in content
    assert "  - Depends on: `@/App.tsx`, `@/index.less`" in content
    assert "  - No dependencies" in content
    assert "## Entry files" not in content
    assert "## Skipped References" not in content


def test_generate_markdown_merged_with_diagnostics():
    """Merged reports list their entries and skipped references."""
    first = _result("src/a.js", {"@/a.js": []})
    second = _result(
        "src/b.js",
        {"@/b.js": []},
        diagnostics=[Diagnostic(file="@/b.js", stage="locate", message="cannot find './gone'")],
    )

    content = generate_markdown(merge_results([first, second]))

    assert content.startswith("# Dependency Graph\n")
    assert "## Entry files" in content
    assert "- `src/a.js`: 1 files, 0 dependencies" in content
    assert "## Skipped References" in content
    assert "- `@/b.js` (locate): cannot find './gone'" in content


def test_update_report_creates_file():
    """Test writing a new report, including missing parent directories."""
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "docs" / "deps.md"

        assert update_report(path, "# Dependency Graph\n\nbody")
        assert path.read_text() == "# Dependency Graph\n\nbody"


def test_update_report_replaces_own_section():
    """Other top-level sections of an existing file survive an update."""
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "README.md"
        path.write_text(
            "# Notes\n\nkeep me\n\n"
            "# Dependency Graph\n\n## Statistics\n\nold stuff\n\n"
            "# Appendix\n\nalso keep\n"
        )

        assert update_report(path, "# Dependency Graph\n\nnew body")

        content = path.read_text()
        assert "old stuff" not in content
        assert "keep me" in content
        assert "also keep" in content
        assert content.count("# Dependency Graph") == 1
        assert content.endswith("# Dependency Graph\n\nnew body")


def test_update_report_failure():
    """A path that cannot be written returns False."""
    with tempfile.TemporaryDirectory() as tmpdir:
        assert not update_report(Path(tmpdir), "# Dependency Graph\n")
