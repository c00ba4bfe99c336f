"""Tests for the command-line interface."""

import json
from pathlib import Path

from typer.testing import CliRunner

from deptrace import __version__
from deptrace.cli import app
from deptrace.config import ConfigManager

runner = CliRunner()

PROJECT = {
    "src/index.js": "import a from './a';\nimport c from '@/b/c';\n",
    "src/a.ts": "",
    "src/b/c.js": "",
}


def _write(root: Path, files):
    for name, content in files.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)


def test_version():
    """Test --version."""
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_analyze_writes_report(tmp_path):
    """Test analysing an explicit entry file."""
    _write(tmp_path, PROJECT)

    result = runner.invoke(app, ["analyze", "src/index.js", "-p", str(tmp_path), "-t", "Deps"])

    assert result.exit_code == 0
    assert "Report saved" in result.stdout
    report = (tmp_path / "dependency-report.md").read_text()
    assert report.startswith("# Deps\n")
    assert "- **Total files**: 3" in report


def test_analyze_json(tmp_path):
    """Test --json output."""
    _write(tmp_path, PROJECT)

    result = runner.invoke(app, ["analyze", "src/index.js", "-p", str(tmp_path), "--json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["success"] is True
    assert payload["data"]["statistics"]["totalFiles"] == 3
    assert payload["data"]["dependencyGraph"]["@/index.js"] == ["@/a.ts", "@/b/c.js"]
    assert not (tmp_path / "dependency-report.md").exists()


def test_analyze_detects_entry(tmp_path):
    """Without entries a common entry file is used."""
    _write(tmp_path, PROJECT)

    result = runner.invoke(app, ["analyze", "-p", str(tmp_path), "-o", "docs/deps.md"])

    assert result.exit_code == 0
    assert "Using entry file" in result.stdout
    assert (tmp_path / "docs" / "deps.md").exists()


def test_analyze_without_entry(tmp_path):
    """Fails with a structure hint when no entry can be found."""
    _write(tmp_path, {"lib/util.js": ""})

    result = runner.invoke(app, ["analyze", "-p", str(tmp_path)])

    assert result.exit_code == 1
    assert "No entry file" in result.stdout
    assert "lib/" in result.stdout


def test_analyze_invalid_entries(tmp_path):
    """Fails when no entry is valid."""
    _write(tmp_path, PROJECT)

    result = runner.invoke(app, ["analyze", "src/missing.js", "-p", str(tmp_path)])

    assert result.exit_code == 1
    assert "No valid entry files" in result.stdout


def test_validate(tmp_path):
    """Test the validate command."""
    _write(tmp_path, PROJECT)

    result = runner.invoke(app, ["validate", "src/index.js", "nope.js", "-p", str(tmp_path)])
    assert result.exit_code == 0
    assert "nope.js" in result.stdout

    result = runner.invoke(app, ["validate", "nope.js", "-p", str(tmp_path)])
    assert result.exit_code == 1


def test_tree_json(tmp_path):
    """Test the folder probe as JSON."""
    _write(tmp_path, {"src/components/a.js": "", "node_modules/x/index.js": ""})

    result = runner.invoke(app, ["tree", str(tmp_path), "--json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert [c["name"] for c in payload["children"]] == ["src"]


def test_tree(tmp_path):
    """Test the rich folder tree."""
    _write(tmp_path, {"src/components/a.js": ""})

    result = runner.invoke(app, ["tree", str(tmp_path)])

    assert result.exit_code == 0
    assert "components/" in result.stdout


def test_config_set_and_reset():
    """Test persisting and resetting settings."""
    result = runner.invoke(app, ["config", "--set", "max_depth=7"])
    assert result.exit_code == 0
    assert "max_depth" in result.stdout
    assert ConfigManager().global_config.max_depth == 7

    result = runner.invoke(app, ["config", "--reset"])
    assert result.exit_code == 0
    assert ConfigManager().global_config.max_depth == 30


def test_config_rejects_bad_values():
    """Unknown keys, bad values and malformed pairs fail."""
    assert runner.invoke(app, ["config", "--set", "colour=blue"]).exit_code == 1
    assert runner.invoke(app, ["config", "--set", "workers=0"]).exit_code == 1
    assert runner.invoke(app, ["config", "--set", "max_depth"]).exit_code == 1
