"""Markdown report generation for dependency analyses."""

import json
import logging
import re
from pathlib import Path, PurePosixPath
from typing import Dict, List, Union

from .models import AnalysisResult, DependencyGraph, MergedResult

logger = logging.getLogger(__name__)

Result = Union[AnalysisResult, MergedResult]

FILE_GROUPS = (
    ("JavaScript", {"js", "jsx"}),
    ("TypeScript", {"ts", "tsx"}),
    ("Stylesheets", {"less", "css"}),
    ("Config", {"json"}),
)


def group_files(graph: DependencyGraph) -> Dict[str, List[str]]:
    """Group graph keys by file category, each group sorted."""
    groups: Dict[str, List[str]] = {name: [] for name, _ in FILE_GROUPS}
    groups["Other"] = []

    for file in sorted(graph):
        ext = PurePosixPath(file).suffix[1:]
        for name, extensions in FILE_GROUPS:
            if ext in extensions:
                groups[name].append(file)
                break
        else:
            groups["Other"].append(file)

    return groups


def generate_markdown(result: Result, title: str = "Dependency Graph") -> str:
    """Generate the complete report content."""
    stats = result.statistics
    content = []
    content.append(f"# {title}\n")

    if result.entry_file:
        content.append(f"**Entry file:** `{result.entry_file}`\n")

    # Statistics
    content.append("## Statistics\n")
    content.append(f"- **Total files**: {stats.total_files}")
    content.append(f"- **Total dependencies**: {stats.total_dependencies}")
    content.append("")
    content.append("### File types\n")
    for file_type, count in stats.files_by_type.items():
        if count > 0:
            content.append(f"- **{file_type}**: {count} files")
    content.append("")

    if isinstance(result, MergedResult) and len(result.entry_results) > 1:
        content.append("## Entry files\n")
        for entry in result.entry_results:
            content.append(
                f"- `{entry.entry_file}`: {entry.statistics.total_files} files, "
                f"{entry.statistics.total_dependencies} dependencies"
            )
        content.append("")

    # Directory structure
    if result.directory_tree:
        content.append("## Directory Structure\n")
        content.append("```")
        content.append(result.directory_tree)
        content.append("```\n")

    # Dependency graph
    graph = result.dependency_graph
    content.append("## Dependencies\n")
    content.append("```json")
    content.append(json.dumps(graph, indent=2, ensure_ascii=False))
    content.append("```\n")

    # File list
    content.append("## Files\n")
    content.append(f"Tracked **{len(graph)}** files:\n")
    for group, files in group_files(graph).items():
        if not files:
            continue
        content.append(f"### {group} ({len(files)})\n")
        for file in files:
            content.append(f"- **{file}**")
            deps = graph.get(file) or []
            if deps:
                content.append("  - Depends on: " + ", ".join(f"`{d}`" for d in deps))
            else:
                content.append("  - No dependencies")
            content.append("")

    if result.diagnostics:
        content.append("## Skipped References\n")
        for diagnostic in result.diagnostics:
            content.append(f"- `{diagnostic.file}` ({diagnostic.stage}): {diagnostic.message}")
        content.append("")

    return "\n".join(content)


def update_report(path: Path, content: str) -> bool:
    """Write the report, replacing only its own section in an existing file."""
    try:
        existing_content = ""
        if path.exists():
            with open(path, 'r', encoding='utf-8') as f:
                existing_content = f.read()

            start_marker = content.split("\n", 1)[0]
            marker_match = re.search(rf'(?m)^{re.escape(start_marker)}[ \t]*$', existing_content)
            if marker_match:
                start_pos = marker_match.start()
                # Find the next top-level heading or end of file
                remaining = existing_content[start_pos + len(start_marker):]
                next_section = re.search(r'\n# (?!#)', remaining)

                if next_section:
                    end_pos = start_pos + len(start_marker) + next_section.start()
                    existing_content = existing_content[:start_pos].rstrip() + "\n\n" + existing_content[end_pos:].lstrip()
                else:
                    existing_content = existing_content[:start_pos]

            existing_content = existing_content.strip()
            if existing_content:
                existing_content += "\n\n"

        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(existing_content + content)
        return True
    except OSError as e:
        logger.error(f"Error writing report {path}: {e}")
        return False
