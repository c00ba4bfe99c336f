"""Directory tree construction and rendering for dependency graphs."""

from typing import List

from .models import ALIAS_PREFIX, DependencyGraph, FileRecord, TreeNode


# Branch for project files that sit beside the source root, not inside it.
PARENT_BRANCH = ".."


def _split_identifier(identifier: str) -> List[str]:
    identifier = identifier.replace("\\", "/")
    if identifier.startswith(ALIAS_PREFIX):
        relative = identifier[len(ALIAS_PREFIX):]
    elif identifier.startswith("./"):
        relative = identifier[2:]
    else:
        relative = f"{PARENT_BRANCH}/{identifier}"
    return [p for p in relative.split("/") if p]


def build_directory_tree(graph: DependencyGraph, root_name: str = "src") -> TreeNode:
    """Build a directory hierarchy from every vertex of the graph.

    Both keys and dependency targets are placed in the tree, so files that
    were referenced but never expanded still show up with a count of 0.
    Project-relative identifiers (files outside the source root) go under
    a ``../`` branch, so their rendered path stays correct.
    """
    root = TreeNode(root_name, root_name)

    vertices = set(graph)
    for dependencies in graph.values():
        vertices.update(dependencies)

    for identifier in sorted(vertices):
        parts = _split_identifier(identifier)
        if not parts or parts == [PARENT_BRANCH]:
            continue

        current = root
        current_path = root_name
        for part in parts[:-1]:
            current_path = f"{current_path}/{part}"
            if part not in current.children:
                current.children[part] = TreeNode(part, current_path)
            current = current.children[part]

        current.files.append(
            FileRecord(
                name=parts[-1],
                full_path=identifier,
                dep_count=len(graph.get(identifier, [])),
            )
        )

    return root


def render_tree(root: TreeNode, max_depth: int = 10, show_deps: bool = True) -> str:
    """Render a tree with box-drawing connectors, directories before files."""
    lines = [f"{root.name}/"]
    _render_node(root, lines, "", 0, max_depth, show_deps)
    return "\n".join(lines)


def _render_node(
    node: TreeNode,
    lines: List[str],
    prefix: str,
    depth: int,
    max_depth: int,
    show_deps: bool,
):
    directories = sorted(node.children.values(), key=lambda child: child.name)
    files = sorted(node.files, key=lambda record: record.name)
    total = len(directories) + len(files)

    for i, child in enumerate(directories):
        # Subtrees past max_depth are dropped without adjusting connectors
        if depth + 1 > max_depth:
            break
        is_last = i == total - 1
        connector = "└── " if is_last else "├── "
        lines.append(f"{prefix}{connector}{child.name}/")
        extension = "    " if is_last else "│   "
        _render_node(child, lines, prefix + extension, depth + 1, max_depth, show_deps)

    for i, record in enumerate(files):
        is_last = i == len(files) - 1
        connector = "└── " if is_last else "├── "
        label = record.name
        if show_deps and record.dep_count > 0:
            label += f" ({record.dep_count} deps)"
        lines.append(f"{prefix}{connector}{label}")
