"""ASCII rendering for pruned trees."""

from __future__ import annotations

from .types import DirectoryNode, TreeNode

BRANCH = "├─ "
LAST_BRANCH = "└─ "
CONTINUATION = "│   "
LAST_CONTINUATION = "    "


def render_ascii_tree(node: TreeNode, prefix: str = "") -> str:
    """Render the children of ``node`` as connector-prefixed lines."""
    if not isinstance(node, DirectoryNode):
        return ""
    lines: list[str] = []
    last_index = len(node.children) - 1
    for index, child in enumerate(node.children):
        last = index == last_index
        lines.append(f"{prefix}{LAST_BRANCH if last else BRANCH}{child.name}\n")
        if isinstance(child, DirectoryNode):
            lines.append(render_ascii_tree(child, prefix + (LAST_CONTINUATION if last else CONTINUATION)))
    return "".join(lines)


def render_tree_document(ascii_tree: str, root_label: str) -> str:
    """Prefix rendered tree lines with a root label line."""
    label = root_label if root_label.endswith("/") else f"{root_label}/"
    return f"{label}\n{ascii_tree}"


__all__ = [
    "render_ascii_tree",
    "render_tree_document",
]
