"""Path-level helpers over built trees: flattening, truncation checks, rebasing."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace

from .selection import normalize_relative_path
from .types import DirectoryNode, FileNode, PlaceholderNode, TreeNode, join_relative


def flatten_file_paths(node: TreeNode) -> list[str]:
    """Return file paths of ``node`` in render order, skipping placeholders."""
    seen: dict[str, None] = {}
    stack: list[TreeNode] = [node]
    while stack:
        current = stack.pop()
        if isinstance(current, FileNode):
            seen.setdefault(current.path, None)
        elif isinstance(current, DirectoryNode):
            stack.extend(reversed(current.children))
    return list(seen)


def is_inside_truncated_dir(path: str, truncated_directories: Iterable[str]) -> bool:
    """Return whether ``path`` equals or lies below a truncated directory."""
    normalized = normalize_relative_path(path)
    for truncated in truncated_directories:
        if normalized == truncated or normalized.startswith(f"{truncated}/"):
            return True
    return False


def filter_loadable_paths(paths: Iterable[str], truncated_directories: Iterable[str]) -> list[str]:
    """Drop paths whose content lives inside a truncated directory."""
    truncated = tuple(truncated_directories)
    return [path for path in paths if not is_inside_truncated_dir(path, truncated)]


def _rebase(path: str, prefix: str) -> str:
    return join_relative(prefix, path) if path else prefix


def rebase_tree(node: TreeNode, prefix: str) -> TreeNode:
    """Return a copy of ``node`` with every relative path moved below ``prefix``.

    Intended for subtrees built against their own root. ``node`` is left
    untouched; an empty ``prefix`` returns it unchanged.
    """
    prefix = normalize_relative_path(prefix)
    if not prefix:
        return node
    if isinstance(node, DirectoryNode):
        return replace(
            node,
            path=_rebase(node.path, prefix),
            children=tuple(rebase_tree(child, prefix) for child in node.children),
        )
    if isinstance(node, PlaceholderNode):
        return replace(
            node,
            path=_rebase(node.path, prefix) if node.path else "",
            anchor=_rebase(node.anchor, prefix) if node.anchor else "",
        )
    return replace(node, path=_rebase(node.path, prefix))


__all__ = [
    "flatten_file_paths",
    "is_inside_truncated_dir",
    "filter_loadable_paths",
    "rebase_tree",
]
