"""Domain datatypes for pruned file trees and their placeholder rows."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FileNode:
    """One visible file, addressed by its posix path relative to the root."""

    name: str
    path: str


@dataclass(frozen=True)
class DirectoryNode:
    """Directory with sorted children; the traversal root has ``path == ""``."""

    name: str
    path: str
    children: tuple["TreeNode", ...] = ()


@dataclass(frozen=True)
class PlaceholderNode:
    """Synthetic row standing in for entries that are not rendered individually.

    ``anchor`` is the relative path of the (first) entry the placeholder
    replaces, and decides where the row sorts among its siblings. ``path`` is
    only set for placeholders that collapse exactly one entry.
    """

    name: str
    path: str
    aggregate_count: int
    skipped_entries: int = 1
    anchor: str = ""
    anchor_is_dir: bool = True
    capped: bool = False


TreeNode = DirectoryNode | FileNode | PlaceholderNode


def basename(relative_path: str) -> str:
    """Return the last segment of a posix relative path."""
    return relative_path.rsplit("/", 1)[-1]


def join_relative(parent: str, name: str) -> str:
    """Join ``name`` below ``parent``, where ``""`` is the root."""
    return f"{parent}/{name}" if parent else name


def folder_placeholder(relative_path: str, count: int, *, capped: bool = False, is_dir: bool = True) -> PlaceholderNode:
    """Placeholder collapsing one whole entry (normally a directory subtree)."""
    shown = f"{count}+" if capped else str(count)
    kind = "folder" if is_dir else "file"
    return PlaceholderNode(
        name=f"[ {basename(relative_path)}: {kind} truncated with {shown} entries ]",
        path=relative_path,
        aggregate_count=count,
        skipped_entries=1,
        anchor=relative_path,
        anchor_is_dir=is_dir,
        capped=capped,
    )


def skipped_items_placeholder(anchor: str, anchor_is_dir: bool, items: int, total: int) -> PlaceholderNode:
    """Placeholder summarizing several consecutive skipped siblings."""
    return PlaceholderNode(
        name=f"[ … {items} items truncated with {total} entries … ]",
        path="",
        aggregate_count=total,
        skipped_entries=items,
        anchor=anchor,
        anchor_is_dir=anchor_is_dir,
    )


def child_sort_key(node: TreeNode) -> tuple[bool, str, str]:
    """Directories first, then case-insensitive name, then exact path."""
    if isinstance(node, PlaceholderNode):
        is_dir = node.anchor_is_dir
        key_path = node.anchor
    else:
        is_dir = isinstance(node, DirectoryNode)
        key_path = node.path
    return (not is_dir, basename(key_path).lower(), key_path)


def sorted_children(children: list[TreeNode]) -> tuple[TreeNode, ...]:
    """Return ``children`` in canonical sibling order."""
    return tuple(sorted(children, key=child_sort_key))


__all__ = [
    "FileNode",
    "DirectoryNode",
    "PlaceholderNode",
    "TreeNode",
    "basename",
    "join_relative",
    "folder_placeholder",
    "skipped_items_placeholder",
    "child_sort_key",
    "sorted_children",
]
