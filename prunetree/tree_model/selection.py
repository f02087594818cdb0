"""Selected-path index with O(1) ancestor checks.

``ancestor_prefixes`` holds every cumulative prefix of every selected path,
e.g. ``["a/b/c.txt"]`` gives ``{"a", "a/b", "a/b/c.txt"}``.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass


def normalize_relative_path(raw: str) -> str:
    """Convert a user-supplied relative path to canonical posix form."""
    path = raw.replace("\\", "/")
    while path.startswith("./"):
        path = path[2:]
    path = path.strip("/")
    segments = [segment for segment in path.split("/") if segment and segment != "."]
    return "/".join(segments)


@dataclass(frozen=True)
class SelectionIndex:
    selected_paths: frozenset[str] = frozenset()
    ancestor_prefixes: frozenset[str] = frozenset()

    @classmethod
    def build(cls, paths: Iterable[str]) -> SelectionIndex:
        selected: set[str] = set()
        prefixes: set[str] = set()
        for raw in paths:
            path = normalize_relative_path(raw)
            if not path:
                continue
            selected.add(path)
            prefix = ""
            for segment in path.split("/"):
                prefix = f"{prefix}/{segment}" if prefix else segment
                prefixes.add(prefix)
        return cls(selected_paths=frozenset(selected), ancestor_prefixes=frozenset(prefixes))

    @property
    def is_active(self) -> bool:
        return bool(self.selected_paths)

    def is_selected(self, path: str) -> bool:
        return path in self.selected_paths

    def is_ancestor_of(self, dir_path: str) -> bool:
        """Return whether ``dir_path`` is a prefix of some selected path."""
        return dir_path in self.ancestor_prefixes

    def has_selection_inside(self, dir_path: str) -> bool:
        """Return whether ``dir_path`` is selected or contains a selected path.

        The root (``""``) contains every non-empty selection.
        """
        if not dir_path:
            return self.is_active
        # Every selected path and every parent segment of it is a prefix.
        return dir_path in self.ancestor_prefixes

    def selected_under(self, dir_path: str) -> frozenset[str]:
        """Return selected paths equal to or below ``dir_path``."""
        if not dir_path:
            return self.selected_paths
        nested_prefix = f"{dir_path}/"
        return frozenset(
            path for path in self.selected_paths if path == dir_path or path.startswith(nested_prefix)
        )


__all__ = [
    "normalize_relative_path",
    "SelectionIndex",
]
