"""Bounded descendant counting for truncation decisions.

Counting stops as soon as the running total reaches its limit, so judging a
pathological subtree (a dependency cache, a build output) costs O(limit)
listings rather than O(real size).
"""

from __future__ import annotations

import os
from collections.abc import Iterator

from ..ignore import IgnoreMatcher
from .entries import DirectoryEntryProvider, ListedEntry
from .types import join_relative


def ignore_query(relative_path: str, is_dir: bool) -> str:
    """Return the matcher query for an entry; directories carry a trailing slash."""
    return f"{relative_path}/" if is_dir else relative_path


def is_link_or_ignored(entry: ListedEntry, relative_path: str, ignore_matcher: IgnoreMatcher) -> bool:
    """Return whether ``entry`` is skipped by every traversal step."""
    if entry.is_symlink:
        return True
    return ignore_matcher.ignores(ignore_query(relative_path, entry.is_dir))


class DescendantCounter:
    """Iterative filtered counter over one traversal's cached listings."""

    def __init__(self, provider: DirectoryEntryProvider, ignore_matcher: IgnoreMatcher) -> None:
        self._provider = provider
        self._ignore_matcher = ignore_matcher

    def _walk(self, dir_abs: str, dir_rel: str) -> Iterator[tuple[str, str, ListedEntry]]:
        """Yield ``(abs, rel, entry)`` for filtered descendants, depth-first."""
        stack: list[tuple[str, str]] = [(dir_abs, dir_rel)]
        while stack:
            current_abs, current_rel = stack.pop()
            for entry in self._provider.list_entries(current_abs):
                child_abs = os.path.join(current_abs, entry.name)
                child_rel = join_relative(current_rel, entry.name)
                if is_link_or_ignored(entry, child_rel, self._ignore_matcher):
                    continue
                yield child_abs, child_rel, entry
                if entry.is_dir:
                    stack.append((child_abs, child_rel))

    def count(self, dir_abs: str, dir_rel: str, limit: int) -> int:
        """Count filtered descendants below ``dir_abs``, stopping at ``limit``."""
        if limit <= 0:
            return 0
        total = 0
        for _abs, _rel, _entry in self._walk(dir_abs, dir_rel):
            total += 1
            if total >= limit:
                break
        return total

    def collect_files(self, dir_abs: str, dir_rel: str, limit: int) -> frozenset[str] | None:
        """Return relative paths of real files below ``dir_abs``.

        Returns ``None`` once more than ``limit`` files have been seen.
        """
        files: set[str] = set()
        for _abs, child_rel, entry in self._walk(dir_abs, dir_rel):
            if not entry.is_file:
                continue
            files.add(child_rel)
            if len(files) > limit:
                return None
        return frozenset(files)


__all__ = [
    "ignore_query",
    "is_link_or_ignored",
    "DescendantCounter",
]
