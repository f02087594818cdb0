"""Heavy and smart truncation of one directory's measured children.

Heavy truncation collapses a whole oversized child subtree into a folder
placeholder. Smart truncation keeps a head and tail sample of the children and
collapses the middle into one placeholder. Children that contain a selected
path are never collapsed by either stage.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from .entries import ListedEntry
from .types import PlaceholderNode, folder_placeholder, skipped_items_placeholder


@dataclass(frozen=True)
class TruncationLimits:
    """Size limits shared by every directory of one builder."""

    max_total_descendants: int = 300
    max_direct_children: int = 40
    max_reported_descendants: int = 10_000

    def __post_init__(self) -> None:
        if self.max_total_descendants < 1:
            raise ValueError("max_total_descendants must be >= 1")
        if self.max_direct_children < 1:
            raise ValueError("max_direct_children must be >= 1")
        if self.max_reported_descendants < self.max_total_descendants:
            raise ValueError("max_reported_descendants must be >= max_total_descendants")


DIRECTORY_MODE_LIMITS = TruncationLimits(max_total_descendants=300, max_direct_children=40)
FILES_MODE_LIMITS = TruncationLimits(max_total_descendants=500, max_direct_children=40)


@dataclass(frozen=True)
class TruncationHeuristics:
    """Tunable constants of the truncation rules.

    ``relative_weight_cutoff`` and ``min_relative_fraction`` drive the relative
    heavy rule; ``head_tail_fraction`` sizes each kept end of a smart-truncated
    directory; ``scale_children_by_weight`` shrinks the direct-children budget
    of directories heavier than ``max_total_descendants``.
    """

    relative_weight_cutoff: float = 0.8
    min_relative_fraction: float = 0.2
    head_tail_fraction: float = 0.5
    scale_children_by_weight: bool = False
    min_scaled_children_fraction: float = 0.1

    def __post_init__(self) -> None:
        if not 0.0 < self.relative_weight_cutoff <= 1.0:
            raise ValueError("relative_weight_cutoff must be in (0, 1]")
        if not 0.0 <= self.min_relative_fraction <= 1.0:
            raise ValueError("min_relative_fraction must be in [0, 1]")
        if not 0.0 < self.head_tail_fraction <= 0.5:
            raise ValueError("head_tail_fraction must be in (0, 0.5]")
        if not 0.0 <= self.min_scaled_children_fraction <= 1.0:
            raise ValueError("min_scaled_children_fraction must be in [0, 1]")


DEFAULT_HEURISTICS = TruncationHeuristics()


@dataclass(frozen=True)
class MeasuredEntry:
    """Relevant directory child with its capped descendant weight."""

    absolute_path: str
    relative_path: str
    descendant_count: int
    entry: ListedEntry
    protected: bool = False

    @property
    def is_dir(self) -> bool:
        return self.entry.is_dir


@dataclass(frozen=True)
class TruncationPlan:
    """Per-entry decisions for one directory.

    ``kept`` preserves sibling order and holds entries rendered individually;
    members of ``heavy`` among them are rendered as folder placeholders.
    ``skipped`` is the collapsed middle slice.
    """

    kept: tuple[MeasuredEntry, ...]
    heavy: frozenset[str] = frozenset()
    skipped: tuple[MeasuredEntry, ...] = ()

    def is_heavy(self, entry: MeasuredEntry) -> bool:
        return entry.relative_path in self.heavy


def total_weight(entries: list[MeasuredEntry] | tuple[MeasuredEntry, ...]) -> int:
    return sum(entry.descendant_count for entry in entries)


class TruncationPolicy:
    """Decide which children of a directory are expanded, collapsed, or skipped."""

    def __init__(
        self,
        limits: TruncationLimits = DIRECTORY_MODE_LIMITS,
        heuristics: TruncationHeuristics = DEFAULT_HEURISTICS,
    ) -> None:
        self.limits = limits
        self.heuristics = heuristics

    def is_heavy(self, entry: MeasuredEntry, sibling_weight: int, *, absolute_only: bool = False) -> bool:
        """Return whether ``entry`` should collapse into a folder placeholder."""
        if not entry.is_dir or entry.protected:
            return False
        count = entry.descendant_count
        if count > self.limits.max_total_descendants:
            return True
        if absolute_only or sibling_weight <= 0:
            return False
        minimum = math.floor(self.limits.max_total_descendants * self.heuristics.min_relative_fraction)
        share = count / sibling_weight
        return count >= minimum and share > self.heuristics.relative_weight_cutoff

    def split_heavy(
        self,
        entries: list[MeasuredEntry],
        *,
        absolute_only: bool = False,
    ) -> tuple[list[MeasuredEntry], list[MeasuredEntry]]:
        """Partition ``entries`` into ``(heavy, remaining)``, keeping order."""
        sibling_weight = total_weight(entries)
        heavy: list[MeasuredEntry] = []
        remaining: list[MeasuredEntry] = []
        for entry in entries:
            if self.is_heavy(entry, sibling_weight, absolute_only=absolute_only):
                heavy.append(entry)
            else:
                remaining.append(entry)
        return heavy, remaining

    def direct_children_budget(self, weight: int) -> int:
        """Return how many children a directory of ``weight`` may show."""
        budget = self.limits.max_direct_children
        if not self.heuristics.scale_children_by_weight:
            return budget
        ratio = weight / self.limits.max_total_descendants
        if ratio <= 1:
            return budget
        return max(
            math.floor(budget / ratio),
            1,
            math.floor(budget * self.heuristics.min_scaled_children_fraction),
        )

    def fits_without_truncation(self, entries: list[MeasuredEntry]) -> bool:
        """Return whether a directory is small enough to expand completely."""
        return (
            len(entries) <= self.limits.max_direct_children
            and total_weight(entries) <= self.limits.max_total_descendants
        )

    def plan(self, entries: list[MeasuredEntry], *, top_level: bool = False) -> TruncationPlan:
        """Apply heavy then smart truncation to sorted ``entries``.

        A traversal's top level keeps every child and only applies the
        absolute heavy rule. Elsewhere heavy children take part in the
        head/tail slicing as already-collapsed rows, and protected children
        are always kept.
        """
        heavy, _remaining = self.split_heavy(entries, absolute_only=top_level)
        heavy_paths = frozenset(entry.relative_path for entry in heavy)
        if top_level:
            return TruncationPlan(kept=tuple(entries), heavy=heavy_paths)

        budget = self.direct_children_budget(total_weight(entries))
        if len(entries) <= budget:
            return TruncationPlan(kept=tuple(entries), heavy=heavy_paths)

        candidates = [entry for entry in entries if not entry.protected]
        take = math.floor(budget * self.heuristics.head_tail_fraction)
        head_count = min(take, len(candidates))
        tail_count = min(take, len(candidates) - head_count)
        head = candidates[:head_count]
        tail = candidates[len(candidates) - tail_count :]
        skipped = candidates[head_count : len(candidates) - tail_count]
        if not skipped:
            return TruncationPlan(kept=tuple(entries), heavy=heavy_paths)

        skipped_paths = {entry.relative_path for entry in skipped}
        kept = tuple(entry for entry in entries if entry.relative_path not in skipped_paths)
        kept_heavy = frozenset(path for path in heavy_paths if path not in skipped_paths)
        return TruncationPlan(kept=kept, heavy=kept_heavy, skipped=tuple(skipped))

    def middle_placeholder(self, skipped: tuple[MeasuredEntry, ...]) -> tuple[PlaceholderNode, str | None]:
        """Build the placeholder for a collapsed middle slice.

        Returns ``(placeholder, truncated_path)``; ``truncated_path`` is set only
        when exactly one entry was skipped, since the aggregate row does not
        name the entries it hides.
        """
        if not skipped:
            raise ValueError("middle placeholder needs at least one skipped entry")
        first = skipped[0]
        if len(skipped) == 1:
            return (
                folder_placeholder(first.relative_path, first.descendant_count, is_dir=first.is_dir),
                first.relative_path,
            )
        return (
            skipped_items_placeholder(
                anchor=first.relative_path,
                anchor_is_dir=first.is_dir,
                items=len(skipped),
                total=total_weight(skipped),
            ),
            None,
        )


__all__ = [
    "TruncationLimits",
    "DIRECTORY_MODE_LIMITS",
    "FILES_MODE_LIMITS",
    "TruncationHeuristics",
    "DEFAULT_HEURISTICS",
    "MeasuredEntry",
    "TruncationPlan",
    "total_weight",
    "TruncationPolicy",
]
