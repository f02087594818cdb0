"""Pruned tree construction for directory-mode and files-mode traversals.

Both builders walk the filesystem once, bottom-up. Each directory's relevant
children are measured in parallel with a capped descendant count, then either
expanded completely or passed through ``TruncationPolicy``. Relative paths are
threaded down from the traversal root, so every node carries its final path as
soon as it is built.

Per-call state (listing cache, truncated directories, selection) lives in a
``_Traversal`` object, never on the builder, so one builder can serve
concurrent calls.
"""

from __future__ import annotations

import os
import threading
from collections.abc import Iterable
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

from ..ignore import NULL_IGNORE_MATCHER, IgnoreMatcher
from .counting import DescendantCounter, is_link_or_ignored
from .entries import DEFAULT_IO_WORKERS, DirectoryEntryProvider, ListedEntry
from .paths import filter_loadable_paths, flatten_file_paths
from .rendering import render_ascii_tree
from .reporting import NULL_REPORTER, TraversalReporter
from .selection import SelectionIndex
from .truncation import (
    DEFAULT_HEURISTICS,
    DIRECTORY_MODE_LIMITS,
    FILES_MODE_LIMITS,
    MeasuredEntry,
    TruncationHeuristics,
    TruncationLimits,
    TruncationPlan,
    TruncationPolicy,
    total_weight,
)
from .types import (
    DirectoryNode,
    FileNode,
    PlaceholderNode,
    TreeNode,
    basename,
    folder_placeholder,
    join_relative,
    sorted_children,
)

DEFAULT_WORKERS = DEFAULT_IO_WORKERS
BUILDER_MODES = ("directory", "files")


@dataclass(frozen=True)
class BuiltSubtree:
    """A built directory node plus the weight it represents."""

    node: DirectoryNode
    count: int


@dataclass(frozen=True)
class TreeBuildResult:
    """Everything one traversal produces."""

    ascii_tree: str
    tree: DirectoryNode
    truncated_directories: frozenset[str]
    file_paths: tuple[str, ...]

    @property
    def loadable_file_paths(self) -> list[str]:
        """File paths whose content should be read (outside truncated dirs)."""
        return filter_loadable_paths(self.file_paths, self.truncated_directories)


class _Traversal:
    """State scoped to one ``TreeBuilder.build`` call."""

    def __init__(
        self,
        *,
        root_name: str,
        ignore_matcher: IgnoreMatcher,
        selection: SelectionIndex,
        provider: DirectoryEntryProvider,
        measure_pool: ThreadPoolExecutor,
        reporter: TraversalReporter,
    ) -> None:
        self.root_name = root_name
        self.ignore_matcher = ignore_matcher
        self.selection = selection
        self.provider = provider
        self.measure_pool = measure_pool
        self.reporter = reporter
        self.counter = DescendantCounter(provider, ignore_matcher)
        self.truncated: set[str] = set()

    def node_name(self, relative_path: str) -> str:
        return basename(relative_path) if relative_path else self.root_name


class TreeBuilder:
    """Shared traversal algorithm; subclasses pick the selection semantics."""

    mode = "directory"
    default_limits = DIRECTORY_MODE_LIMITS

    def __init__(
        self,
        limits: TruncationLimits | None = None,
        heuristics: TruncationHeuristics | None = None,
        *,
        workers: int = DEFAULT_WORKERS,
        fs_timeout: float | None = None,
        reporter: TraversalReporter | None = None,
    ) -> None:
        if workers < 1:
            raise ValueError("workers must be >= 1")
        self.limits = limits or self.default_limits
        self.heuristics = heuristics or DEFAULT_HEURISTICS
        self.policy = TruncationPolicy(self.limits, self.heuristics)
        self.workers = workers
        self.fs_timeout = fs_timeout
        self.reporter = reporter or NULL_REPORTER

    def build(
        self,
        root: Path | str,
        ignore_matcher: IgnoreMatcher | None = None,
        selected_paths: Iterable[str] = (),
        *,
        cancel_event: threading.Event | None = None,
    ) -> TreeBuildResult:
        """Traverse ``root`` and return the pruned tree and its by-products.

        Raises ``TraversalCancelled`` when ``cancel_event`` is set mid-call.
        """
        root_path = Path(root).resolve()
        root_abs = str(root_path)
        selection = SelectionIndex.build(selected_paths)
        label = f"generateTree:{self.mode}"
        self.reporter.start_operation(label)
        try:
            with DirectoryEntryProvider(
                io_workers=self.workers,
                timeout=self.fs_timeout,
                cancel_event=cancel_event,
                reporter=self.reporter,
            ) as provider:
                measure_pool = ThreadPoolExecutor(
                    max_workers=self.workers,
                    thread_name_prefix="prunetree-measure",
                )
                try:
                    traversal = _Traversal(
                        root_name=root_path.name or root_abs,
                        ignore_matcher=ignore_matcher or NULL_IGNORE_MATCHER,
                        selection=selection,
                        provider=provider,
                        measure_pool=measure_pool,
                        reporter=self.reporter,
                    )
                    subtree = self.build_subtree(traversal, root_abs, "", top_level=True)
                finally:
                    # Running counts only wait on listings, which honor the
                    # deadline and the cancel event.
                    measure_pool.shutdown(wait=True, cancel_futures=True)
        finally:
            self.reporter.end_operation(label)

        tree = subtree.node
        return TreeBuildResult(
            ascii_tree=render_ascii_tree(tree),
            tree=tree,
            truncated_directories=frozenset(traversal.truncated),
            file_paths=tuple(flatten_file_paths(tree)),
        )

    def build_subtree(self, traversal: _Traversal, dir_abs: str, dir_rel: str, *, top_level: bool) -> BuiltSubtree:
        """Build the node for one directory and everything kept below it."""
        relevant = self._relevant_entries(traversal, dir_abs, dir_rel)
        measured = self._measure(traversal, relevant)

        if self._expands_all(traversal, dir_rel, measured, top_level=top_level):
            if top_level:
                plan = self.policy.plan(measured, top_level=True)
            else:
                plan = TruncationPlan(kept=tuple(measured))
        else:
            plan = self.policy.plan(measured)
            if plan.skipped:
                traversal.reporter.debug(
                    f"smart truncation of {dir_rel!r}: kept {len(plan.kept)}, "
                    f"skipped {len(plan.skipped)} of {len(measured)} entries"
                )
        return self._assemble(traversal, dir_rel, plan)

    def _relevant_entries(
        self,
        traversal: _Traversal,
        dir_abs: str,
        dir_rel: str,
    ) -> list[tuple[ListedEntry, str, str]]:
        """Return ``(entry, abs, rel)`` for children that survive filtering."""
        relevant: list[tuple[ListedEntry, str, str]] = []
        for entry in traversal.provider.list_entries(dir_abs):
            child_rel = join_relative(dir_rel, entry.name)
            if is_link_or_ignored(entry, child_rel, traversal.ignore_matcher):
                continue
            if not self._passes_selection(traversal.selection, entry, child_rel):
                continue
            relevant.append((entry, os.path.join(dir_abs, entry.name), child_rel))
        return relevant

    def _passes_selection(self, selection: SelectionIndex, entry: ListedEntry, relative_path: str) -> bool:
        return True

    def _is_protected(self, selection: SelectionIndex, entry: ListedEntry, relative_path: str) -> bool:
        if entry.is_dir:
            return selection.has_selection_inside(relative_path)
        return selection.is_selected(relative_path)

    def _measure(
        self,
        traversal: _Traversal,
        relevant: list[tuple[ListedEntry, str, str]],
    ) -> list[MeasuredEntry]:
        """Weigh every relevant child; directory counts run on the pool."""
        limit = self.limits.max_total_descendants + 1
        futures: dict[str, Future[int]] = {}
        try:
            for entry, child_abs, child_rel in relevant:
                if entry.is_dir:
                    futures[child_rel] = traversal.measure_pool.submit(
                        traversal.counter.count, child_abs, child_rel, limit
                    )
            counts = {child_rel: future.result() for child_rel, future in futures.items()}
        except BaseException:
            for future in futures.values():
                future.cancel()
            raise

        measured = [
            MeasuredEntry(
                absolute_path=child_abs,
                relative_path=child_rel,
                descendant_count=counts[child_rel] if entry.is_dir else 1,
                entry=entry,
                protected=self._is_protected(traversal.selection, entry, child_rel),
            )
            for entry, child_abs, child_rel in relevant
        ]
        measured.sort(key=lambda item: (not item.is_dir, item.entry.name.lower(), item.relative_path))
        return measured

    def _expands_all(
        self,
        traversal: _Traversal,
        dir_rel: str,
        measured: list[MeasuredEntry],
        *,
        top_level: bool,
    ) -> bool:
        return top_level or self.policy.fits_without_truncation(measured)

    def _keeps_subtree(self, traversal: _Traversal, subtree: BuiltSubtree) -> bool:
        return True

    def _assemble(self, traversal: _Traversal, dir_rel: str, plan: TruncationPlan) -> BuiltSubtree:
        children: list[TreeNode] = []
        count = 0
        for entry in plan.kept:
            if plan.is_heavy(entry):
                placeholder = self._heavy_placeholder(traversal, entry)
                traversal.reporter.debug(
                    f"heavy truncation of {entry.relative_path!r} ({placeholder.aggregate_count} entries)"
                )
                traversal.truncated.add(entry.relative_path)
                children.append(placeholder)
                count += placeholder.aggregate_count
            elif entry.is_dir:
                subtree = self.build_subtree(
                    traversal,
                    entry.absolute_path,
                    entry.relative_path,
                    top_level=False,
                )
                if self._keeps_subtree(traversal, subtree):
                    children.append(subtree.node)
                count += subtree.count
            else:
                children.append(FileNode(name=entry.entry.name, path=entry.relative_path))
                count += 1

        if plan.skipped:
            middle, truncated_path = self.policy.middle_placeholder(plan.skipped)
            if truncated_path is not None:
                traversal.truncated.add(truncated_path)
            children.append(middle)
            count += total_weight(plan.skipped)

        node = DirectoryNode(
            name=traversal.node_name(dir_rel),
            path=dir_rel,
            children=sorted_children(children),
        )
        return BuiltSubtree(node=node, count=count)

    def _heavy_placeholder(self, traversal: _Traversal, entry: MeasuredEntry) -> PlaceholderNode:
        """Collapse ``entry``; recount past the measuring cap for the label."""
        count = entry.descendant_count
        capped = False
        if count > self.limits.max_total_descendants:
            reported_limit = self.limits.max_reported_descendants
            count = traversal.counter.count(entry.absolute_path, entry.relative_path, reported_limit + 1)
            if count > reported_limit:
                count = reported_limit
                capped = True
        return folder_placeholder(entry.relative_path, count, capped=capped)


class DirectoryTreeBuilder(TreeBuilder):
    """Whole-directory mode: selection only protects paths from truncation."""


class FilesTreeBuilder(TreeBuilder):
    """Selection mode: only selected files and their ancestors are shown.

    When the selection under a directory covers every real file there, the
    directory is handed to directory mode, which no longer needs to consult
    the selection for filtering.
    """

    mode = "files"
    default_limits = FILES_MODE_LIMITS

    def __init__(
        self,
        limits: TruncationLimits | None = None,
        heuristics: TruncationHeuristics | None = None,
        *,
        workers: int = DEFAULT_WORKERS,
        fs_timeout: float | None = None,
        reporter: TraversalReporter | None = None,
    ) -> None:
        super().__init__(limits, heuristics, workers=workers, fs_timeout=fs_timeout, reporter=reporter)
        self._directory_builder = DirectoryTreeBuilder(
            self.limits,
            self.heuristics,
            workers=workers,
            fs_timeout=fs_timeout,
            reporter=self.reporter,
        )

    def build_subtree(self, traversal: _Traversal, dir_abs: str, dir_rel: str, *, top_level: bool) -> BuiltSubtree:
        if self._selection_covers_directory(traversal, dir_abs, dir_rel):
            traversal.reporter.debug(f"selection covers {dir_rel or '.'!r}; delegating to directory mode")
            return self._directory_builder.build_subtree(traversal, dir_abs, dir_rel, top_level=True)
        return super().build_subtree(traversal, dir_abs, dir_rel, top_level=top_level)

    def _selection_covers_directory(self, traversal: _Traversal, dir_abs: str, dir_rel: str) -> bool:
        """Return whether the selection under ``dir_rel`` is exactly its files."""
        selected = traversal.selection.selected_under(dir_rel)
        if not selected:
            return False
        files = traversal.counter.collect_files(dir_abs, dir_rel, len(selected))
        return bool(files) and files == selected

    def _passes_selection(self, selection: SelectionIndex, entry: ListedEntry, relative_path: str) -> bool:
        if not selection.is_active:
            return True
        if entry.is_dir:
            return selection.is_ancestor_of(relative_path)
        return selection.is_selected(relative_path)

    def _expands_all(
        self,
        traversal: _Traversal,
        dir_rel: str,
        measured: list[MeasuredEntry],
        *,
        top_level: bool,
    ) -> bool:
        if traversal.selection.has_selection_inside(dir_rel):
            return True
        return super()._expands_all(traversal, dir_rel, measured, top_level=top_level)

    def _keeps_subtree(self, traversal: _Traversal, subtree: BuiltSubtree) -> bool:
        node = subtree.node
        return bool(node.children) or traversal.selection.has_selection_inside(node.path)


def make_tree_builder(
    mode: str,
    limits: TruncationLimits | None = None,
    heuristics: TruncationHeuristics | None = None,
    **options: object,
) -> TreeBuilder:
    """Return the builder for ``mode`` (``"directory"`` or ``"files"``)."""
    if mode == "directory":
        return DirectoryTreeBuilder(limits, heuristics, **options)
    if mode == "files":
        return FilesTreeBuilder(limits, heuristics, **options)
    raise ValueError(f"unknown tree mode {mode!r}; expected one of {', '.join(BUILDER_MODES)}")


__all__ = [
    "DEFAULT_WORKERS",
    "BUILDER_MODES",
    "BuiltSubtree",
    "TreeBuildResult",
    "TreeBuilder",
    "DirectoryTreeBuilder",
    "FilesTreeBuilder",
    "make_tree_builder",
]
