"""Tree generation service.

Fills unspecified options from persisted config, assembles the ignore matcher,
normalizes the selection, and runs the mode's builder.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from pathlib import Path

from . import config
from .ignore import build_ignore_matcher
from .logs import LoggingReporter
from .tree_model.build import TreeBuildResult, make_tree_builder
from .tree_model.reporting import TraversalReporter
from .tree_model.selection import normalize_relative_path
from .tree_model.truncation import TruncationHeuristics, TruncationLimits


def normalize_selected_paths(
    root: Path,
    selected_paths: Iterable[str],
    reporter: TraversalReporter | None = None,
) -> list[str]:
    """Return root-relative posix paths for ``selected_paths``.

    Absolute paths inside ``root`` are made relative; absolute paths outside
    it are dropped with a warning. Duplicates are removed, order preserved.
    """
    resolved_root = root.resolve()
    normalized: dict[str, None] = {}
    for raw in selected_paths:
        candidate = Path(raw)
        if candidate.is_absolute():
            try:
                relative = candidate.resolve().relative_to(resolved_root).as_posix()
            except ValueError:
                if reporter is not None:
                    reporter.warning(f"Ignoring selected path outside root: {raw}")
                continue
        else:
            relative = str(raw)
        path = normalize_relative_path(relative)
        if path:
            normalized.setdefault(path, None)
    return list(normalized)


def generate_tree(
    root: Path | str,
    *,
    mode: str = "directory",
    selected_paths: Iterable[str] = (),
    ignore_patterns: Iterable[str] | None = None,
    use_gitignore: bool | None = None,
    limits: TruncationLimits | None = None,
    heuristics: TruncationHeuristics | None = None,
    reporter: TraversalReporter | None = None,
    workers: int | None = None,
    fs_timeout: float | None = None,
    cancel_event: threading.Event | None = None,
) -> TreeBuildResult:
    """Build the pruned tree of ``root`` in ``mode``.

    ``None`` options are read from config. Raises ``ValueError`` for an
    unknown mode and ``TraversalCancelled`` when ``cancel_event`` fires.
    """
    root_path = Path(root)
    reporter = reporter or LoggingReporter()
    limits = limits or config.load_tree_limits(mode)
    heuristics = heuristics or config.load_truncation_heuristics()
    patterns = tuple(ignore_patterns) if ignore_patterns is not None else config.load_ignore_patterns()
    if use_gitignore is None:
        use_gitignore = config.load_use_gitignore()
    if workers is None:
        workers = config.load_worker_count()
    if fs_timeout is None:
        fs_timeout = config.load_fs_timeout()

    reporter.start_operation("generateTree")
    try:
        matcher = build_ignore_matcher(root_path, patterns, use_gitignore=use_gitignore)
        selection = normalize_selected_paths(root_path, selected_paths, reporter)
        builder = make_tree_builder(
            mode,
            limits,
            heuristics,
            workers=workers,
            fs_timeout=fs_timeout,
            reporter=reporter,
        )
        result = builder.build(root_path, matcher, selection, cancel_event=cancel_event)
        reporter.debug(
            f"{len(result.file_paths)} files, {len(result.truncated_directories)} truncated directories"
        )
        return result
    finally:
        reporter.end_operation("generateTree")


__all__ = [
    "normalize_selected_paths",
    "generate_tree",
]
