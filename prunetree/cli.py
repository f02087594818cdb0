"""Command-line front door for prunetree.

Parses CLI options, resolves the target directory, and prints its pruned
tree. Passing ``--select`` switches to files mode.
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path

from . import config
from .logs import LoggingReporter, configure_logging
from .service import generate_tree
from .tree_model.rendering import render_tree_document
from .tree_model.truncation import TruncationLimits


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def _positive_float(value: str) -> float:
    """argparse type for positive second counts."""
    try:
        parsed = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid number: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be > 0")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="prunetree",
        description="Print a bounded, truncated summary of a directory tree.",
    )
    parser.add_argument("path", nargs="?", default=None, help="Directory to summarize. Defaults to current directory.")
    parser.add_argument(
        "--select",
        nargs="+",
        action="extend",
        default=[],
        metavar="PATH",
        help="Files that must stay visible; switches to files mode.",
    )
    parser.add_argument(
        "--ignore",
        nargs="+",
        action="extend",
        default=None,
        metavar="PATTERN",
        help="Gitignore-style patterns to exclude (replaces configured patterns).",
    )
    parser.add_argument(
        "--gitignore",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Exclude paths git reports as ignored (default: from config, on).",
    )
    parser.add_argument("--max-total", type=_positive_int, default=None, help="Descendant budget per directory.")
    parser.add_argument("--max-children", type=_positive_int, default=None, help="Direct children budget per directory.")
    parser.add_argument("--workers", type=_positive_int, default=None, help="Filesystem worker pool size.")
    parser.add_argument("--timeout", type=_positive_float, default=None, help="Per-directory listing timeout in seconds.")
    parser.add_argument("--list", action="store_true", help="Also print file paths whose content should be loaded.")
    parser.add_argument("--verbose", action="store_true", help="Log truncation decisions and timings to stderr.")
    parser.add_argument(
        "--save-defaults",
        action="store_true",
        help="Store the given limits (and --ignore patterns) in the config file for later runs.",
    )
    return parser


def resolve_limits(mode: str, max_total: int | None, max_children: int | None) -> TruncationLimits:
    """Apply CLI overrides on top of configured limits for ``mode``."""
    limits = config.load_tree_limits(mode)
    if max_total is not None:
        limits = replace(
            limits,
            max_total_descendants=max_total,
            max_reported_descendants=max(limits.max_reported_descendants, max_total),
        )
    if max_children is not None:
        limits = replace(limits, max_direct_children=max_children)
    return limits


def main(argv: list[str] | None = None, default_path: Path | None = None) -> None:
    """Parse CLI arguments and print the pruned tree of a directory.

    ``argv`` and ``default_path`` are primarily for tests; when omitted the
    process arguments and current working directory are used.
    """
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    if default_path is None:
        default_path = Path.cwd()
    path = Path(args.path or default_path)
    if not path.exists():
        raise SystemExit(f"Path not found: {path}")
    if not path.is_dir():
        raise SystemExit(f"Not a directory: {path}")

    mode = "files" if args.select else "directory"
    limits = resolve_limits(mode, args.max_total, args.max_children)
    if args.save_defaults:
        config.save_tree_limits(mode, limits)
        if args.ignore is not None:
            config.save_ignore_patterns(args.ignore)

    result = generate_tree(
        path,
        mode=mode,
        selected_paths=args.select,
        ignore_patterns=args.ignore,
        use_gitignore=args.gitignore,
        limits=limits,
        reporter=LoggingReporter(),
        workers=args.workers,
        fs_timeout=args.timeout,
    )

    root_label = path.resolve().name or str(path.resolve())
    sys.stdout.write(render_tree_document(result.ascii_tree, root_label))
    if args.list:
        sys.stdout.write("\n")
        for file_path in result.loadable_file_paths:
            sys.stdout.write(f"{file_path}\n")


if __name__ == "__main__":
    main()
