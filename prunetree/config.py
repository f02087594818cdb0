"""Persistent JSON config helpers.

Stores per-mode truncation limits, heuristic overrides, ignore patterns, and
traversal resource settings. All access is defensive: malformed or missing
config falls back to built-in defaults.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path

from platformdirs import user_config_dir

from .ignore import DEFAULT_IGNORE_PATTERNS
from .tree_model.build import BUILDER_MODES, DEFAULT_WORKERS
from .tree_model.truncation import (
    DEFAULT_HEURISTICS,
    DIRECTORY_MODE_LIMITS,
    FILES_MODE_LIMITS,
    TruncationHeuristics,
    TruncationLimits,
)

APP_NAME = "prunetree"
CONFIG_FILENAME = "config.json"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
CONFIG_PATH = DEFAULT_CONFIG_PATH

_LIMIT_FIELDS = ("max_total_descendants", "max_direct_children", "max_reported_descendants")
_HEURISTIC_FRACTIONS = (
    "relative_weight_cutoff",
    "min_relative_fraction",
    "head_tail_fraction",
    "min_scaled_children_fraction",
)


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Filesystem and serialization errors are ignored; an unwritable config
    never fails a traversal.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except (OSError, TypeError, ValueError):
        pass


def _is_positive_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _limits_key(mode: str) -> str:
    if mode not in BUILDER_MODES:
        raise ValueError(f"unknown tree mode {mode!r}")
    return f"{mode}_limits"


def default_tree_limits(mode: str) -> TruncationLimits:
    """Return built-in limits for ``mode``."""
    _limits_key(mode)
    return FILES_MODE_LIMITS if mode == "files" else DIRECTORY_MODE_LIMITS


def load_tree_limits(mode: str) -> TruncationLimits:
    """Load limits for ``mode``, overriding defaults field by field.

    Only positive integers are accepted; a combination that fails validation
    falls back to the mode defaults.
    """
    defaults = default_tree_limits(mode)
    value = load_config().get(_limits_key(mode))
    if not isinstance(value, dict):
        return defaults

    fields = {name: getattr(defaults, name) for name in _LIMIT_FIELDS}
    for name in _LIMIT_FIELDS:
        raw = value.get(name)
        if _is_positive_int(raw):
            fields[name] = raw
    try:
        return TruncationLimits(**fields)
    except ValueError:
        return defaults


def save_tree_limits(mode: str, limits: TruncationLimits) -> None:
    """Persist limits for ``mode``."""
    key = _limits_key(mode)
    config = load_config()
    config[key] = {name: int(getattr(limits, name)) for name in _LIMIT_FIELDS}
    save_config(config)


def load_truncation_heuristics() -> TruncationHeuristics:
    """Load heuristic overrides; invalid values keep their defaults."""
    value = load_config().get("heuristics")
    if not isinstance(value, dict):
        return DEFAULT_HEURISTICS

    fields: dict[str, object] = {}
    for name in _HEURISTIC_FRACTIONS:
        raw = value.get(name)
        if _is_number(raw):
            fields[name] = float(raw)
    scale = value.get("scale_children_by_weight")
    if isinstance(scale, bool):
        fields["scale_children_by_weight"] = scale
    try:
        return TruncationHeuristics(**fields)
    except ValueError:
        return DEFAULT_HEURISTICS


def load_ignore_patterns() -> tuple[str, ...]:
    """Load gitignore-style patterns, defaulting to ``DEFAULT_IGNORE_PATTERNS``."""
    value = load_config().get("ignore_patterns")
    if not isinstance(value, list):
        return DEFAULT_IGNORE_PATTERNS
    return tuple(item.strip() for item in value if isinstance(item, str) and item.strip())


def save_ignore_patterns(patterns: Iterable[str]) -> None:
    """Persist ignore patterns, dropping blank lines."""
    config = load_config()
    config["ignore_patterns"] = [str(pattern).strip() for pattern in patterns if str(pattern).strip()]
    save_config(config)


def load_use_gitignore() -> bool:
    """Return whether git-ignored paths are excluded (default ``True``)."""
    value = load_config().get("use_gitignore")
    return value if isinstance(value, bool) else True


def load_worker_count() -> int:
    """Return the traversal pool size."""
    value = load_config().get("workers")
    return value if _is_positive_int(value) else DEFAULT_WORKERS


def load_fs_timeout() -> float | None:
    """Return the per-listing timeout in seconds, or ``None`` for no deadline."""
    value = load_config().get("fs_timeout")
    if not _is_number(value) or value <= 0:
        return None
    return float(value)


__all__ = [
    "APP_NAME",
    "CONFIG_PATH",
    "load_config",
    "save_config",
    "default_tree_limits",
    "load_tree_limits",
    "save_tree_limits",
    "load_truncation_heuristics",
    "load_ignore_patterns",
    "save_ignore_patterns",
    "load_use_gitignore",
    "load_worker_count",
    "load_fs_timeout",
]
