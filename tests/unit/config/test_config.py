"""Tests for config persistence and input sanitization.

Validates per-mode limit keys, heuristic overrides, and ignore patterns.
Ensures malformed config data falls back to built-in defaults.
"""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest import mock

from prunetree import config
from prunetree.ignore import DEFAULT_IGNORE_PATTERNS
from prunetree.tree_model.truncation import (
    DEFAULT_HEURISTICS,
    DIRECTORY_MODE_LIMITS,
    FILES_MODE_LIMITS,
    TruncationLimits,
)


class ConfigBehaviorTests(unittest.TestCase):
    def test_missing_config_uses_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "prunetree.json"
            with mock.patch("prunetree.config.CONFIG_PATH", config_path):
                self.assertEqual(config.load_config(), {})
                self.assertEqual(config.load_tree_limits("directory"), DIRECTORY_MODE_LIMITS)
                self.assertEqual(config.load_tree_limits("files"), FILES_MODE_LIMITS)
                self.assertEqual(config.load_truncation_heuristics(), DEFAULT_HEURISTICS)
                self.assertEqual(config.load_ignore_patterns(), DEFAULT_IGNORE_PATTERNS)
                self.assertTrue(config.load_use_gitignore())
                self.assertEqual(config.load_worker_count(), 16)
                self.assertIsNone(config.load_fs_timeout())

    def test_malformed_config_is_ignored(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "prunetree.json"
            config_path.write_text("{not json", encoding="utf-8")
            with mock.patch("prunetree.config.CONFIG_PATH", config_path):
                self.assertEqual(config.load_config(), {})
            config_path.write_text("[1, 2]", encoding="utf-8")
            with mock.patch("prunetree.config.CONFIG_PATH", config_path):
                self.assertEqual(config.load_config(), {})

    def test_tree_limits_use_distinct_keys_per_mode(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "prunetree.json"
            with mock.patch("prunetree.config.CONFIG_PATH", config_path):
                config.save_tree_limits("directory", TruncationLimits(max_total_descendants=120, max_direct_children=12))
                config.save_tree_limits("files", TruncationLimits(max_total_descendants=900, max_direct_children=60))

                saved = config.load_config()
                self.assertEqual(saved["directory_limits"]["max_total_descendants"], 120)
                self.assertEqual(saved["files_limits"]["max_direct_children"], 60)
                self.assertEqual(config.load_tree_limits("directory").max_direct_children, 12)
                self.assertEqual(config.load_tree_limits("files").max_total_descendants, 900)

    def test_load_tree_limits_sanitizes_invalid_values(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "prunetree.json"
            with mock.patch("prunetree.config.CONFIG_PATH", config_path):
                config.save_config(
                    {
                        "directory_limits": {
                            "max_total_descendants": -5,
                            "max_direct_children": True,
                            "max_reported_descendants": "lots",
                        },
                        "files_limits": {"max_total_descendants": 50_000},
                    }
                )

                self.assertEqual(config.load_tree_limits("directory"), DIRECTORY_MODE_LIMITS)
                # exceeds the reported cap, so the whole override is rejected
                self.assertEqual(config.load_tree_limits("files"), FILES_MODE_LIMITS)

    def test_unknown_mode_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            config.load_tree_limits("everything")

    def test_heuristic_overrides_are_validated(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "prunetree.json"
            with mock.patch("prunetree.config.CONFIG_PATH", config_path):
                config.save_config({"heuristics": {"relative_weight_cutoff": 0.9, "scale_children_by_weight": True}})
                heuristics = config.load_truncation_heuristics()
                self.assertEqual(heuristics.relative_weight_cutoff, 0.9)
                self.assertTrue(heuristics.scale_children_by_weight)

                config.save_config({"heuristics": {"head_tail_fraction": 0.9}})
                self.assertEqual(config.load_truncation_heuristics(), DEFAULT_HEURISTICS)

    def test_ignore_patterns_round_trip(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "prunetree.json"
            with mock.patch("prunetree.config.CONFIG_PATH", config_path):
                config.save_ignore_patterns(["node_modules/", "  ", " *.log "])
                self.assertEqual(config.load_ignore_patterns(), ("node_modules/", "*.log"))

    def test_resource_settings_require_positive_values(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "prunetree.json"
            with mock.patch("prunetree.config.CONFIG_PATH", config_path):
                config.save_config({"workers": 0, "fs_timeout": -1, "use_gitignore": "yes"})
                self.assertEqual(config.load_worker_count(), 16)
                self.assertIsNone(config.load_fs_timeout())
                self.assertTrue(config.load_use_gitignore())

                config.save_config({"workers": 4, "fs_timeout": 2.5, "use_gitignore": False})
                self.assertEqual(config.load_worker_count(), 4)
                self.assertEqual(config.load_fs_timeout(), 2.5)
                self.assertFalse(config.load_use_gitignore())


if __name__ == "__main__":
    unittest.main()
