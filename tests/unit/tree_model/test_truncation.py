"""Tests for heavy and smart truncation decisions on measured children."""

from __future__ import annotations

import unittest

from prunetree.tree_model.entries import ListedEntry
from prunetree.tree_model.truncation import (
    MeasuredEntry,
    TruncationHeuristics,
    TruncationLimits,
    TruncationPolicy,
)


def _dir(name: str, count: int, *, protected: bool = False, parent: str = "pkg") -> MeasuredEntry:
    return MeasuredEntry(
        absolute_path=f"/root/{parent}/{name}",
        relative_path=f"{parent}/{name}",
        descendant_count=count,
        entry=ListedEntry(name=name, is_dir=True, is_file=False, is_symlink=False),
        protected=protected,
    )


def _file(name: str, *, protected: bool = False, parent: str = "pkg") -> MeasuredEntry:
    return MeasuredEntry(
        absolute_path=f"/root/{parent}/{name}",
        relative_path=f"{parent}/{name}",
        descendant_count=1,
        entry=ListedEntry(name=name, is_dir=False, is_file=True, is_symlink=False),
        protected=protected,
    )


class TruncationSettingsTests(unittest.TestCase):
    def test_limits_validate_positive_values(self) -> None:
        with self.assertRaises(ValueError):
            TruncationLimits(max_total_descendants=0)
        with self.assertRaises(ValueError):
            TruncationLimits(max_direct_children=0)
        with self.assertRaises(ValueError):
            TruncationLimits(max_total_descendants=500, max_reported_descendants=100)

    def test_heuristics_validate_fractions(self) -> None:
        with self.assertRaises(ValueError):
            TruncationHeuristics(head_tail_fraction=0.75)
        with self.assertRaises(ValueError):
            TruncationHeuristics(relative_weight_cutoff=0.0)


class HeavyRuleTests(unittest.TestCase):
    def setUp(self) -> None:
        self.policy = TruncationPolicy(TruncationLimits(max_total_descendants=300, max_direct_children=40))

    def test_absolute_rule_collapses_oversized_directory(self) -> None:
        vendor = _dir("vendor", 301)
        self.assertTrue(self.policy.is_heavy(vendor, 303))

    def test_relative_rule_needs_minimum_size_and_dominant_share(self) -> None:
        # floor(300 * 0.2) == 60
        dominant = _dir("dominant", 60)
        self.assertTrue(self.policy.is_heavy(dominant, 70))
        small = _dir("small", 59)
        self.assertFalse(self.policy.is_heavy(small, 60))
        balanced = _dir("balanced", 100)
        self.assertFalse(self.policy.is_heavy(balanced, 200))

    def test_absolute_only_ignores_relative_rule(self) -> None:
        dominant = _dir("dominant", 100)
        self.assertFalse(self.policy.is_heavy(dominant, 101, absolute_only=True))

    def test_files_and_protected_directories_are_never_heavy(self) -> None:
        self.assertFalse(self.policy.is_heavy(_file("a.ts"), 1))
        self.assertFalse(self.policy.is_heavy(_dir("vendor", 301, protected=True), 301))

    def test_split_heavy_keeps_order(self) -> None:
        entries = [_dir("a", 1), _dir("big", 301), _file("z.txt")]
        heavy, remaining = self.policy.split_heavy(entries)
        self.assertEqual([entry.relative_path for entry in heavy], ["pkg/big"])
        self.assertEqual([entry.relative_path for entry in remaining], ["pkg/a", "pkg/z.txt"])


class SmartTruncationTests(unittest.TestCase):
    def test_keeps_head_and_tail_and_skips_middle(self) -> None:
        policy = TruncationPolicy(TruncationLimits(max_total_descendants=1000, max_direct_children=50))
        entries = [_dir(f"pkg{index:03d}", 1) for index in range(200)]

        plan = policy.plan(entries)

        self.assertEqual(len(plan.kept), 50)
        self.assertEqual(plan.kept[0].relative_path, "pkg/pkg000")
        self.assertEqual(plan.kept[24].relative_path, "pkg/pkg024")
        self.assertEqual(plan.kept[25].relative_path, "pkg/pkg175")
        self.assertEqual(len(plan.skipped), 150)

        placeholder, truncated_path = policy.middle_placeholder(plan.skipped)
        self.assertEqual(placeholder.name, "[ … 150 items truncated with 150 entries … ]")
        self.assertEqual(placeholder.skipped_entries, 150)
        self.assertEqual(placeholder.anchor, "pkg/pkg025")
        self.assertIsNone(truncated_path)

    def test_protected_entries_are_pinned_outside_slicing(self) -> None:
        policy = TruncationPolicy(TruncationLimits(max_total_descendants=1000, max_direct_children=10))
        entries = [_file(f"f{index:02d}.ts", protected=index == 50) for index in range(100)]

        plan = policy.plan(entries)

        kept_paths = [entry.relative_path for entry in plan.kept]
        self.assertIn("pkg/f50.ts", kept_paths)
        self.assertEqual(len(kept_paths), 11)
        self.assertNotIn("pkg/f50.ts", [entry.relative_path for entry in plan.skipped])

    def test_single_skipped_entry_gets_its_own_placeholder(self) -> None:
        policy = TruncationPolicy(TruncationLimits(max_total_descendants=1000, max_direct_children=4))
        entries = [_dir(f"d{index}", 3) for index in range(5)]

        plan = policy.plan(entries)
        placeholder, truncated_path = policy.middle_placeholder(plan.skipped)

        self.assertEqual(placeholder.name, "[ d2: folder truncated with 3 entries ]")
        self.assertEqual(truncated_path, "pkg/d2")

    def test_heavy_children_in_skipped_slice_are_not_reported_twice(self) -> None:
        policy = TruncationPolicy(TruncationLimits(max_total_descendants=300, max_direct_children=2))
        entries = [_dir("a", 1), _dir("b", 400), _dir("c", 1)]

        plan = policy.plan(entries)

        self.assertEqual([entry.relative_path for entry in plan.skipped], ["pkg/b"])
        self.assertEqual(plan.heavy, frozenset())

    def test_top_level_keeps_everything_and_only_applies_absolute_rule(self) -> None:
        policy = TruncationPolicy(TruncationLimits(max_total_descendants=300, max_direct_children=2))
        entries = [_dir("a", 1), _dir("dominant", 100), _dir("vendor", 301), _file("z.txt")]

        plan = policy.plan(entries, top_level=True)

        self.assertEqual(len(plan.kept), 4)
        self.assertEqual(plan.skipped, ())
        self.assertEqual(plan.heavy, frozenset({"pkg/vendor"}))

    def test_budget_scales_with_weight_when_enabled(self) -> None:
        policy = TruncationPolicy(
            TruncationLimits(max_total_descendants=100, max_direct_children=40),
            TruncationHeuristics(scale_children_by_weight=True),
        )

        self.assertEqual(policy.direct_children_budget(100), 40)
        self.assertEqual(policy.direct_children_budget(200), 20)
        self.assertEqual(policy.direct_children_budget(10_000), 4)

    def test_fits_without_truncation(self) -> None:
        policy = TruncationPolicy(TruncationLimits(max_total_descendants=10, max_direct_children=3))

        self.assertTrue(policy.fits_without_truncation([_file("a"), _file("b"), _file("c")]))
        self.assertFalse(policy.fits_without_truncation([_file("a"), _file("b"), _file("c"), _file("d")]))
        self.assertFalse(policy.fits_without_truncation([_dir("a", 11)]))


if __name__ == "__main__":
    unittest.main()
