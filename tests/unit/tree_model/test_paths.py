"""Tests for flattening, truncated-directory filtering, and rebasing."""

from __future__ import annotations

import unittest

from prunetree.tree_model.paths import (
    filter_loadable_paths,
    flatten_file_paths,
    is_inside_truncated_dir,
    rebase_tree,
)
from prunetree.tree_model.types import DirectoryNode, FileNode, folder_placeholder, skipped_items_placeholder


class FlattenFilePathsTests(unittest.TestCase):
    def test_collects_files_in_render_order_without_placeholders(self) -> None:
        tree = DirectoryNode(
            name="root",
            path="",
            children=(
                DirectoryNode(name="a", path="a", children=(FileNode(name="x", path="a/x"),)),
                folder_placeholder("b", 500),
                skipped_items_placeholder("c", True, items=2, total=9),
                FileNode(name="y", path="y"),
            ),
        )

        self.assertEqual(flatten_file_paths(tree), ["a/x", "y"])

    def test_duplicates_are_reported_once(self) -> None:
        duplicate = FileNode(name="x", path="a/x")
        tree = DirectoryNode(name="root", path="", children=(duplicate, duplicate))

        self.assertEqual(flatten_file_paths(tree), ["a/x"])

    def test_deep_trees_do_not_recurse(self) -> None:
        node = DirectoryNode(name="leaf", path="/".join(["d"] * 5000), children=(FileNode(name="f", path="deep/f"),))
        for _ in range(5000):
            node = DirectoryNode(name="d", path="d", children=(node,))

        self.assertEqual(flatten_file_paths(node), ["deep/f"])


class TruncatedDirectoryFilterTests(unittest.TestCase):
    def test_is_inside_truncated_dir_matches_whole_segments(self) -> None:
        truncated = frozenset({"vendor", "a/build"})

        self.assertTrue(is_inside_truncated_dir("vendor", truncated))
        self.assertTrue(is_inside_truncated_dir("vendor/x.js", truncated))
        self.assertTrue(is_inside_truncated_dir("a/build/out/x.js", truncated))
        self.assertFalse(is_inside_truncated_dir("vendored/x.js", truncated))
        self.assertFalse(is_inside_truncated_dir("a/builder.js", truncated))

    def test_filter_loadable_paths_keeps_order(self) -> None:
        paths = ["src/a.ts", "vendor/x.js", "src/b.ts"]

        self.assertEqual(filter_loadable_paths(paths, {"vendor"}), ["src/a.ts", "src/b.ts"])


class RebaseTests(unittest.TestCase):
    def test_rebase_tree_prefixes_every_path(self) -> None:
        subtree = DirectoryNode(
            name="big",
            path="",
            children=(
                folder_placeholder("cache", 400),
                skipped_items_placeholder("m", False, items=3, total=3),
                FileNode(name="a.txt", path="a.txt"),
            ),
        )

        rebased = rebase_tree(subtree, "./big/")

        self.assertEqual(rebased.path, "big")
        self.assertEqual(rebased.children[0].path, "big/cache")
        self.assertEqual(rebased.children[0].anchor, "big/cache")
        self.assertEqual(rebased.children[1].path, "")
        self.assertEqual(rebased.children[1].anchor, "big/m")
        self.assertEqual(rebased.children[2].path, "big/a.txt")
        self.assertEqual(subtree.children[2].path, "a.txt")

    def test_rebase_with_empty_prefix_is_identity(self) -> None:
        node = FileNode(name="a", path="a")

        self.assertIs(rebase_tree(node, ""), node)


if __name__ == "__main__":
    unittest.main()
