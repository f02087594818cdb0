"""Domain model for pruned filesystem trees.

This package contains the traversal core, independent of any output surface:
- tree node datatypes and placeholder construction
- cached, deadline-aware directory listing
- selection indexing and bounded descendant counting
- heavy/smart truncation decisions
- directory-mode and files-mode builders
- ASCII rendering and path flattening helpers
"""

from __future__ import annotations

from .types import (
    DirectoryNode,
    FileNode,
    PlaceholderNode,
    TreeNode,
    folder_placeholder,
    skipped_items_placeholder,
    sorted_children,
)
from .entries import DirectoryEntryProvider, ListedEntry, TraversalCancelled, scan_directory
from .selection import SelectionIndex, normalize_relative_path
from .counting import DescendantCounter
from .truncation import (
    DEFAULT_HEURISTICS,
    DIRECTORY_MODE_LIMITS,
    FILES_MODE_LIMITS,
    MeasuredEntry,
    TruncationHeuristics,
    TruncationLimits,
    TruncationPlan,
    TruncationPolicy,
)
from .build import (
    BUILDER_MODES,
    DirectoryTreeBuilder,
    FilesTreeBuilder,
    TreeBuildResult,
    TreeBuilder,
    make_tree_builder,
)
from .rendering import render_ascii_tree, render_tree_document
from .paths import filter_loadable_paths, flatten_file_paths, is_inside_truncated_dir, rebase_tree
from .reporting import NULL_REPORTER, NullReporter, TraversalReporter

__all__ = [
    "DirectoryNode",
    "FileNode",
    "PlaceholderNode",
    "TreeNode",
    "folder_placeholder",
    "skipped_items_placeholder",
    "sorted_children",
    "DirectoryEntryProvider",
    "ListedEntry",
    "TraversalCancelled",
    "scan_directory",
    "SelectionIndex",
    "normalize_relative_path",
    "DescendantCounter",
    "DEFAULT_HEURISTICS",
    "DIRECTORY_MODE_LIMITS",
    "FILES_MODE_LIMITS",
    "MeasuredEntry",
    "TruncationHeuristics",
    "TruncationLimits",
    "TruncationPlan",
    "TruncationPolicy",
    "BUILDER_MODES",
    "DirectoryTreeBuilder",
    "FilesTreeBuilder",
    "TreeBuildResult",
    "TreeBuilder",
    "make_tree_builder",
    "render_ascii_tree",
    "render_tree_document",
    "filter_loadable_paths",
    "flatten_file_paths",
    "is_inside_truncated_dir",
    "rebase_tree",
    "NULL_REPORTER",
    "NullReporter",
    "TraversalReporter",
]
