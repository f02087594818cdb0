"""Public package surface for prunetree.

Exports ``main`` for programmatic CLI invocation and ``generate_tree`` for
library use. The traversal core lives under ``prunetree.tree_model``.
"""

from __future__ import annotations


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)


def generate_tree(*args, **kwargs):
    """Lazily import the tree service."""
    from .service import generate_tree as _generate_tree

    return _generate_tree(*args, **kwargs)


__all__ = ["main", "generate_tree"]
