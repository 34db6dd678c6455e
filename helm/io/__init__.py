"""IO utilities for tree persistence and text export."""

from helm.io.persistence import list_trees, load_tree, save_tree, tree_path
from helm.io.unroll import unroll_branches, unroll_tree

__all__ = [
    "list_trees",
    "load_tree",
    "save_tree",
    "tree_path",
    "unroll_branches",
    "unroll_tree",
]
