"""Dependency-driven tree chains."""

from mlchain.tree.dependency_tree import (
    build_dependency_tree,
    build_tree_chain,
    maximum_dependence_tree,
    treeify,
)

__all__ = [
    "build_dependency_tree",
    "build_tree_chain",
    "maximum_dependence_tree",
    "treeify",
]
