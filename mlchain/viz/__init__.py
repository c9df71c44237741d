"""Visualization utilities for chain structures."""

from mlchain.viz.tree_viz import draw_chain_structure, structure_graph

__all__ = ["draw_chain_structure", "structure_graph"]
