"""Visualization for chain structures.

Draws a chain as a directed networkx graph with one node per label and
an arrow from every parent to its child. Labels are laid out left to
right by rank (position in the chain order); tree chains are layered by
depth instead so that siblings stack vertically.

Compatible with any matplotlib backend (inline for notebooks, Agg for scripts).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

import matplotlib.pyplot as plt
import networkx as nx

from mlchain.chain.structure import ChainKind, ChainStructure

if TYPE_CHECKING:
    from matplotlib.axes import Axes
    from matplotlib.figure import Figure


ROOT_COLOR = "#F8B500"
NODE_COLOR = "#4ECDC4"


def structure_graph(structure: ChainStructure) -> nx.DiGraph:
    """Parent -> child DiGraph; each node carries its ``rank``."""
    G = nx.DiGraph()
    for rank, j in enumerate(structure.order):
        G.add_node(j, rank=rank)
    for j in structure.order:
        for p in structure.parents[j]:
            G.add_edge(p, j)
    return G


def _layout(structure: ChainStructure, G: nx.DiGraph) -> dict[int, tuple[float, float]]:
    if structure.kind is ChainKind.TREE:
        root = structure.order[0]
        depth = nx.shortest_path_length(G, source=root)
        rows: dict[int, int] = {}
        pos = {}
        for j in structure.order:
            d = depth[j]
            pos[j] = (float(d), -float(rows.get(d, 0)))
            rows[d] = rows.get(d, 0) + 1
        return pos
    return {j: (float(rank), 0.0) for rank, j in enumerate(structure.order)}


def draw_chain_structure(
    structure: ChainStructure,
    ax: Axes | None = None,
    label_names: Sequence[str] | None = None,
    node_size: int = 800,
    font_size: int = 8,
    title: str | None = None,
) -> Figure:
    """Draw a chain structure as a directed graph.

    Args:
        structure: Plain or tree :class:`ChainStructure`.
        ax: Matplotlib axes to draw on. If ``None``, a new figure
            is created.
        label_names: Optional display name per label index.
        node_size: Size of node circles.
        font_size: Font size for labels.
        title: Optional title for the subplot.

    Returns:
        The matplotlib Figure containing the drawing.
    """
    L = structure.num_labels
    if label_names is not None and len(label_names) != L:
        raise ValueError(f"expected {L} label names, got {len(label_names)}")

    G = structure_graph(structure)

    created_fig = False
    if ax is None:
        fig, ax = plt.subplots(1, 1, figsize=(max(4, 1.2 * L), 3))
        created_fig = True
    else:
        fig = ax.get_figure()

    if L == 0:
        ax.text(0.5, 0.5, "Empty chain", ha="center", va="center",
                transform=ax.transAxes, fontsize=font_size)
        ax.axis("off")
        return fig

    pos = _layout(structure, G)
    root = structure.order[0]
    node_colors = [ROOT_COLOR if j == root else NODE_COLOR for j in G.nodes]
    if label_names is None:
        labels = {j: f"y{j}" for j in G.nodes}
    else:
        labels = {j: label_names[j] for j in G.nodes}

    nx.draw_networkx_nodes(
        G, pos, ax=ax,
        node_color=node_colors,
        node_size=node_size,
        edgecolors="black",
        linewidths=1.0,
    )
    nx.draw_networkx_labels(G, pos, ax=ax, labels=labels, font_size=font_size)
    # plain chains are fully connected forward; bend arcs so they stay readable
    style = "arc3,rad=0.25" if structure.kind is ChainKind.PLAIN else "arc3"
    nx.draw_networkx_edges(
        G, pos, ax=ax,
        arrows=True,
        node_size=node_size,
        connectionstyle=style,
        alpha=0.7,
    )

    ax.set_title(title or f"{structure.kind.value} chain", fontsize=font_size + 1)
    ax.axis("off")

    if created_fig:
        fig.tight_layout()

    return fig
