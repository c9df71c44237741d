"""Tree-structured chains from a pairwise label-dependency matrix.

The strongest-dependence spanning tree over the labels is found as the
minimum spanning tree (Kruskal) of the negated dependence scores. The
undirected tree is then hung from a chosen root: walking depth first,
each label's tree neighbour through which it is first reached becomes
its single parent, and labels are ranked in the order they are reached.
Sorting by rank gives a chain order in which every parent comes before
its children.
"""

from __future__ import annotations

import logging
import operator

import networkx as nx
import numpy as np

from mlchain.chain.model import ChainModel, build_structured_chain
from mlchain.chain.node import ClassifierFactory
from mlchain.chain.structure import ChainStructure
from mlchain.data.dataset import MultiLabelDataset
from mlchain.data.dependency import DependencyEstimator, MarginalDependenceEstimator
from mlchain.errors import RootIndexError, StructuralError

logger = logging.getLogger(__name__)


def maximum_dependence_tree(matrix: np.ndarray) -> nx.Graph:
    """Undirected spanning tree maximising the total dependence.

    Only the upper triangle ``matrix[i, j]`` with ``i < j`` is read.
    """
    L = matrix.shape[0]
    graph = nx.Graph()
    graph.add_nodes_from(range(L))
    for i in range(L):
        for j in range(i + 1, L):
            # negated: a minimum spanning tree of -CD is a maximum one of CD
            graph.add_edge(i, j, weight=-float(matrix[i, j]))
    return nx.minimum_spanning_tree(graph, algorithm="kruskal")


def treeify(tree: nx.Graph, root: int) -> tuple[list[int], list[tuple[int, ...]]]:
    """Direct an undirected tree away from *root*.

    Expanding a label gives the next ranks to all of its not yet visited
    neighbours (in index order) and makes it their parent; those children
    are then expanded one after another, each subtree completely before
    the next.

    Returns:
        ``(ranks, parents)`` indexed by label. ``ranks[root] == 0``.
    """
    L = tree.number_of_nodes()
    ranks = [-1] * L
    parents: list[tuple[int, ...]] = [()] * L
    ranks[root] = 0
    next_rank = 1

    stack = [root]
    while stack:
        node = stack.pop()
        children = []
        for k in sorted(tree.neighbors(node)):
            if ranks[k] < 0:
                ranks[k] = next_rank
                next_rank += 1
                parents[k] = (node,)
                children.append(k)
        stack.extend(reversed(children))

    return ranks, parents


def build_dependency_tree(
    matrix: np.ndarray, root: int
) -> tuple[tuple[int, ...], tuple[tuple[int, ...], ...]]:
    """Chain order and single-parent sets from a dependency matrix.

    Args:
        matrix: ``(L, L)`` dependence scores, larger = stronger.
        root: Label index to hang the tree from.

    Returns:
        ``(order, parents)``: the rank-sorted labels and, per label, a
        1-tuple with its tree parent (empty for the root).

    Raises:
        StructuralError: *matrix* is not a finite square matrix.
        RootIndexError: *root* is not in ``[0, L)``.
    """
    M = np.asarray(matrix, dtype=np.float64)
    if M.ndim != 2 or M.shape[0] != M.shape[1] or M.shape[0] == 0:
        raise StructuralError(
            f"dependency matrix must be square and non-empty, got shape {M.shape}"
        )
    if not np.isfinite(M).all():
        raise StructuralError("dependency matrix contains non-finite values")
    L = M.shape[0]
    root = operator.index(root)
    if not 0 <= root < L:
        raise RootIndexError(f"root index {root} out of range [0, {L})")

    tree = maximum_dependence_tree(M)
    ranks, parents = treeify(tree, root)
    order = tuple(sorted(range(L), key=ranks.__getitem__))

    logger.debug(
        "Dependency tree edges=%s root=%d order=%s",
        sorted(tree.edges()),
        root,
        list(order),
    )
    return order, tuple(parents)


def build_tree_chain(
    dataset: MultiLabelDataset,
    classifier_factory: ClassifierFactory,
    root: int,
    estimator: DependencyEstimator | None = None,
) -> ChainModel:
    """Estimate label dependence, build the tree, and train a tree chain.

    Args:
        dataset: Training data.
        classifier_factory: Creates a fresh classifier per node.
        root: Root label index.
        estimator: Dependency estimator; mutual information by default.
    """
    if estimator is None:
        estimator = MarginalDependenceEstimator()
    matrix = estimator.matrix(dataset)
    order, parents = build_dependency_tree(matrix, root)
    for j in order:
        logger.debug("node h_%d : P(y_%d | x, y_%s)", j, j, list(parents[j]))
    structure = ChainStructure.tree(order, parents)
    return build_structured_chain(structure, dataset, classifier_factory)
