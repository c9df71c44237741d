"""ChainModel: trained nodes arranged by a chain structure.

Training visits the order once and fits one node per label on the true
parent values. A model is never updated in place: changing the order
means building a new model from scratch.

Greedy inference walks the same order and writes each node's argmax into
the output vector, so later nodes condition on earlier predictions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from mlchain.chain.node import ChainNode, ClassifierFactory
from mlchain.chain.structure import ChainKind, ChainStructure
from mlchain.data.dataset import MultiLabelDataset
from mlchain.errors import StructuralError

logger = logging.getLogger(__name__)


def confidence_product(confidences: np.ndarray, min_prob: float | None = None) -> float:
    """Joint-probability proxy ``prod_j confidences[j]``.

    Args:
        confidences: Per-label probabilities of the chosen values.
        min_prob: If given, every probability is raised to at least this
            value first, so a single zero cannot flatten the product.
    """
    p = np.asarray(confidences, dtype=np.float64)
    if min_prob is not None:
        p = np.maximum(p, min_prob)
    return float(np.prod(p))


@dataclass(frozen=True)
class ChainModel:
    """A built chain: structure plus one trained node per label.

    Attributes:
        structure: Order and parent sets the nodes were trained on.
        nodes: ``nodes[j]`` is the node for label ``j``.
    """

    structure: ChainStructure
    nodes: tuple[ChainNode, ...]

    @property
    def order(self) -> tuple[int, ...]:
        return self.structure.order

    @property
    def kind(self) -> ChainKind:
        return self.structure.kind

    @property
    def num_labels(self) -> int:
        return len(self.nodes)

    def greedy_predict(self, x: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        """One deterministic pass along the order.

        Returns:
            ``(labels, confidences)``: ``(L,)`` int64 predicted values and
            ``(L,)`` float64 probabilities the nodes gave to them.
        """
        x = np.asarray(x, dtype=np.float64)
        y = np.zeros(self.num_labels, dtype=np.int64)
        conf = np.zeros(self.num_labels, dtype=np.float64)
        for j in self.order:
            y[j], conf[j] = self.nodes[j].classify(x, y)
        return y, conf

    def sample_path(
        self, x: np.ndarray, rng: np.random.Generator
    ) -> tuple[np.ndarray, np.ndarray]:
        """Draw a full label path, each node sampling given earlier draws.

        Returns:
            ``(labels, confidences)`` of the sampled path.
        """
        x = np.asarray(x, dtype=np.float64)
        y = np.zeros(self.num_labels, dtype=np.int64)
        conf = np.zeros(self.num_labels, dtype=np.float64)
        for j in self.order:
            y[j], conf[j] = self.nodes[j].sample(x, y, rng)
        return y, conf

    def probability_for_path(self, x: np.ndarray, path: np.ndarray) -> np.ndarray:
        """Per-label probabilities ``P(path_j | x, path_pa(j))`` of a forced path.

        Each node conditions on *path* rather than on its own predictions.
        """
        x = np.asarray(x, dtype=np.float64)
        path = np.asarray(path, dtype=np.int64)
        p = np.zeros(self.num_labels, dtype=np.float64)
        for j in self.order:
            p[j] = self.nodes[j].distribution(x, path)[path[j]]
        return p


def build_structured_chain(
    structure: ChainStructure,
    dataset: MultiLabelDataset,
    classifier_factory: ClassifierFactory,
) -> ChainModel:
    """Train one node per label, visiting *structure*'s order.

    Classifier errors propagate unchanged.
    """
    if structure.num_labels != dataset.num_labels:
        raise StructuralError(
            f"structure has {structure.num_labels} labels, "
            f"dataset has {dataset.num_labels}"
        )
    nodes: list[ChainNode | None] = [None] * structure.num_labels
    for j in structure.order:
        nodes[j] = ChainNode.build(j, structure.parents[j], dataset, classifier_factory)
    logger.debug("Built %s chain %s", structure.kind.value, list(structure.order))
    return ChainModel(structure=structure, nodes=tuple(nodes))


def build_chain(
    order: Sequence[int],
    dataset: MultiLabelDataset,
    classifier_factory: ClassifierFactory,
) -> ChainModel:
    """Build a plain (cumulative-parent) chain on *order*."""
    return build_structured_chain(ChainStructure.plain(order), dataset, classifier_factory)


def greedy_predict(model: ChainModel, x: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Deterministic chain prediction; see :meth:`ChainModel.greedy_predict`."""
    return model.greedy_predict(x)


def predict_dataset(model: ChainModel, X: np.ndarray) -> np.ndarray:
    """Greedy predictions for every row of *X*, shape ``(N, L)``."""
    X = np.asarray(X, dtype=np.float64)
    Y = np.zeros((X.shape[0], model.num_labels), dtype=np.int64)
    for i in range(X.shape[0]):
        Y[i], _ = model.greedy_predict(X[i])
    return Y
