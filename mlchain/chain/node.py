"""Chain nodes: one conditional classifier per label.

A node for label ``j`` with parent set ``pa(j)`` models
``P(y_j | x, y_pa(j))``. Its input row is the feature vector followed by
the parent label values in parent-set order. During training the parents
carry their TRUE values; at inference time they carry whatever values the
chain has produced so far.

The underlying classifier is a pluggable collaborator: anything with
``fit(X, y, n_values)`` and ``distribution(x)`` works.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Protocol, runtime_checkable

import numpy as np

from mlchain.data.dataset import MultiLabelDataset


@runtime_checkable
class LabelClassifier(Protocol):
    """Single-label conditional classifier used inside a chain node."""

    def fit(self, X: np.ndarray, y: np.ndarray, n_values: int) -> object:
        """Train on ``(N, d')`` inputs and ``(N,)`` integer targets in
        ``[0, n_values)``."""
        ...

    def distribution(self, x: np.ndarray) -> np.ndarray:
        """Return the ``(n_values,)`` probability vector for one input row."""
        ...


ClassifierFactory = Callable[[], LabelClassifier]


def sample_pmf(p: np.ndarray, rng: np.random.Generator) -> int:
    """Draw index ``i`` with probability ``p[i]`` by inverting the CDF.

    *p* must already be normalised. One uniform draw is consumed per call.
    """
    u = rng.random()
    cdf = np.cumsum(p)
    i = int(np.searchsorted(cdf, u, side="left"))
    # float round-off can leave cdf[-1] slightly below u
    return min(i, len(p) - 1)


def node_inputs(X: np.ndarray, parent_values: np.ndarray) -> np.ndarray:
    """Append parent label values to features.

    Works on a single row (``(d,)`` and ``(|pa|,)``) or a batch
    (``(N, d)`` and ``(N, |pa|)``).
    """
    return np.concatenate(
        [X, np.asarray(parent_values, dtype=np.float64)], axis=-1
    )


@dataclass(frozen=True)
class ChainNode:
    """Trained conditional model for one label.

    Nodes are immutable once built; retraining always creates a new node.

    Attributes:
        label: Label index ``j`` this node predicts.
        parents: Label indices whose values are appended to the features.
        n_values: Value-space size ``K_j``.
        classifier: The fitted :class:`LabelClassifier`.
    """

    label: int
    parents: tuple[int, ...]
    n_values: int
    classifier: LabelClassifier

    @classmethod
    def build(
        cls,
        label: int,
        parents: tuple[int, ...],
        dataset: MultiLabelDataset,
        classifier_factory: ClassifierFactory,
    ) -> "ChainNode":
        """Train a fresh classifier for *label* on features + true parent values."""
        parents = tuple(int(p) for p in parents)
        inputs = node_inputs(dataset.X, dataset.Y[:, list(parents)])
        n_values = dataset.value_space_sizes[label]
        classifier = classifier_factory()
        classifier.fit(inputs, dataset.Y[:, label], n_values)
        return cls(
            label=label,
            parents=parents,
            n_values=n_values,
            classifier=classifier,
        )

    def transform(self, x: np.ndarray, y: np.ndarray) -> np.ndarray:
        """Input row for this node given features *x* and a label vector *y*."""
        return node_inputs(x, y[list(self.parents)])

    def distribution(self, x: np.ndarray, y: np.ndarray) -> np.ndarray:
        """Posterior ``P(y_j = k | x, y_pa(j))`` for every ``k``."""
        return np.asarray(
            self.classifier.distribution(self.transform(x, y)), dtype=np.float64
        )

    def classify(self, x: np.ndarray, y: np.ndarray) -> tuple[int, float]:
        """Most probable value and its probability."""
        p = self.distribution(x, y)
        k = int(np.argmax(p))
        return k, float(p[k])

    def sample(
        self, x: np.ndarray, y: np.ndarray, rng: np.random.Generator
    ) -> tuple[int, float]:
        """Draw a value from the posterior; returns ``(value, probability)``."""
        p = self.distribution(x, y)
        k = sample_pmf(p, rng)
        return k, float(p[k])
