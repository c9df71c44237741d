"""Pairwise label-dependency estimation.

The tree builder only needs a symmetric ``(L, L)`` score matrix where a
larger value means stronger dependence. Two estimators exist:

- :class:`MarginalDependenceEstimator` scores every label pair by its
  empirical mutual information.
- :class:`ConditionalDependenceEstimator` trains independent per-label
  classifiers and measures how far the errors they make on held-out rows
  co-occur beyond chance (a chi-square statistic on error types, offset
  by its critical value). Dependence that the features already explain
  leaves the errors uncorrelated and scores low.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

import numpy as np

from mlchain.data.dataset import MultiLabelDataset

if TYPE_CHECKING:
    from mlchain.chain.node import ClassifierFactory

# Added to every count before normalising, so no probability is exactly 0.
_COUNT_SMOOTHING = 0.0001

# Chi-square critical values at P = 0.10, indexed by degrees of freedom.
CHI2_CRITICAL = (0.0, 2.706, 4.605, 6.251, 7.779)

# Error types of a prediction: missed (+1), correct (0), spurious (-1).
_ERROR_TYPES = (0, 1, -1)


@runtime_checkable
class DependencyEstimator(Protocol):
    """Anything that maps a dataset to an ``(L, L)`` dependency matrix."""

    def matrix(self, dataset: MultiLabelDataset) -> np.ndarray: ...


def mutual_information(y_j: np.ndarray, y_k: np.ndarray, k_j: int, k_k: int) -> float:
    """Empirical mutual information ``I(Y_j; Y_k)`` in nats.

    Works for any value-space sizes (multi-target friendly).

    Args:
        y_j: ``(N,)`` int values of the first label.
        y_k: ``(N,)`` int values of the second label.
        k_j: Value-space size of the first label.
        k_k: Value-space size of the second label.
    """
    n = max(len(y_j), 1)
    joint = np.zeros((k_j, k_k), dtype=np.float64)
    np.add.at(joint, (y_j, y_k), 1.0)
    p_joint = (joint + _COUNT_SMOOTHING) / n
    p_j = (np.bincount(y_j, minlength=k_j) + _COUNT_SMOOTHING) / n
    p_k = (np.bincount(y_k, minlength=k_k) + _COUNT_SMOOTHING) / n
    return float((p_joint * np.log(p_joint / np.outer(p_j, p_k))).sum())


def error_chi2(e_j: np.ndarray, e_k: np.ndarray) -> float:
    """Chi-square statistic of two error columns sharing the same error type.

    For every error type ``v`` the observed rate ``P(e_j = v, e_k = v)`` is
    compared with ``P(e_j = v) P(e_k = v)``. Types that never occur in one
    of the columns contribute nothing.
    """
    chi2 = 0.0
    for v in _ERROR_TYPES:
        p_j = float(np.mean(e_j == v))
        p_k = float(np.mean(e_k == v))
        expected = p_j * p_k
        if expected == 0.0:
            continue
        observed = float(np.mean((e_j == v) & (e_k == v)))
        chi2 += (observed - expected) ** 2 / expected
    return chi2


class MarginalDependenceEstimator:
    """Unconditional dependence: mutual information between label columns.

    Returns a symmetric matrix with a zero diagonal.
    """

    def matrix(self, dataset: MultiLabelDataset) -> np.ndarray:
        L = dataset.num_labels
        sizes = dataset.value_space_sizes
        Y = dataset.Y
        M = np.zeros((L, L), dtype=np.float64)
        for j in range(L):
            for k in range(j + 1, L):
                M[j, k] = mutual_information(Y[:, j], Y[:, k], sizes[j], sizes[k])
                M[k, j] = M[j, k]
        return M


class ConditionalDependenceEstimator:
    """Conditional dependence from co-occurring classifier errors.

    The rows are shuffled with ``seed`` and split; one classifier per label
    is trained on the features of the first part (no label inputs) and
    predicts the held-out part. Each held-out error ``sign(y - y_hat)`` is
    typed as missed, correct or spurious, and every label pair is scored
    by :func:`error_chi2` minus the 1-degree-of-freedom critical value.
    The matrix is symmetric with a zero diagonal.

    Args:
        classifier_factory: Creates a fresh per-label classifier.
        seed: Seed of the shuffle, so repeated calls agree.
        train_frac: Fraction of rows used for training, in (0, 1).
    """

    def __init__(
        self,
        classifier_factory: ClassifierFactory,
        seed: int = 0,
        train_frac: float = 0.6,
    ) -> None:
        if not 0.0 < train_frac < 1.0:
            raise ValueError(f"train_frac must be in (0, 1), got {train_frac}")
        self.classifier_factory = classifier_factory
        self.seed = seed
        self.train_frac = train_frac

    def errors(self, dataset: MultiLabelDataset) -> np.ndarray:
        """``(N_test, L)`` held-out error types in ``{-1, 0, 1}``."""
        train, test = dataset.split(self.train_frac, np.random.default_rng(self.seed))
        if train.num_instances == 0 or test.num_instances == 0:
            raise ValueError(
                f"need rows on both sides of the split, got "
                f"{train.num_instances} train / {test.num_instances} test"
            )
        predicted = np.zeros_like(test.Y)
        for j, n_values in enumerate(dataset.value_space_sizes):
            clf = self.classifier_factory()
            clf.fit(train.X, train.Y[:, j], n_values)
            for i in range(test.num_instances):
                predicted[i, j] = int(np.argmax(clf.distribution(test.X[i])))
        return np.sign(test.Y - predicted)

    def matrix(self, dataset: MultiLabelDataset) -> np.ndarray:
        E = self.errors(dataset)
        L = dataset.num_labels
        M = np.zeros((L, L), dtype=np.float64)
        for j in range(L):
            for k in range(j + 1, L):
                M[j, k] = error_chi2(E[:, j], E[:, k]) - CHI2_CRITICAL[1]
                M[k, j] = M[j, k]
        return M
