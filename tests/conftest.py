"""Shared pytest fixtures for the mlchain test suite.

Fixtures defined here are automatically available to all test files.

The stub classifiers are deterministic and train instantly, so the
search and inference algorithms can be checked against hand-computed
results without any optimisation noise.
"""

from __future__ import annotations

import functools

import numpy as np
import pytest

from mlchain.data.dataset import MultiLabelDataset, make_synthetic_dataset


class FrequencyClassifier:
    """Majority-vote stub conditioned on the parent label values.

    ``distribution`` returns the empirical value frequencies among training
    rows whose parent columns equal the query's, falling back to the
    global frequencies when no row matches. The argmax (ties to the lowest
    value) is therefore a conditional majority vote.

    Args:
        num_features: Number of leading feature columns to ignore; the
            remaining input columns are the parent values.
    """

    def __init__(self, num_features: int) -> None:
        self.num_features = num_features
        self.parents: np.ndarray | None = None
        self.y: np.ndarray | None = None
        self.n_values = 0

    def fit(self, X: np.ndarray, y: np.ndarray, n_values: int) -> "FrequencyClassifier":
        self.parents = np.asarray(X)[:, self.num_features:]
        self.y = np.asarray(y, dtype=np.int64)
        self.n_values = n_values
        return self

    def _frequencies(self, y: np.ndarray) -> np.ndarray:
        counts = np.bincount(y, minlength=self.n_values).astype(np.float64)
        if counts.sum() == 0:
            return np.full(self.n_values, 1.0 / self.n_values)
        return counts / counts.sum()

    def distribution(self, x: np.ndarray) -> np.ndarray:
        pa = np.asarray(x)[self.num_features:]
        match = (self.parents == pa).all(axis=1)
        if match.any():
            return self._frequencies(self.y[match])
        return self._frequencies(self.y)


class ConstantClassifier:
    """Stub that ignores its inputs and always returns the same distribution."""

    def __init__(self, probs: tuple[float, ...]) -> None:
        self.probs = np.asarray(probs, dtype=np.float64)

    def fit(self, X: np.ndarray, y: np.ndarray, n_values: int) -> "ConstantClassifier":
        if n_values != len(self.probs):
            raise ValueError(f"expected {len(self.probs)} values, got {n_values}")
        return self

    def distribution(self, x: np.ndarray) -> np.ndarray:
        return self.probs.copy()


class UniformClassifier:
    """Stub giving every value the same probability, whatever the value count."""

    def __init__(self) -> None:
        self.n_values = 0

    def fit(self, X: np.ndarray, y: np.ndarray, n_values: int) -> "UniformClassifier":
        self.n_values = n_values
        return self

    def distribution(self, x: np.ndarray) -> np.ndarray:
        return np.full(self.n_values, 1.0 / self.n_values)


class FailingClassifier:
    """Stub whose training always fails."""

    def fit(self, X: np.ndarray, y: np.ndarray, n_values: int) -> "FailingClassifier":
        raise RuntimeError("classifier exploded")

    def distribution(self, x: np.ndarray) -> np.ndarray:
        raise RuntimeError("unreachable")


@pytest.fixture
def scenario_dataset() -> MultiLabelDataset:
    """4 instances, 1 (uninformative) feature, 3 binary labels.

    Rows of Y are ``[1,1,0]``, ``[1,1,0]``, ``[0,0,1]``, ``[0,1,0]``.
    """
    X = np.zeros((4, 1))
    Y = np.array(
        [
            [1, 1, 0],
            [1, 1, 0],
            [0, 0, 1],
            [0, 1, 0],
        ]
    )
    return MultiLabelDataset.from_arrays(X, Y)


@pytest.fixture
def pair_dataset() -> MultiLabelDataset:
    """10 instances, 2 binary labels where greedy inference is suboptimal.

    With order ``[0, 1]`` and the frequency stub:
    ``P(y0) = [0.6, 0.4]``, ``P(y1 | y0=0) = [0.5, 0.5]``,
    ``P(y1 | y0=1) = [0, 1]``. The joint maximum is ``(1, 1)`` at 0.4,
    while greedy inference returns ``(0, 0)`` at 0.3.
    """
    X = np.zeros((10, 1))
    Y = np.array(
        [[0, 0]] * 3 + [[0, 1]] * 3 + [[1, 1]] * 4
    )
    return MultiLabelDataset.from_arrays(X, Y)


@pytest.fixture
def synthetic_dataset() -> MultiLabelDataset:
    """Small synthetic dataset (N=40, d=3, L=4, binary) with label coupling."""
    return make_synthetic_dataset(
        num_instances=40,
        num_features=3,
        num_labels=4,
        rng=np.random.default_rng(0),
    )


@pytest.fixture
def frequency_factory():
    """Factory for :class:`FrequencyClassifier` on 1-feature datasets."""
    return functools.partial(FrequencyClassifier, num_features=1)


@pytest.fixture
def synthetic_factory():
    """Factory for :class:`FrequencyClassifier` on ``synthetic_dataset``."""
    return functools.partial(FrequencyClassifier, num_features=3)


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)
