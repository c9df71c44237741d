"""Multi-label evaluation metrics.

All metrics take ``(N, L)`` integer prediction and ground-truth matrices
and return a Python float. Metrics are looked up by display name so that
a search loop can be configured with e.g. ``"Exact match"``.

For multi-target data (K_j > 2) the set-based metrics ("Accuracy",
"F1 micro") treat any non-zero value as "label present".
"""

from __future__ import annotations

from typing import Callable, Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class Evaluator(Protocol):
    """Scores predictions against ground truth under a named metric."""

    def score(
        self, predictions: np.ndarray, ground_truth: np.ndarray, metric: str
    ) -> float: ...


def _check_shapes(predictions: np.ndarray, ground_truth: np.ndarray) -> None:
    if predictions.shape != ground_truth.shape:
        raise ValueError(
            f"predictions {predictions.shape} and ground truth "
            f"{ground_truth.shape} differ in shape"
        )


def exact_match(predictions: np.ndarray, ground_truth: np.ndarray) -> float:
    """Fraction of rows whose whole label vector is correct."""
    if len(ground_truth) == 0:
        return 0.0
    return float((predictions == ground_truth).all(axis=1).mean())


def hamming_score(predictions: np.ndarray, ground_truth: np.ndarray) -> float:
    """Fraction of individual labels predicted correctly."""
    if ground_truth.size == 0:
        return 0.0
    return float((predictions == ground_truth).mean())


def hamming_loss(predictions: np.ndarray, ground_truth: np.ndarray) -> float:
    """``1 - hamming_score``. Lower is better."""
    return 1.0 - hamming_score(predictions, ground_truth)


def jaccard_accuracy(predictions: np.ndarray, ground_truth: np.ndarray) -> float:
    """Mean ``|P & T| / |P | T|`` per row; rows with both sets empty score 1."""
    if len(ground_truth) == 0:
        return 0.0
    p = predictions != 0
    t = ground_truth != 0
    inter = (p & t).sum(axis=1)
    union = (p | t).sum(axis=1)
    per_row = np.where(union == 0, 1.0, inter / np.maximum(union, 1))
    return float(per_row.mean())


def f1_micro(predictions: np.ndarray, ground_truth: np.ndarray) -> float:
    """Micro-averaged F1 over all (row, label) cells."""
    p = predictions != 0
    t = ground_truth != 0
    tp = float((p & t).sum())
    denom = float(p.sum() + t.sum())
    if denom == 0.0:
        return 1.0
    return 2.0 * tp / denom


METRICS: dict[str, Callable[[np.ndarray, np.ndarray], float]] = {
    "Exact match": exact_match,
    "Hamming score": hamming_score,
    "Hamming loss": hamming_loss,
    "Accuracy": jaccard_accuracy,
    "F1 micro": f1_micro,
}


class MultiLabelEvaluator:
    """Default :class:`Evaluator` backed by :data:`METRICS`."""

    def score(
        self, predictions: np.ndarray, ground_truth: np.ndarray, metric: str
    ) -> float:
        if metric not in METRICS:
            raise ValueError(
                f"Unknown metric: {metric!r}. Valid: {sorted(METRICS)}"
            )
        predictions = np.asarray(predictions)
        ground_truth = np.asarray(ground_truth)
        _check_shapes(predictions, ground_truth)
        return METRICS[metric](predictions, ground_truth)

    def evaluate_all(
        self, predictions: np.ndarray, ground_truth: np.ndarray
    ) -> dict[str, float]:
        """Every metric in :data:`METRICS`, keyed by name."""
        return {
            name: self.score(predictions, ground_truth, name) for name in METRICS
        }
