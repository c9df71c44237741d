"""Evaluation: named multi-label metrics used as payoffs and test scores."""

from mlchain.eval.metrics import (
    METRICS,
    Evaluator,
    MultiLabelEvaluator,
    exact_match,
    f1_micro,
    hamming_loss,
    hamming_score,
    jaccard_accuracy,
)

__all__ = [
    "Evaluator",
    "MultiLabelEvaluator",
    "METRICS",
    "exact_match",
    "hamming_score",
    "hamming_loss",
    "jaccard_accuracy",
    "f1_micro",
]
