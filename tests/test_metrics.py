"""Tests for multi-label metrics (mlchain.eval.metrics)."""

from __future__ import annotations

import numpy as np
import pytest

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

PRED = np.array([[1, 0, 1], [0, 0, 0], [1, 1, 0]])
TRUE = np.array([[1, 0, 1], [0, 1, 0], [0, 1, 0]])


class TestMetricFunctions:

    def test_exact_match(self):
        assert exact_match(PRED, TRUE) == pytest.approx(1 / 3)

    def test_hamming(self):
        assert hamming_score(PRED, TRUE) == pytest.approx(7 / 9)
        assert hamming_loss(PRED, TRUE) == pytest.approx(2 / 9)

    def test_jaccard(self):
        # rows: 2/2, 0/1, 1/2
        assert jaccard_accuracy(PRED, TRUE) == pytest.approx((1.0 + 0.0 + 0.5) / 3)

    def test_jaccard_both_empty(self):
        z = np.zeros((2, 3), dtype=np.int64)
        assert jaccard_accuracy(z, z) == 1.0

    def test_f1_micro(self):
        # tp = 3, |P| = 4, |T| = 4
        assert f1_micro(PRED, TRUE) == pytest.approx(6 / 8)

    def test_f1_micro_empty(self):
        z = np.zeros((2, 2), dtype=np.int64)
        assert f1_micro(z, z) == 1.0

    def test_multi_target_nonzero_is_present(self):
        p = np.array([[2, 0]])
        t = np.array([[1, 0]])
        assert jaccard_accuracy(p, t) == 1.0
        assert exact_match(p, t) == 0.0


class TestMultiLabelEvaluator:

    def test_score_by_name(self):
        ev = MultiLabelEvaluator()
        assert ev.score(PRED, TRUE, "Exact match") == pytest.approx(1 / 3)

    def test_evaluate_all(self):
        results = MultiLabelEvaluator().evaluate_all(PRED, TRUE)
        assert set(results) == set(METRICS)
        assert all(isinstance(v, float) for v in results.values())

    def test_unknown_metric(self):
        with pytest.raises(ValueError, match="Unknown metric"):
            MultiLabelEvaluator().score(PRED, TRUE, "AUC")

    def test_shape_mismatch(self):
        with pytest.raises(ValueError, match="differ in shape"):
            MultiLabelEvaluator().score(PRED, TRUE[:, :2], "Exact match")

    def test_satisfies_protocol(self):
        assert isinstance(MultiLabelEvaluator(), Evaluator)
