"""Tests for Bayes-optimal enumeration (mlchain.inference.exhaustive)."""

from __future__ import annotations

import itertools

import numpy as np
import pytest

from conftest import ConstantClassifier, UniformClassifier
from mlchain.chain.model import build_chain
from mlchain.data.dataset import MultiLabelDataset
from mlchain.errors import EnumerationLimitWarning
from mlchain.inference.exhaustive import (
    MAX_COMBINATIONS,
    CombinationSpace,
    exhaustive_predict,
)


class TestCombinationSpace:
    """Mixed-radix order with digit 0 fastest, restartable."""

    def test_order(self):
        space = CombinationSpace([2, 3])
        assert list(space) == [
            (0, 0), (1, 0), (0, 1), (1, 1), (0, 2), (1, 2),
        ]

    def test_total(self):
        assert CombinationSpace([2, 3, 4]).total == 24

    def test_restartable(self):
        space = CombinationSpace([2, 2, 2])
        assert list(space) == list(space)
        assert len(list(space)) == 8

    def test_take(self):
        assert list(CombinationSpace([2, 2]).take(3)) == [(0, 0), (1, 0), (0, 1)]

    def test_take_is_lazy(self):
        """21 binary labels exceed the cap but taking a prefix is cheap."""
        space = CombinationSpace([2] * 21)
        assert space.total > MAX_COMBINATIONS
        assert next(iter(space.take(1))) == (0,) * 21

    def test_invalid_size(self):
        with pytest.raises(ValueError, match=">= 1"):
            CombinationSpace([2, 0])


class TestExhaustivePredict:
    """Exact joint-probability maximisation."""

    def test_beats_greedy(self, pair_dataset, frequency_factory):
        model = build_chain([0, 1], pair_dataset, frequency_factory)
        result = exhaustive_predict(model, np.zeros(1))
        np.testing.assert_array_equal(result.labels, [1, 1])
        assert result.joint_probability == pytest.approx(0.4)
        assert not result.truncated
        assert result.evaluated == 4

    def test_matches_brute_force(self, synthetic_dataset, synthetic_factory):
        model = build_chain([2, 0, 3, 1], synthetic_dataset, synthetic_factory)
        for x in synthetic_dataset.X[:3]:
            scores = {
                combo: float(np.prod(model.probability_for_path(x, np.array(combo))))
                for combo in itertools.product(range(2), repeat=4)
            }
            result = exhaustive_predict(model, x)
            assert result.joint_probability == pytest.approx(max(scores.values()))
            assert scores[tuple(result.labels)] == pytest.approx(max(scores.values()))

    def test_all_zero_probability_returns_zeros(self, scenario_dataset):
        model = build_chain(
            [0, 1, 2], scenario_dataset, lambda: ConstantClassifier((0.0, 0.0))
        )
        result = exhaustive_predict(model, np.zeros(1))
        np.testing.assert_array_equal(result.labels, [0, 0, 0])
        assert result.joint_probability == 0.0

    def test_truncation_is_reported(self, pair_dataset, frequency_factory):
        model = build_chain([0, 1], pair_dataset, frequency_factory)
        with pytest.warns(EnumerationLimitWarning, match="3 of 4"):
            result = exhaustive_predict(model, np.zeros(1), max_combinations=3)
        assert result.truncated
        assert result.evaluated == 3
        # (1, 1) is the 4th combination and was never scored
        np.testing.assert_array_equal(result.labels, [0, 0])

    def test_default_cap(self):
        """1001 x 1000 combinations: exactly MAX_COMBINATIONS are scored."""
        ds = MultiLabelDataset.from_arrays(
            np.zeros((2, 1)),
            np.array([[0, 0], [1000, 999]]),
            value_space_sizes=(1001, 1000),
        )
        model = build_chain([0, 1], ds, UniformClassifier)
        with pytest.warns(EnumerationLimitWarning, match="1000000 of 1001000"):
            result = exhaustive_predict(model, np.zeros(1))
        assert MAX_COMBINATIONS == 1_000_000
        assert result.truncated
        assert result.evaluated == MAX_COMBINATIONS
        # all paths tie, so the first one scored is kept
        np.testing.assert_array_equal(result.labels, [0, 0])
        assert result.joint_probability == pytest.approx(1 / 1_001_000)

    def test_truncation_is_logged(self, pair_dataset, frequency_factory, caplog):
        model = build_chain([0, 1], pair_dataset, frequency_factory)
        with pytest.warns(EnumerationLimitWarning):
            exhaustive_predict(model, np.zeros(1), max_combinations=2)
        assert any("truncated" in r.getMessage() for r in caplog.records)

    def test_size_mismatch(self, pair_dataset, frequency_factory):
        model = build_chain([0, 1], pair_dataset, frequency_factory)
        with pytest.raises(ValueError, match="value-space sizes"):
            exhaustive_predict(model, np.zeros(1), value_space_sizes=[2, 2, 2])

    def test_invalid_cap(self, pair_dataset, frequency_factory):
        model = build_chain([0, 1], pair_dataset, frequency_factory)
        with pytest.raises(ValueError, match="max_combinations"):
            exhaustive_predict(model, np.zeros(1), max_combinations=0)
