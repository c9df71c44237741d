"""Tests for chain building and greedy inference (mlchain.chain.model)."""

from __future__ import annotations

import numpy as np
import pytest

from conftest import ConstantClassifier, FailingClassifier
from mlchain.chain.model import (
    build_chain,
    build_structured_chain,
    confidence_product,
    greedy_predict,
    predict_dataset,
)
from mlchain.chain.node import node_inputs, sample_pmf
from mlchain.chain.structure import ChainStructure
from mlchain.errors import StructuralError


class TestMajorityVoteScenario:
    """L=3 binary labels, order [2, 0, 1], 4 training instances."""

    def test_greedy_prediction_matches_hand_computed(self, scenario_dataset, frequency_factory):
        """Label 2 -> 0 (3/4), label 0 | y2=0 -> 1 (2/3), label 1 | y2=0,y0=1 -> 1 (2/2)."""
        model = build_chain([2, 0, 1], scenario_dataset, frequency_factory)
        y, conf = greedy_predict(model, np.zeros(1))

        np.testing.assert_array_equal(y, [1, 1, 0])
        assert conf[2] == pytest.approx(0.75)
        assert conf[0] == pytest.approx(2 / 3)
        assert conf[1] == pytest.approx(1.0)

    def test_order_changes_prediction(self, scenario_dataset, frequency_factory):
        """With label 0 first it sees no parents and the 2/2 tie goes to 0."""
        model = build_chain([0, 1, 2], scenario_dataset, frequency_factory)
        y, _ = model.greedy_predict(np.zeros(1))
        assert y[0] == 0

    def test_nodes_indexed_by_label(self, scenario_dataset, frequency_factory):
        model = build_chain([2, 0, 1], scenario_dataset, frequency_factory)
        assert [node.label for node in model.nodes] == [0, 1, 2]
        assert model.nodes[1].parents == (2, 0)
        assert model.order == (2, 0, 1)


class TestProbabilityForPath:
    """Forced paths condition each node on the given values."""

    def test_joint_probabilities(self, pair_dataset, frequency_factory):
        model = build_chain([0, 1], pair_dataset, frequency_factory)
        x = np.zeros(1)
        assert np.prod(model.probability_for_path(x, [0, 0])) == pytest.approx(0.3)
        assert np.prod(model.probability_for_path(x, [1, 1])) == pytest.approx(0.4)
        assert np.prod(model.probability_for_path(x, [1, 0])) == pytest.approx(0.0)


class TestBuildErrors:
    """Structural and collaborator failures."""

    def test_label_count_mismatch(self, scenario_dataset, frequency_factory):
        with pytest.raises(StructuralError, match="labels"):
            build_structured_chain(
                ChainStructure.plain([0, 1]), scenario_dataset, frequency_factory
            )

    def test_invalid_order(self, scenario_dataset, frequency_factory):
        with pytest.raises(StructuralError):
            build_chain([0, 0, 1], scenario_dataset, frequency_factory)

    def test_classifier_error_propagates(self, scenario_dataset):
        with pytest.raises(RuntimeError, match="exploded"):
            build_chain([0, 1, 2], scenario_dataset, FailingClassifier)


class TestPredictDataset:

    def test_shape_and_dtype(self, synthetic_dataset, synthetic_factory):
        model = build_chain([0, 1, 2, 3], synthetic_dataset, synthetic_factory)
        Y = predict_dataset(model, synthetic_dataset.X)
        assert Y.shape == (40, 4)
        assert Y.dtype == np.int64


class TestHelpers:

    def test_confidence_product(self):
        assert confidence_product(np.array([0.5, 0.5, 0.2])) == pytest.approx(0.05)

    def test_confidence_product_min_prob(self):
        assert confidence_product(np.array([0.0, 0.5]), min_prob=0.1) == pytest.approx(0.05)
        assert confidence_product(np.array([0.0, 0.5])) == 0.0

    def test_node_inputs_appends_parents(self):
        row = node_inputs(np.array([0.5, 1.5]), np.array([1, 0]))
        np.testing.assert_array_equal(row, [0.5, 1.5, 1.0, 0.0])

    def test_sample_pmf_degenerate(self, rng):
        assert all(sample_pmf(np.array([0.0, 1.0, 0.0]), rng) == 1 for _ in range(20))

    def test_sample_pmf_frequencies(self):
        rng = np.random.default_rng(0)
        draws = [sample_pmf(np.array([0.2, 0.8]), rng) for _ in range(2000)]
        assert np.mean(draws) == pytest.approx(0.8, abs=0.05)

    def test_constant_classifier_wrong_arity(self, scenario_dataset):
        with pytest.raises(ValueError, match="expected 3 values"):
            build_chain([0, 1, 2], scenario_dataset, lambda: ConstantClassifier((0.2, 0.3, 0.5)))
