"""Tests for chain structures (mlchain.chain.structure)."""

from __future__ import annotations

import pytest

from mlchain.chain.structure import ChainKind, ChainStructure, validate_order
from mlchain.errors import StructuralError


class TestValidateOrder:
    """Orders must be permutations of range(L)."""

    def test_valid_order_returns_tuple(self):
        assert validate_order([2, 0, 1]) == (2, 0, 1)

    def test_duplicate_label_rejected(self):
        with pytest.raises(StructuralError, match="permutation"):
            validate_order([0, 0, 1])

    def test_wrong_length_rejected(self):
        with pytest.raises(StructuralError, match="permutation"):
            validate_order([0, 1], num_labels=3)

    def test_out_of_range_label_rejected(self):
        with pytest.raises(StructuralError):
            validate_order([0, 1, 3])

    def test_structural_error_is_value_error(self):
        with pytest.raises(ValueError):
            validate_order([1, 1])


class TestPlainStructure:
    """Plain chains: each label sees every label before it."""

    def test_cumulative_parents(self):
        s = ChainStructure.plain([2, 0, 1])
        assert s.kind is ChainKind.PLAIN
        assert s.parents[2] == ()
        assert s.parents[0] == (2,)
        assert s.parents[1] == (2, 0)

    def test_rank(self):
        s = ChainStructure.plain([2, 0, 1])
        assert [s.rank(j) for j in range(3)] == [1, 2, 0]
        assert s.num_labels == 3

    def test_kind_coerced_from_string(self):
        s = ChainStructure(order=(0, 1), parents=((), (0,)), kind="plain")
        assert s.kind is ChainKind.PLAIN


class TestTreeStructure:
    """Tree chains: single parents, one root at the head of the order."""

    def test_valid_tree(self):
        s = ChainStructure.tree([2, 1, 3, 0], [(1,), (2,), (), (2,)])
        assert s.kind is ChainKind.TREE
        assert s.order[0] == 2

    def test_two_parents_rejected(self):
        with pytest.raises(StructuralError, match="at most one parent"):
            ChainStructure.tree([0, 1, 2], [(), (0,), (0, 1)])

    def test_two_roots_rejected(self):
        with pytest.raises(StructuralError, match="exactly one root"):
            ChainStructure.tree([0, 1, 2], [(), (), (1,)])

    def test_single_label_tree(self):
        s = ChainStructure.tree([0], [()])
        assert s.parents == ((),)


class TestParentValidation:
    """Parents must be labels that precede their child."""

    def test_parent_after_child_rejected(self):
        with pytest.raises(StructuralError, match="does not precede"):
            ChainStructure(order=(0, 1), parents=((1,), ()), kind=ChainKind.PLAIN)

    def test_cycle_rejected(self):
        with pytest.raises(StructuralError):
            ChainStructure(order=(0, 1), parents=((1,), (0,)), kind=ChainKind.PLAIN)

    def test_unknown_parent_rejected(self):
        with pytest.raises(StructuralError, match="is not a label"):
            ChainStructure(order=(0, 1), parents=((), (5,)), kind=ChainKind.PLAIN)

    def test_duplicate_parent_rejected(self):
        with pytest.raises(StructuralError, match="duplicate"):
            ChainStructure(
                order=(0, 1, 2), parents=((), (0,), (0, 0)), kind=ChainKind.PLAIN
            )

    def test_wrong_number_of_parent_sets(self):
        with pytest.raises(StructuralError, match="parent sets"):
            ChainStructure(order=(0, 1), parents=((),), kind=ChainKind.PLAIN)
