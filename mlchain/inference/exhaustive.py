"""Bayes-optimal chain inference by exhaustive enumeration.

Every combination of label values is forced down the chain and scored by
its joint probability ``prod_j P(c_j | x, c_pa(j))``; the highest-scoring
combination wins. Cost is ``O(L * prod_j K_j)``, so enumeration stops at
a hard cap. Hitting the cap is reported through ``truncated`` in the
result, a WARNING log record and an :class:`EnumerationLimitWarning`.
"""

from __future__ import annotations

import itertools
import logging
import math
import warnings
from dataclasses import dataclass
from typing import Iterator, Sequence

import numpy as np

from mlchain.chain.model import ChainModel
from mlchain.errors import EnumerationLimitWarning

logger = logging.getLogger(__name__)

MAX_COMBINATIONS = 1_000_000


class CombinationSpace:
    """All label-value combinations in mixed-radix order.

    Digit ``j`` ranges over ``[0, sizes[j])``; digit 0 changes fastest and
    carries into digit 1, and so on, starting from all zeros. Iterating
    the object again restarts from the first combination.

    Args:
        sizes: Value-space size ``K_j`` of every label.
    """

    def __init__(self, sizes: Sequence[int]) -> None:
        sizes = tuple(int(k) for k in sizes)
        if any(k < 1 for k in sizes):
            raise ValueError(f"value-space sizes must be >= 1, got {list(sizes)}")
        self.sizes = sizes

    @property
    def total(self) -> int:
        """Number of combinations, ``prod_j K_j``."""
        return math.prod(self.sizes)

    def __iter__(self) -> Iterator[tuple[int, ...]]:
        # product() varies its last factor fastest, so feed digits reversed
        ranges = [range(k) for k in reversed(self.sizes)]
        for combo in itertools.product(*ranges):
            yield combo[::-1]

    def take(self, limit: int) -> Iterator[tuple[int, ...]]:
        """The first *limit* combinations."""
        return itertools.islice(iter(self), limit)


@dataclass(frozen=True)
class ExhaustiveResult:
    """Outcome of :func:`exhaustive_predict`.

    Attributes:
        labels: ``(L,)`` best combination found.
        joint_probability: Its joint probability under the chain.
        truncated: True if the cap stopped enumeration early.
        evaluated: Number of combinations scored.
    """

    labels: np.ndarray
    joint_probability: float
    truncated: bool
    evaluated: int


def exhaustive_predict(
    model: ChainModel,
    x: np.ndarray,
    value_space_sizes: Sequence[int] | None = None,
    max_combinations: int = MAX_COMBINATIONS,
) -> ExhaustiveResult:
    """Exact maximiser of the chain's joint probability (up to the cap).

    Args:
        model: A built :class:`ChainModel`.
        x: ``(d,)`` feature vector.
        value_space_sizes: ``K_j`` per label. Defaults to the sizes the
            nodes were trained with.
        max_combinations: Enumeration cap.

    Returns:
        :class:`ExhaustiveResult`. If every combination scores 0, the
        all-zero vector is returned with probability 0.
    """
    if max_combinations < 1:
        raise ValueError(f"max_combinations must be >= 1, got {max_combinations}")
    if value_space_sizes is None:
        value_space_sizes = [node.n_values for node in model.nodes]
    if len(value_space_sizes) != model.num_labels:
        raise ValueError(
            f"expected {model.num_labels} value-space sizes, "
            f"got {len(value_space_sizes)}"
        )

    space = CombinationSpace(value_space_sizes)
    y = np.zeros(model.num_labels, dtype=np.int64)
    w = 0.0
    evaluated = 0

    for combo in space.take(max_combinations):
        path = np.asarray(combo, dtype=np.int64)
        w_ = float(np.prod(model.probability_for_path(x, path)))
        if w_ > w:
            y, w = path, w_
        evaluated += 1

    truncated = space.total > max_combinations
    if truncated:
        logger.warning(
            "Exhaustive inference truncated after %d of %d combinations",
            evaluated,
            space.total,
        )
        warnings.warn(
            f"Enumeration stopped at {evaluated} of {space.total} combinations; "
            "the result may not be Bayes-optimal.",
            EnumerationLimitWarning,
            stacklevel=2,
        )
    else:
        logger.debug("Tried all %d combinations", evaluated)

    return ExhaustiveResult(
        labels=y, joint_probability=w, truncated=truncated, evaluated=evaluated
    )
