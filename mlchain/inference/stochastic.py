"""Randomised hill-climbing over label paths.

Starts from the greedy path and, for a fixed number of iterations, draws
a complete new path by sampling every node in order. A candidate
replaces the current best only if its confidence product is strictly
larger. There is no temperature and no acceptance of worse candidates,
and the iteration count is the only stopping rule.

Works unchanged for plain and tree chains, since both expose the same
order / parent-set contract.
"""

from __future__ import annotations

import logging

import numpy as np

from mlchain.chain.model import ChainModel, confidence_product

logger = logging.getLogger(__name__)


def stochastic_predict(
    model: ChainModel,
    x: np.ndarray,
    iterations: int,
    rng: np.random.Generator,
    min_prob: float | None = None,
) -> tuple[np.ndarray, float]:
    """Best label path found by greedy start + *iterations* resampled paths.

    Args:
        model: A built :class:`ChainModel`.
        x: ``(d,)`` feature vector.
        iterations: Number of full-path samples T (0 returns the greedy
            path unchanged).
        rng: Generator for node sampling.
        min_prob: Optional floor applied to each confidence before
            multiplying (see :func:`confidence_product`).

    Returns:
        ``(labels, confidence_product)`` of the best path.
    """
    if iterations < 0:
        raise ValueError(f"iterations must be non-negative, got {iterations}")

    y, conf = model.greedy_predict(x)
    w = confidence_product(conf, min_prob)

    for t in range(iterations):
        y_, conf_ = model.sample_path(x, rng)
        w_ = confidence_product(conf_, min_prob)
        if w_ > w:
            logger.debug("t=%d accept y'=%s w'=%.6g (was %.6g)", t, y_.tolist(), w_, w)
            y, w = y_, w_

    return y, w
