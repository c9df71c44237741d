"""Chain-order proposals for local search.

Both proposals swap two distinct positions and return a NEW order tuple;
the input order is never modified.
"""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

from mlchain.chain.node import sample_pmf

logger = logging.getLogger(__name__)


def swap_positions(order: Sequence[int], j: int, k: int) -> tuple[int, ...]:
    """Copy of *order* with positions *j* and *k* exchanged."""
    s = list(order)
    s[j], s[k] = s[k], s[j]
    return tuple(s)


def random_swap(order: Sequence[int], rng: np.random.Generator) -> tuple[int, ...]:
    """Swap two distinct, uniformly chosen positions.

    The second index is drawn from ``L - 1`` values and mapped to the last
    position when it collides with the first, so a self-swap never happens.
    Orders shorter than 2 are returned unchanged.
    """
    L = len(order)
    if L < 2:
        return tuple(order)
    a = int(rng.integers(L))
    b = int(rng.integers(L - 1))
    return swap_positions(order, a, L - 1 if a == b else b)


def annealed_swap(
    order: Sequence[int],
    rng: np.random.Generator,
    t: int,
    beta: float,
) -> tuple[int, ...]:
    """Temperature-annealed swap.

    Position ``j`` is chosen with weight ``(1/L) ** (beta * t / (1 + j))``.
    Early on (small ``t``) the weights are nearly uniform; as ``t`` grows,
    late positions keep larger weights than early ones, so the head of the
    chain settles first. No position ever gets weight zero. The second
    position is drawn from the same weights with ``j`` removed.

    Args:
        order: Current order.
        rng: Generator for both draws.
        t: Current iteration number.
        beta: Annealing constant.
    """
    L = len(order)
    if L < 2:
        return tuple(order)
    p = np.power(1.0 / L, beta * t / (1.0 + np.arange(L)))
    p = p / p.sum()
    j = sample_pmf(p, rng)

    p[j] = 0.0
    p = p / p.sum()
    k = sample_pmf(p, rng)
    # k == j only through float round-off in the CDF
    if k == j:
        k = int(np.argmax(p))
    logger.debug("t=%d annealed swap j=%d k=%d", t, j, k)
    return swap_positions(order, j, k)
