"""Reproducibility utilities: seed management and random generators."""

from __future__ import annotations

import random

import numpy as np
import torch


def set_seed(seed: int) -> None:
    """Seed Python's ``random``, NumPy's global state and torch's CPU generator.

    The chain engine draws only from generators made by :func:`make_rng`
    and the softmax classifier trains on CPU from zero weights, so this
    only pins library code that reads global random state.
    """
    random.seed(seed)
    np.random.seed(seed)
    torch.manual_seed(seed)


def make_rng(seed: int | None) -> np.random.Generator:
    """Return a fresh :class:`numpy.random.Generator` seeded with *seed*."""
    return np.random.default_rng(seed)
