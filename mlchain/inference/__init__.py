"""Inference over label paths: randomised hill-climbing and exhaustive search."""

from mlchain.inference.exhaustive import (
    MAX_COMBINATIONS,
    CombinationSpace,
    ExhaustiveResult,
    exhaustive_predict,
)
from mlchain.inference.stochastic import stochastic_predict

__all__ = [
    "stochastic_predict",
    "CombinationSpace",
    "ExhaustiveResult",
    "exhaustive_predict",
    "MAX_COMBINATIONS",
]
