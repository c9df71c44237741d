"""Utilities: reproducibility and logging."""

from mlchain.utils.logging_utils import get_git_commit, init_wandb, log_metrics
from mlchain.utils.seed import make_rng, set_seed

__all__ = [
    "set_seed",
    "make_rng",
    "init_wandb",
    "log_metrics",
    "get_git_commit",
]
