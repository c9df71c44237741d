"""Logging utilities: wandb initialisation, metric logging, git hash."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

import wandb
from omegaconf import DictConfig, OmegaConf

logger = logging.getLogger(__name__)


_PACKAGE_DIR = Path(__file__).resolve().parent.parent


def get_git_commit(repo_dir: str | Path | None = None) -> str:
    """HEAD commit of the repository containing *repo_dir*.

    Defaults to the directory of the installed ``mlchain`` package, so the
    hash identifies the code that ran rather than the caller's working
    directory. Returns ``"unknown"`` outside a repository or without git.
    """
    cwd = Path(repo_dir) if repo_dir is not None else _PACKAGE_DIR
    try:
        result = subprocess.run(
            ["git", "rev-parse", "HEAD"],
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=5,
        )
    except (FileNotFoundError, NotADirectoryError, subprocess.TimeoutExpired):
        return "unknown"
    commit = result.stdout.strip()
    return commit if result.returncode == 0 and commit else "unknown"


def init_wandb(config: DictConfig) -> None:
    """Start a wandb run for one chain experiment.

    The run is named after ``config.experiment_name`` and tagged with the
    chain method, so runs of different methods on the same data can be
    grouped on the project page.  The resolved config and git hash are
    uploaded with the run.

    Args:
        config: Full resolved Hydra :class:`DictConfig` with ``wandb``
            and ``chain`` sections.
    """
    git_hash = get_git_commit()

    wandb.init(
        project=config.wandb.project,
        entity=config.wandb.get("entity", None),
        name=config.experiment_name,
        mode=config.wandb.mode,
        tags=[str(config.chain.method)],
        config=OmegaConf.to_container(config, resolve=True),
    )
    wandb.config.update({"git_commit": git_hash}, allow_val_change=True)
    logger.info(
        "wandb initialised: project=%s, mode=%s, method=%s, git=%s",
        config.wandb.project,
        config.wandb.mode,
        config.chain.method,
        git_hash[:8],
    )


def log_metrics(metrics: dict, step: int | None = None, prefix: str = "") -> None:
    """Log a dictionary of metrics to the active wandb run.

    Args:
        metrics: Key-value pairs (e.g. ``{"Exact match": 0.41}``).
        step: Optional step number for x-axis alignment.
        prefix: Prepended to every key, e.g. ``"test/"``.
    """
    wandb.log({f"{prefix}{k}": v for k, v in metrics.items()}, step=step)
