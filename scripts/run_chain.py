"""Fit a classifier-chain method and evaluate it on a held-out split.

Uses Hydra's Compose API (not the ``@hydra.main`` decorator) to avoid
an argparse incompatibility with Python 3.14.  CLI overrides are still
supported via ``sys.argv``.

Usage:
    python scripts/run_chain.py                             # defaults (mcc)
    python scripts/run_chain.py chain.method=bcc            # tree chain
    python scripts/run_chain.py chain.method=pmcc chain.chain_iterations=50
    python scripts/run_chain.py data.path=data/scene.npz    # real data
    python scripts/run_chain.py wandb.mode=online           # log to wandb
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import wandb  # noqa: E402
from hydra import compose, initialize_config_dir  # noqa: E402
from hydra.core.global_hydra import GlobalHydra  # noqa: E402
from omegaconf import DictConfig, OmegaConf  # noqa: E402

# Ensure the project root is on sys.path when running as a script
_SCRIPT_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _SCRIPT_DIR.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from mlchain.config.schema import ChainConfig  # noqa: E402
from mlchain.data.dataset import MultiLabelDataset, make_synthetic_dataset  # noqa: E402
from mlchain.eval.metrics import MultiLabelEvaluator  # noqa: E402
from mlchain.methods import fit_method  # noqa: E402
from mlchain.utils.logging_utils import init_wandb, log_metrics  # noqa: E402
from mlchain.utils.seed import make_rng, set_seed  # noqa: E402
from mlchain.viz.tree_viz import draw_chain_structure  # noqa: E402

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Config loading (Hydra Compose API)
# ---------------------------------------------------------------------------


def _load_config(overrides: list[str] | None = None) -> DictConfig:
    """Load and compose the Hydra config with CLI overrides."""
    config_dir = str((_PROJECT_ROOT / "configs").resolve())

    # Clear any previous Hydra state (e.g. from tests or re-runs)
    GlobalHydra.instance().clear()

    with initialize_config_dir(config_dir=config_dir, version_base=None):
        cfg = compose(config_name="config", overrides=overrides or [])

    return cfg


# ---------------------------------------------------------------------------
# Data
# ---------------------------------------------------------------------------


def _load_dataset(cfg: DictConfig) -> MultiLabelDataset:
    if cfg.data.path:
        path = Path(cfg.data.path)
        if not path.is_absolute():
            path = _PROJECT_ROOT / path
        logger.info("Loading dataset: %s", path)
        return MultiLabelDataset.from_npz(path)

    syn = cfg.data.synthetic
    logger.info(
        "Generating synthetic dataset: N=%d d=%d L=%d K=%d",
        syn.num_instances,
        syn.num_features,
        syn.num_labels,
        syn.num_values,
    )
    return make_synthetic_dataset(
        num_instances=syn.num_instances,
        num_features=syn.num_features,
        num_labels=syn.num_labels,
        rng=make_rng(cfg.seed),
        num_values=syn.num_values,
        coupling=syn.coupling,
        noise=syn.noise,
    )


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------


def run(cfg: DictConfig) -> dict[str, float]:
    """Fit ``cfg.chain.method`` on the train split and score the test split."""

    # ---- 1. Seed and validated chain config ----
    set_seed(cfg.seed)
    chain_cfg = ChainConfig(**OmegaConf.to_container(cfg.chain, resolve=True))

    # ---- 2. Output directory ----
    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    output_root = Path(cfg.output.dir)
    if not output_root.is_absolute():
        output_root = _PROJECT_ROOT / output_root
    output_dir = output_root / f"{chain_cfg.method}_{timestamp}"
    output_dir.mkdir(parents=True, exist_ok=True)
    (output_dir / "config.yaml").write_text(OmegaConf.to_yaml(cfg, resolve=True))
    logger.info("Output directory: %s", output_dir)

    # ---- 3. wandb ----
    init_wandb(cfg)
    try:
        metrics = _fit_and_evaluate(cfg, chain_cfg, output_dir)
    finally:
        wandb.finish()

    logger.info("Run complete. Output: %s", output_dir)
    return metrics


def _fit_and_evaluate(
    cfg: DictConfig, chain_cfg: ChainConfig, output_dir: Path
) -> dict[str, float]:
    """Steps between ``init_wandb`` and ``wandb.finish``."""
    # ---- 4. Data ----
    dataset = _load_dataset(cfg)
    train_set, test_set = dataset.split(cfg.data.train_frac, make_rng(cfg.seed))
    logger.info("Split: %d train / %d test", train_set.num_instances, test_set.num_instances)

    # ---- 5. Fit ----
    fitted = fit_method(chain_cfg, train_set)

    # ---- 6. Predict and evaluate ----
    predictions = fitted.predict(test_set.X, make_rng(cfg.seed + 1), progress=True)
    metrics = MultiLabelEvaluator().evaluate_all(predictions, test_set.Y)
    for name, value in metrics.items():
        logger.info("  %-14s %.4f", name, value)
    log_metrics(metrics, prefix="test/")

    results = {
        "meta": {
            "method": chain_cfg.method,
            "order": list(fitted.structure.order),
            "parents": [list(p) for p in fitted.structure.parents],
            "num_train": train_set.num_instances,
            "num_test": test_set.num_instances,
        },
        "metrics": metrics,
    }
    (output_dir / "metrics.json").write_text(json.dumps(results, indent=2))

    # ---- 7. Structure plot ----
    if cfg.output.save_structure_plot:
        fig = draw_chain_structure(fitted.structure, title=f"{chain_cfg.method} chain")
        fig_path = output_dir / "structure.png"
        fig.savefig(fig_path, dpi=150, bbox_inches="tight")
        plt.close(fig)
        logger.info("Structure plot saved: %s", fig_path)
        if cfg.wandb.mode != "disabled":
            wandb.log({"structure": wandb.Image(str(fig_path))})

    return metrics


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    cli_overrides = sys.argv[1:]
    config = _load_config(cli_overrides)
    run(config)
