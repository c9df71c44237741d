"""Pydantic models for validating chain configurations from YAML/JSON files.

The same :class:`ChainConfig` validates the ``chain`` section of the
Hydra experiment config and standalone config files.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from mlchain.eval.metrics import METRICS


# ---------------------------------------------------------------------------
# Label classifier
# ---------------------------------------------------------------------------


class ClassifierConfig(BaseModel):
    epochs: int = Field(default=200, ge=0)
    lr: float = Field(default=0.1, gt=0.0)
    weight_decay: float = Field(default=1e-3, ge=0.0)


# ---------------------------------------------------------------------------
# Chain method
# ---------------------------------------------------------------------------


class ChainConfig(BaseModel):
    method: Literal["cc", "mcc", "pcc", "bcc", "pmcc"] = "mcc"
    seed: int = 0
    chain_iterations: int = Field(default=0, ge=0)  # I_s
    inference_iterations: int = Field(default=10, ge=0)  # I_y
    payoff_metric: str = "Exact match"
    population_size: int = Field(default=10, ge=1)  # M
    beta: float = 0.03
    proposal: Literal["swap", "annealed"] = "annealed"
    aggregation: Literal["product", "log", "sum"] = "product"
    max_combinations: int = Field(default=1_000_000, ge=1)
    min_prob: float | None = None
    root: int | None = None  # None: use seed as the tree root
    dependency: Literal["marginal", "conditional"] = "marginal"  # bcc tree weights
    classifier: ClassifierConfig = Field(default_factory=ClassifierConfig)

    @field_validator("payoff_metric")
    @classmethod
    def _validate_metric(cls, v: str) -> str:
        if v not in METRICS:
            raise ValueError(f"Unknown metric '{v}'. Valid: {sorted(METRICS)}")
        return v

    @field_validator("min_prob")
    @classmethod
    def _validate_min_prob(cls, v: float | None) -> float | None:
        if v is not None and not 0.0 < v < 1.0:
            raise ValueError(f"min_prob must be in (0, 1), got {v}")
        return v

    @model_validator(mode="after")
    def _validate_root(self) -> "ChainConfig":
        if self.root is not None and self.root < 0:
            raise ValueError(f"root must be >= 0, got {self.root}")
        return self

    @property
    def tree_root(self) -> int:
        """Root label for ``bcc``: explicit ``root`` or else the seed."""
        return self.seed if self.root is None else self.root


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def load_chain_config(path: str | Path) -> ChainConfig:
    """Load and validate a chain config from a JSON or YAML file.

    Detects format by file extension (``.json``, ``.yaml``, ``.yml``).
    """
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    if path.suffix == ".json":
        data = json.loads(text)
    elif path.suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text)
    else:
        raise ValueError(f"Unsupported config format: {path.suffix}")
    return ChainConfig(**(data or {}))
