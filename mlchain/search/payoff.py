"""Payoff functions that rate a built chain on a dataset.

A payoff is any callable ``(model, dataset) -> float`` where larger is
better. Order search defaults to :class:`EvaluatorPayoff`; the chain
population weighs its members with :class:`LikelihoodPayoff`.
"""

from __future__ import annotations

from typing import Callable, Literal

import numpy as np

from mlchain.chain.model import ChainModel, predict_dataset
from mlchain.data.dataset import MultiLabelDataset
from mlchain.eval.metrics import Evaluator, MultiLabelEvaluator

Payoff = Callable[[ChainModel, MultiLabelDataset], float]
Aggregation = Literal["product", "log", "sum"]

AGGREGATIONS: tuple[str, ...] = ("product", "log", "sum")


class EvaluatorPayoff:
    """Evaluator score of greedy predictions on the dataset itself.

    Args:
        metric: Metric name understood by *evaluator*.
        evaluator: Defaults to :class:`MultiLabelEvaluator`.
    """

    def __init__(self, metric: str = "Exact match", evaluator: Evaluator | None = None) -> None:
        self.metric = metric
        self.evaluator = evaluator if evaluator is not None else MultiLabelEvaluator()

    def __call__(self, model: ChainModel, dataset: MultiLabelDataset) -> float:
        predictions = predict_dataset(model, dataset.X)
        return float(self.evaluator.score(predictions, dataset.Y, self.metric))

    def __repr__(self) -> str:
        return f"EvaluatorPayoff(metric={self.metric!r})"


class LikelihoodPayoff:
    """Aggregate of the chain's probabilities for the TRUE label vectors.

    For every instance ``i`` the chain is forced down ``Y[i]``, giving
    per-label probabilities ``p_ij``. Instances are then combined by:

    - ``"product"``: ``1 + sum_i prod_j p_ij``
    - ``"log"``: ``1 + sum_i log prod_j p_ij``
    - ``"sum"``: ``1 + sum_i sum_j p_ij``

    The accumulator starts at 1.0. Without *min_prob*, a zero probability
    makes its instance's product 0 (and its log ``-inf``).

    Args:
        aggregation: One of :data:`AGGREGATIONS`.
        min_prob: Optional floor for every ``p_ij``.
    """

    def __init__(self, aggregation: Aggregation = "product", min_prob: float | None = None) -> None:
        if aggregation not in AGGREGATIONS:
            raise ValueError(
                f"Unknown aggregation: {aggregation!r}. Use one of {AGGREGATIONS}."
            )
        if min_prob is not None and not 0.0 < min_prob < 1.0:
            raise ValueError(f"min_prob must be in (0, 1), got {min_prob}")
        self.aggregation = aggregation
        self.min_prob = min_prob

    def __call__(self, model: ChainModel, dataset: MultiLabelDataset) -> float:
        s = 1.0
        for i in range(dataset.num_instances):
            p = model.probability_for_path(dataset.X[i], dataset.Y[i])
            if self.min_prob is not None:
                p = np.maximum(p, self.min_prob)
            if self.aggregation == "sum":
                s += float(p.sum())
            elif self.aggregation == "log":
                with np.errstate(divide="ignore"):
                    s += float(np.log(np.prod(p)))
            else:
                s += float(np.prod(p))
        return s

    def __repr__(self) -> str:
        return f"LikelihoodPayoff(aggregation={self.aggregation!r})"
