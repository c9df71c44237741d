"""Chain-order optimisation by single-swap hill climbing.

Each iteration proposes a new order by swapping two positions of the
current one, rebuilds the whole chain on it (no incremental retraining),
rates it with a payoff and keeps it only if the payoff strictly improves.
The running payoff therefore never decreases. There is no convergence
test and no tabu list, so an order may be proposed more than once.

The running best is threaded through the loop as an immutable
:class:`SearchState`, so candidate builds could be evaluated in parallel
as long as acceptance stays sequential.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from mlchain.chain.model import ChainModel, build_chain
from mlchain.chain.node import ClassifierFactory
from mlchain.chain.structure import validate_order
from mlchain.data.dataset import MultiLabelDataset
from mlchain.eval.metrics import Evaluator
from mlchain.search.payoff import EvaluatorPayoff, Payoff
from mlchain.search.proposals import random_swap

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchState:
    """Current champion of the search."""

    order: tuple[int, ...]
    model: ChainModel
    payoff: float


@dataclass(frozen=True)
class OrderSearchResult:
    """Outcome of :func:`search_chain_order`.

    Attributes:
        order: Final chain order.
        model: Chain built on ``order``.
        payoff: Payoff of ``model``.
        history: Running payoff; ``history[0]`` is the initial order's
            payoff and ``history[t + 1]`` the payoff after iteration ``t``.
        accepted: Number of accepted proposals.
    """

    order: tuple[int, ...]
    model: ChainModel
    payoff: float
    history: tuple[float, ...]
    accepted: int


def random_order(num_labels: int, rng: np.random.Generator) -> tuple[int, ...]:
    """Uniformly random permutation of ``range(num_labels)``."""
    return tuple(int(j) for j in rng.permutation(num_labels))


def _step(
    state: SearchState,
    t: int,
    dataset: MultiLabelDataset,
    classifier_factory: ClassifierFactory,
    payoff: Payoff,
    rng: np.random.Generator,
) -> SearchState:
    order_ = random_swap(state.order, rng)
    model_ = build_chain(order_, dataset, classifier_factory)
    w_ = payoff(model_, dataset)
    if w_ > state.payoff:
        logger.debug("t=%d accept s'=%s w'=%.6g", t + 1, list(order_), w_)
        return SearchState(order=order_, model=model_, payoff=w_)
    return state


def search_chain_order(
    dataset: MultiLabelDataset,
    classifier_factory: ClassifierFactory,
    iterations: int,
    rng: np.random.Generator,
    payoff_metric: str = "Exact match",
    evaluator: Evaluator | None = None,
    initial_order: Sequence[int] | None = None,
    payoff: Payoff | None = None,
) -> OrderSearchResult:
    """Hill-climb over label permutations.

    Args:
        dataset: Training data; chains are built and rated on it.
        classifier_factory: Creates a fresh classifier per node.
        iterations: Number of proposals I_s (0 keeps the initial order).
        rng: Generator for the initial order and all proposals.
        payoff_metric: Metric name for the default evaluator payoff.
        evaluator: Evaluator for the default payoff.
        initial_order: Starting order; a random permutation if None.
        payoff: Custom ``(model, dataset) -> float``; overrides
            *payoff_metric* and *evaluator*.

    Returns:
        :class:`OrderSearchResult`.
    """
    if iterations < 0:
        raise ValueError(f"iterations must be non-negative, got {iterations}")
    if payoff is None:
        payoff = EvaluatorPayoff(payoff_metric, evaluator)

    L = dataset.num_labels
    if initial_order is None:
        order = random_order(L, rng)
    else:
        order = validate_order(initial_order, L)

    model = build_chain(order, dataset, classifier_factory)
    state = SearchState(order=order, model=model, payoff=payoff(model, dataset))
    logger.info(
        "Order search: %d iterations, %r, s_0=%s w_0=%.6g",
        iterations,
        payoff,
        list(order),
        state.payoff,
    )

    history = [state.payoff]
    accepted = 0
    for t in range(iterations):
        new_state = _step(state, t, dataset, classifier_factory, payoff, rng)
        if new_state is not state:
            accepted += 1
        state = new_state
        history.append(state.payoff)

    logger.info(
        "Order search done: s=%s w=%.6g (%d/%d accepted)",
        list(state.order),
        state.payoff,
        accepted,
        iterations,
    )
    return OrderSearchResult(
        order=state.order,
        model=state.model,
        payoff=state.payoff,
        history=tuple(history),
        accepted=accepted,
    )
