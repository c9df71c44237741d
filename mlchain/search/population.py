"""Weighted population of chains.

Training keeps M slots of (order, model, weight). Only slot 0 is filled
at the start; the others are vacant and lose every tournament. Each
iteration proposes a new order from the current best slot's order,
builds a chain on it, weighs it with a :class:`LikelihoodPayoff` and, if
it beats the weakest slot, replaces that slot wholesale. After the loop
the weights are normalised into a distribution.

Inference starts from the greedy path of the heaviest chain and then
repeatedly picks a chain by weight, samples a full path from it, and
keeps the path with the largest confidence product.
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass, replace
from typing import Literal

import numpy as np

from mlchain.chain.model import ChainModel, build_chain, confidence_product
from mlchain.chain.node import ClassifierFactory, sample_pmf
from mlchain.data.dataset import MultiLabelDataset
from mlchain.search.order_search import random_order, search_chain_order
from mlchain.search.payoff import Aggregation, LikelihoodPayoff, Payoff
from mlchain.search.proposals import annealed_swap, random_swap

logger = logging.getLogger(__name__)

Proposal = Literal["swap", "annealed"]


@dataclass(frozen=True)
class PopulationSlot:
    """One member of the population. Vacant slots have no order or model."""

    order: tuple[int, ...] | None
    model: ChainModel | None
    weight: float

    @property
    def vacant(self) -> bool:
        return self.model is None


_VACANT = PopulationSlot(order=None, model=None, weight=float("-inf"))


@dataclass(frozen=True)
class PopulationModel:
    """Trained population with normalised weights (sum 1, all >= 0)."""

    slots: tuple[PopulationSlot, ...]

    @property
    def weights(self) -> np.ndarray:
        return np.array([slot.weight for slot in self.slots], dtype=np.float64)

    @property
    def best(self) -> PopulationSlot:
        """The heaviest filled slot."""
        return max(
            (slot for slot in self.slots if not slot.vacant),
            key=lambda slot: slot.weight,
        )

    @property
    def size(self) -> int:
        return len(self.slots)


def normalize_weights(
    slots: tuple[PopulationSlot, ...], aggregation: Aggregation
) -> tuple[PopulationSlot, ...]:
    """Turn raw payoffs into a distribution over filled slots.

    Vacant slots get weight 0. ``"log"`` payoffs are exponentiated
    relative to their maximum first so that weights stay non-negative and
    preserve the ranking. If no usable weight remains, filled slots share
    the mass uniformly.
    """
    filled = np.array([not slot.vacant for slot in slots])
    raw = np.array([slot.weight for slot in slots], dtype=np.float64)
    w = np.zeros(len(slots), dtype=np.float64)

    values = raw[filled]
    if aggregation == "log" and values.size:
        top = values.max()
        values = np.exp(values - top) if np.isfinite(top) else np.zeros_like(values)
    values = np.clip(values, 0.0, None)

    total = values.sum()
    if total > 0.0 and np.isfinite(total):
        w[filled] = values / total
    else:
        w[filled] = 1.0 / max(int(filled.sum()), 1)

    return tuple(replace(slot, weight=float(wi)) for slot, wi in zip(slots, w))


def _propose(
    order: tuple[int, ...],
    rng: np.random.Generator,
    t: int,
    proposal: Proposal,
    beta: float,
) -> tuple[int, ...]:
    if proposal == "annealed":
        return annealed_swap(order, rng, t, beta)
    return random_swap(order, rng)


def train_population(
    dataset: MultiLabelDataset,
    classifier_factory: ClassifierFactory,
    population_size: int,
    iterations: int,
    rng: np.random.Generator,
    beta: float = 0.03,
    proposal: Proposal = "annealed",
    aggregation: Aggregation = "product",
    min_prob: float | None = None,
    payoff: Payoff | None = None,
) -> PopulationModel:
    """Evolve a population of *population_size* chains for *iterations* steps.

    Args:
        dataset: Training data; chains are built and weighed on it.
        classifier_factory: Creates a fresh classifier per node.
        population_size: Number of slots M (>= 1).
        iterations: Number of proposals I_s. Must exceed M for a real
            population; otherwise a single-chain order search is run.
        rng: Generator for the initial order and all proposals.
        beta: Annealing constant for ``proposal="annealed"``.
        proposal: ``"annealed"`` or ``"swap"``.
        aggregation: :class:`LikelihoodPayoff` aggregation mode.
        min_prob: Optional probability floor for the payoff.
        payoff: Custom ``(model, dataset) -> float`` weighing each chain;
            overrides *aggregation* and *min_prob* during training.
            Weights are still normalised as *aggregation* says.

    Returns:
        :class:`PopulationModel` with normalised weights.
    """
    if population_size < 1:
        raise ValueError(f"population_size must be >= 1, got {population_size}")
    if iterations < 0:
        raise ValueError(f"iterations must be non-negative, got {iterations}")
    if proposal not in ("swap", "annealed"):
        raise ValueError(
            f"Unknown proposal: {proposal!r}. Use 'swap' or 'annealed'."
        )
    if payoff is None:
        payoff = LikelihoodPayoff(aggregation, min_prob)

    if iterations <= population_size:
        msg = (
            f"iterations ({iterations}) must exceed population_size "
            f"({population_size}) to evolve a population; "
            "falling back to a single-chain order search."
        )
        logger.warning(msg)
        warnings.warn(msg, stacklevel=2)
        result = search_chain_order(
            dataset, classifier_factory, iterations, rng, payoff=payoff
        )
        slot = PopulationSlot(order=result.order, model=result.model, weight=1.0)
        return PopulationModel(slots=(slot,))

    order = random_order(dataset.num_labels, rng)
    model = build_chain(order, dataset, classifier_factory)
    first = PopulationSlot(order=order, model=model, weight=payoff(model, dataset))
    slots = (first,) + (_VACANT,) * (population_size - 1)
    logger.info(
        "Population: M=%d, %d iterations, proposal=%s, %r, s_0=%s",
        population_size,
        iterations,
        proposal,
        payoff,
        list(order),
    )

    for t in range(iterations):
        best = max(range(population_size), key=lambda m: slots[m].weight)
        order_ = _propose(slots[best].order, rng, t, proposal, beta)
        model_ = build_chain(order_, dataset, classifier_factory)
        w_ = payoff(model_, dataset)

        weakest = int(np.argmin([slot.weight for slot in slots]))
        if w_ > slots[weakest].weight:
            candidate = PopulationSlot(order=order_, model=model_, weight=w_)
            slots = slots[:weakest] + (candidate,) + slots[weakest + 1 :]
            logger.debug("t=%d accepted slot %d: s=%s w=%.6g", t, weakest, list(order_), w_)

    slots = normalize_weights(slots, aggregation)
    logger.info(
        "Population done: weights=%s",
        np.array2string(np.array([s.weight for s in slots]), precision=4),
    )
    return PopulationModel(slots=slots)


def population_predict(
    population: PopulationModel,
    x: np.ndarray,
    iterations: int,
    rng: np.random.Generator,
    min_prob: float | None = None,
) -> np.ndarray:
    """Ensemble hill-climbing over label paths.

    Args:
        population: A trained :class:`PopulationModel`.
        x: ``(d,)`` feature vector.
        iterations: Number of sampled paths I_y.
        rng: Generator for chain selection and path sampling.
        min_prob: Optional floor applied to confidences.

    Returns:
        ``(L,)`` best label vector found.
    """
    if iterations < 0:
        raise ValueError(f"iterations must be non-negative, got {iterations}")

    y, conf = population.best.model.greedy_predict(x)
    w = confidence_product(conf, min_prob)

    members = [slot for slot in population.slots if not slot.vacant]
    pmf = np.array([slot.weight for slot in members], dtype=np.float64)
    pmf = pmf / pmf.sum()

    for _ in range(iterations):
        m = sample_pmf(pmf, rng)
        y_, conf_ = members[m].model.sample_path(x, rng)
        w_ = confidence_product(conf_, min_prob)
        if w_ > w:
            y, w = y_, w_

    return y
