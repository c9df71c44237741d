"""Chain-method registry: build and apply cc / mcc / pcc / bcc / pmcc.

Each method is a (training, inference) pair over the same chain core:

- ``cc``: plain chain on a random order, greedy inference.
- ``mcc``: hill-climbed order, stochastic inference.
- ``pcc``: plain chain on a random order, exhaustive inference.
- ``bcc``: dependency tree chain, greedy inference.
- ``pmcc``: population of chains, population inference.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
from tqdm import tqdm

from mlchain.chain.model import ChainModel, build_chain
from mlchain.chain.node import ClassifierFactory
from mlchain.chain.structure import ChainStructure
from mlchain.config.schema import ChainConfig
from mlchain.data.dataset import MultiLabelDataset
from mlchain.data.dependency import ConditionalDependenceEstimator
from mlchain.inference.exhaustive import exhaustive_predict
from mlchain.inference.stochastic import stochastic_predict
from mlchain.model.softmax import make_classifier_factory
from mlchain.search.order_search import random_order, search_chain_order
from mlchain.search.population import (
    PopulationModel,
    population_predict,
    train_population,
)
from mlchain.tree.dependency_tree import build_tree_chain
from mlchain.utils.seed import make_rng

logger = logging.getLogger(__name__)

METHODS = ("cc", "mcc", "pcc", "bcc", "pmcc")


@dataclass(frozen=True)
class FittedChain:
    """A trained chain method ready for prediction.

    Exactly one of ``model`` / ``population`` is set: ``population`` for
    ``pmcc``, ``model`` otherwise.
    """

    config: ChainConfig
    model: ChainModel | None = None
    population: PopulationModel | None = None

    @property
    def method(self) -> str:
        return self.config.method

    @property
    def structure(self) -> ChainStructure:
        """Structure of the chain (the heaviest one for ``pmcc``)."""
        if self.population is not None:
            return self.population.best.model.structure
        return self.model.structure

    def predict_one(self, x: np.ndarray, rng: np.random.Generator) -> np.ndarray:
        """``(L,)`` label vector for one ``(d,)`` feature vector."""
        cfg = self.config
        if cfg.method == "mcc":
            y, _ = stochastic_predict(
                self.model, x, cfg.inference_iterations, rng, cfg.min_prob
            )
            return y
        if cfg.method == "pcc":
            return exhaustive_predict(
                self.model, x, max_combinations=cfg.max_combinations
            ).labels
        if cfg.method == "pmcc":
            return population_predict(
                self.population, x, cfg.inference_iterations, rng, cfg.min_prob
            )
        y, _ = self.model.greedy_predict(x)
        return y

    def predict(
        self,
        X: np.ndarray,
        rng: np.random.Generator,
        progress: bool = False,
    ) -> np.ndarray:
        """Predict every row of *X*.

        Args:
            X: ``(N, d)`` features.
            rng: Generator shared by all rows, consumed in row order.
            progress: Show a tqdm progress bar.

        Returns:
            ``(N, L)`` int64 label matrix.
        """
        X = np.asarray(X)
        L = self.structure.num_labels
        Y = np.zeros((X.shape[0], L), dtype=np.int64)
        rows = tqdm(range(X.shape[0]), desc=f"{self.method} predict", disable=not progress)
        for n in rows:
            Y[n] = self.predict_one(X[n], rng)
        return Y


def fit_method(
    config: ChainConfig,
    dataset: MultiLabelDataset,
    classifier_factory: ClassifierFactory | None = None,
) -> FittedChain:
    """Train the method named by ``config.method`` on *dataset*.

    Args:
        config: Validated chain configuration. ``config.seed`` seeds the
            training generator and, when ``config.root`` is None, picks
            the ``bcc`` root label. ``config.dependency`` picks the
            ``bcc`` dependency estimator.
        dataset: Training data.
        classifier_factory: Node classifier factory; defaults to the
            torch softmax classifier configured by ``config.classifier``.

    Returns:
        :class:`FittedChain`.

    Raises:
        ValueError: Unknown method.
        RootIndexError: ``bcc`` root outside ``[0, L)``.
    """
    if config.method not in METHODS:
        raise ValueError(f"Unknown method: {config.method!r}. Valid: {METHODS}")
    if classifier_factory is None:
        clf = config.classifier
        classifier_factory = make_classifier_factory(
            epochs=clf.epochs, lr=clf.lr, weight_decay=clf.weight_decay
        )
    rng = make_rng(config.seed)
    logger.info(
        "Fitting %s on %d instances, %d labels",
        config.method,
        dataset.num_instances,
        dataset.num_labels,
    )

    if config.method == "pmcc":
        population = train_population(
            dataset,
            classifier_factory,
            population_size=config.population_size,
            iterations=config.chain_iterations,
            rng=rng,
            beta=config.beta,
            proposal=config.proposal,
            aggregation=config.aggregation,
            min_prob=config.min_prob,
        )
        return FittedChain(config=config, population=population)

    if config.method == "mcc":
        result = search_chain_order(
            dataset,
            classifier_factory,
            config.chain_iterations,
            rng,
            payoff_metric=config.payoff_metric,
        )
        model = result.model
    elif config.method == "bcc":
        estimator = None
        if config.dependency == "conditional":
            estimator = ConditionalDependenceEstimator(classifier_factory, seed=config.seed)
        model = build_tree_chain(
            dataset, classifier_factory, config.tree_root, estimator=estimator
        )
    else:
        order = random_order(dataset.num_labels, rng)
        model = build_chain(order, dataset, classifier_factory)

    logger.info("Fitted %s: order=%s", config.method, list(model.order))
    return FittedChain(config=config, model=model)
