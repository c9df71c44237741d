"""Search over chain orders: proposals, payoffs, hill climbing, populations."""

from mlchain.search.order_search import (
    OrderSearchResult,
    SearchState,
    random_order,
    search_chain_order,
)
from mlchain.search.payoff import (
    AGGREGATIONS,
    EvaluatorPayoff,
    LikelihoodPayoff,
    Payoff,
)
from mlchain.search.population import (
    PopulationModel,
    PopulationSlot,
    normalize_weights,
    population_predict,
    train_population,
)
from mlchain.search.proposals import annealed_swap, random_swap, swap_positions

__all__ = [
    "swap_positions",
    "random_swap",
    "annealed_swap",
    "Payoff",
    "EvaluatorPayoff",
    "LikelihoodPayoff",
    "AGGREGATIONS",
    "SearchState",
    "OrderSearchResult",
    "random_order",
    "search_chain_order",
    "PopulationSlot",
    "PopulationModel",
    "normalize_weights",
    "train_population",
    "population_predict",
]
