"""Classifier chains for multi-label and multi-dimensional classification.

Main exports:
    ChainStructure, ChainModel: Chain order / parent sets and trained nodes
    build_chain, greedy_predict: Plain chain training and greedy inference
    stochastic_predict: Randomised hill-climbing over label paths
    exhaustive_predict: Bayes-optimal inference by enumeration (capped)
    search_chain_order: Swap-based hill climbing over chain orders
    build_dependency_tree, build_tree_chain: Tree chains from label dependence
    train_population, population_predict: Weighted population of chains
    ChainConfig, fit_method: Configured end-to-end methods (cc/mcc/pcc/bcc/pmcc)
"""

from mlchain.chain import ChainKind, ChainModel, ChainStructure, build_chain, greedy_predict
from mlchain.config import ChainConfig, load_chain_config
from mlchain.data import MultiLabelDataset
from mlchain.errors import EnumerationLimitWarning, RootIndexError, StructuralError
from mlchain.inference import exhaustive_predict, stochastic_predict
from mlchain.methods import FittedChain, fit_method
from mlchain.search import population_predict, search_chain_order, train_population
from mlchain.tree import build_dependency_tree, build_tree_chain

__all__ = [
    "ChainKind",
    "ChainStructure",
    "ChainModel",
    "build_chain",
    "greedy_predict",
    "stochastic_predict",
    "exhaustive_predict",
    "search_chain_order",
    "build_dependency_tree",
    "build_tree_chain",
    "train_population",
    "population_predict",
    "MultiLabelDataset",
    "ChainConfig",
    "load_chain_config",
    "FittedChain",
    "fit_method",
    "StructuralError",
    "RootIndexError",
    "EnumerationLimitWarning",
]
