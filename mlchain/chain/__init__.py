"""Chain core: nodes, structures, model building and greedy inference."""

from mlchain.chain.model import (
    ChainModel,
    build_chain,
    build_structured_chain,
    confidence_product,
    greedy_predict,
    predict_dataset,
)
from mlchain.chain.node import ChainNode, ClassifierFactory, LabelClassifier, sample_pmf
from mlchain.chain.structure import ChainKind, ChainStructure, validate_order

__all__ = [
    "ChainKind",
    "ChainStructure",
    "validate_order",
    "ChainNode",
    "ClassifierFactory",
    "LabelClassifier",
    "sample_pmf",
    "ChainModel",
    "build_chain",
    "build_structured_chain",
    "confidence_product",
    "greedy_predict",
    "predict_dataset",
]
