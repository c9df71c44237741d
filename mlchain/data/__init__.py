"""Data: multi-label dataset container and label-dependency estimation."""

from mlchain.data.dataset import MultiLabelDataset, make_synthetic_dataset
from mlchain.data.dependency import (
    ConditionalDependenceEstimator,
    DependencyEstimator,
    MarginalDependenceEstimator,
    error_chi2,
    mutual_information,
)

__all__ = [
    "MultiLabelDataset",
    "make_synthetic_dataset",
    "ConditionalDependenceEstimator",
    "DependencyEstimator",
    "MarginalDependenceEstimator",
    "error_chi2",
    "mutual_information",
]
