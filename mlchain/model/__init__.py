"""Default conditional classifier for chain nodes."""

from mlchain.model.softmax import (
    SoftmaxLabelClassifier,
    SoftmaxRegression,
    make_classifier_factory,
)

__all__ = [
    "SoftmaxRegression",
    "SoftmaxLabelClassifier",
    "make_classifier_factory",
]
