"""Default label classifier: multinomial logistic regression in torch.

Inputs are standardised with training statistics, weights start at zero
and are fitted full-batch with Adam on the L2-regularised cross-entropy.
Zero initialisation plus full-batch updates make training deterministic
on CPU without any seeding.
"""

from __future__ import annotations

import functools

import numpy as np
import torch
import torch.nn as nn
import torch.nn.functional as F
from torch import Tensor


class SoftmaxRegression(nn.Module):
    """Standardise-then-linear model producing ``(B, n_values)`` logits.

    Args:
        in_features: Input dimension (features + parent labels).
        n_values: Number of classes K.
    """

    def __init__(self, in_features: int, n_values: int) -> None:
        super().__init__()
        self.linear = nn.Linear(in_features, n_values)
        nn.init.zeros_(self.linear.weight)
        nn.init.zeros_(self.linear.bias)
        self.register_buffer("mean", torch.zeros(in_features))
        self.register_buffer("std", torch.ones(in_features))

    def forward(self, x: Tensor) -> Tensor:
        return self.linear((x - self.mean) / self.std)


class SoftmaxLabelClassifier:
    """:class:`~mlchain.chain.node.LabelClassifier` backed by torch.

    Args:
        epochs: Full-batch optimisation steps.
        lr: Adam learning rate.
        weight_decay: L2 penalty on the linear weights.
    """

    def __init__(
        self,
        epochs: int = 200,
        lr: float = 0.1,
        weight_decay: float = 1e-3,
    ) -> None:
        if epochs < 0:
            raise ValueError(f"epochs must be non-negative, got {epochs}")
        if lr <= 0:
            raise ValueError(f"lr must be positive, got {lr}")
        self.epochs = epochs
        self.lr = lr
        self.weight_decay = weight_decay
        self.net: SoftmaxRegression | None = None
        self.n_values: int | None = None

    def fit(self, X: np.ndarray, y: np.ndarray, n_values: int) -> "SoftmaxLabelClassifier":
        X_t = torch.as_tensor(np.asarray(X), dtype=torch.float32)
        y_t = torch.as_tensor(np.asarray(y), dtype=torch.long)
        if X_t.ndim != 2 or X_t.shape[0] != y_t.shape[0]:
            raise ValueError(
                f"expected X (N, d) and y (N,), got {tuple(X_t.shape)} and "
                f"{tuple(y_t.shape)}"
            )

        net = SoftmaxRegression(X_t.shape[1], n_values)
        if X_t.shape[0] > 0:
            net.mean.copy_(X_t.mean(dim=0))
            # constant columns (e.g. a parent label that never varies) keep std 1
            std = X_t.std(dim=0, unbiased=False)
            net.std.copy_(torch.where(std > 1e-8, std, torch.ones_like(std)))

            optimizer = torch.optim.Adam(
                [net.linear.weight, net.linear.bias], lr=self.lr
            )
            for _ in range(self.epochs):
                optimizer.zero_grad()
                logits = net(X_t)
                loss = F.cross_entropy(logits, y_t)
                loss = loss + self.weight_decay * net.linear.weight.pow(2).sum()
                loss.backward()
                optimizer.step()

        net.eval()
        self.net = net
        self.n_values = n_values
        return self

    @torch.no_grad()
    def distribution(self, x: np.ndarray) -> np.ndarray:
        if self.net is None:
            raise RuntimeError("SoftmaxLabelClassifier.distribution called before fit")
        x_t = torch.as_tensor(np.asarray(x), dtype=torch.float32).reshape(
            1, self.net.linear.in_features
        )
        probs = torch.softmax(self.net(x_t).double(), dim=-1)[0].numpy()
        return probs / probs.sum()


def make_classifier_factory(
    epochs: int = 200,
    lr: float = 0.1,
    weight_decay: float = 1e-3,
) -> functools.partial:
    """Zero-argument factory producing fresh :class:`SoftmaxLabelClassifier`s."""
    return functools.partial(
        SoftmaxLabelClassifier, epochs=epochs, lr=lr, weight_decay=weight_decay
    )
