"""MultiLabelDataset: feature matrix plus label matrix for chain training.

Holds features ``X`` of shape ``(N, d)`` and integer labels ``Y`` of
shape ``(N, L)``. Each label ``j`` takes values in ``[0, K_j)``; the
value-space sizes are either supplied or inferred from the data.

File parsing is out of scope for the engine; :meth:`from_npz` reads the
plain array archive written by :meth:`save_npz`, which the experiment
script uses.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import numpy as np


@dataclass(frozen=True)
class MultiLabelDataset:
    """Immutable multi-label / multi-target dataset.

    Attributes:
        X: ``(N, d)`` float64 feature matrix.
        Y: ``(N, L)`` int64 label matrix.
        value_space_sizes: ``K_j`` for every label, length ``L``.
    """

    X: np.ndarray
    Y: np.ndarray
    value_space_sizes: tuple[int, ...]

    def __post_init__(self) -> None:
        X = np.asarray(self.X, dtype=np.float64)
        Y = np.asarray(self.Y)
        if X.ndim != 2:
            raise ValueError(f"X must be 2-D, got shape {X.shape}")
        if Y.ndim != 2:
            raise ValueError(f"Y must be 2-D, got shape {Y.shape}")
        if X.shape[0] != Y.shape[0]:
            raise ValueError(
                f"X and Y must have the same number of rows, "
                f"got {X.shape[0]} and {Y.shape[0]}"
            )
        if len(self.value_space_sizes) != Y.shape[1]:
            raise ValueError(
                f"value_space_sizes has {len(self.value_space_sizes)} entries "
                f"for {Y.shape[1]} labels"
            )
        sizes = np.asarray(self.value_space_sizes, dtype=np.int64)
        if Y.size and ((Y < 0).any() or (Y >= sizes).any()):
            raise ValueError("Y contains values outside [0, K_j)")
        # frozen dataclass: normalise dtypes through object.__setattr__
        object.__setattr__(self, "X", X)
        object.__setattr__(self, "Y", Y.astype(np.int64))
        object.__setattr__(
            self, "value_space_sizes", tuple(int(k) for k in self.value_space_sizes)
        )

    @classmethod
    def from_arrays(
        cls,
        X: np.ndarray,
        Y: np.ndarray,
        value_space_sizes: tuple[int, ...] | None = None,
    ) -> "MultiLabelDataset":
        """Build a dataset, inferring ``K_j = max(Y[:, j]) + 1`` (at least 2)."""
        Y = np.asarray(Y, dtype=np.int64)
        if value_space_sizes is None:
            if Y.shape[0] == 0:
                value_space_sizes = tuple(2 for _ in range(Y.shape[1]))
            else:
                value_space_sizes = tuple(
                    max(2, int(Y[:, j].max()) + 1) for j in range(Y.shape[1])
                )
        return cls(X=X, Y=Y, value_space_sizes=tuple(value_space_sizes))

    @classmethod
    def from_npz(cls, path: str | Path) -> "MultiLabelDataset":
        """Load arrays ``X``, ``Y`` and optional ``K`` from an ``.npz`` file."""
        with np.load(Path(path)) as data:
            sizes = tuple(int(k) for k in data["K"]) if "K" in data else None
            return cls.from_arrays(data["X"], data["Y"], sizes)

    def save_npz(self, path: str | Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        np.savez(path, X=self.X, Y=self.Y, K=np.asarray(self.value_space_sizes))

    @property
    def num_instances(self) -> int:
        return int(self.X.shape[0])

    @property
    def num_features(self) -> int:
        return int(self.X.shape[1])

    @property
    def num_labels(self) -> int:
        return int(self.Y.shape[1])

    def subset(self, indices: np.ndarray) -> "MultiLabelDataset":
        """Rows *indices* of this dataset, keeping the value-space sizes."""
        return MultiLabelDataset(
            X=self.X[indices],
            Y=self.Y[indices],
            value_space_sizes=self.value_space_sizes,
        )

    def split(
        self,
        train_frac: float,
        rng: np.random.Generator,
    ) -> tuple["MultiLabelDataset", "MultiLabelDataset"]:
        """Shuffle and split into (train, test).

        Args:
            train_frac: Fraction of rows in the training part, in (0, 1).
            rng: Generator used for the permutation.
        """
        if not 0.0 < train_frac < 1.0:
            raise ValueError(f"train_frac must be in (0, 1), got {train_frac}")
        perm = rng.permutation(self.num_instances)
        n_train = int(train_frac * self.num_instances)
        return self.subset(perm[:n_train]), self.subset(perm[n_train:])


def make_synthetic_dataset(
    num_instances: int,
    num_features: int,
    num_labels: int,
    rng: np.random.Generator,
    num_values: int = 2,
    coupling: float = 1.5,
    noise: float = 0.5,
) -> MultiLabelDataset:
    """Generate labels with real inter-label dependence.

    Labels are drawn in index order from a hidden linear model in which
    label ``j`` sees the features and the previous label's value scaled
    by *coupling*, so chains that place ``j - 1`` before ``j`` have an
    advantage.

    Args:
        num_instances: Number of rows N.
        num_features: Feature dimension d.
        num_labels: Number of labels L.
        rng: Generator for all draws.
        num_values: Value-space size K shared by every label.
        coupling: Weight of the previous label in each label's score.
        noise: Standard deviation of the Gaussian score noise.
    """
    if num_values < 2:
        raise ValueError(f"num_values must be >= 2, got {num_values}")
    X = rng.normal(size=(num_instances, num_features))
    W = rng.normal(size=(num_labels, num_features, num_values))
    Y = np.zeros((num_instances, num_labels), dtype=np.int64)

    for j in range(num_labels):
        scores = X @ W[j]  # (N, K)
        scores += noise * rng.normal(size=scores.shape)
        if j > 0:
            # favour repeating the previous label's value
            prev = Y[:, j - 1]
            scores[np.arange(num_instances), prev % num_values] += coupling
        Y[:, j] = scores.argmax(axis=1)

    return MultiLabelDataset(
        X=X, Y=Y, value_space_sizes=tuple(num_values for _ in range(num_labels))
    )
