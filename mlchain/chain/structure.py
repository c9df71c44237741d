"""Chain structures: a label order plus the parent set of every label.

Two kinds exist:

- ``PLAIN``: every label sees all labels before it in the order
  (cumulative parent sets, classic classifier chain).
- ``TREE``: every label sees at most one tree parent; exactly one root
  has none.

Both are consumed the same way by training and inference: visit the
order, condition each label on its parents. Validation guarantees that
every parent precedes its child, so a chain built in order never
references an unbuilt node.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from mlchain.errors import StructuralError


class ChainKind(str, Enum):
    PLAIN = "plain"
    TREE = "tree"


def validate_order(order: Sequence[int], num_labels: int | None = None) -> tuple[int, ...]:
    """Return *order* as a tuple after checking it is a permutation of range(L)."""
    order = tuple(int(j) for j in order)
    L = len(order) if num_labels is None else num_labels
    if len(order) != L or sorted(order) != list(range(L)):
        raise StructuralError(
            f"order must be a permutation of range({L}), got {list(order)}"
        )
    return order


@dataclass(frozen=True)
class ChainStructure:
    """Order and parent sets of a chain.

    Attributes:
        order: Visitation sequence, a permutation of ``range(L)``.
        parents: ``parents[j]`` is the parent set of label ``j``.
        kind: :class:`ChainKind` tag.
    """

    order: tuple[int, ...]
    parents: tuple[tuple[int, ...], ...]
    kind: ChainKind

    def __post_init__(self) -> None:
        L = len(self.order)
        object.__setattr__(self, "kind", ChainKind(self.kind))
        object.__setattr__(self, "order", validate_order(self.order, L))
        object.__setattr__(
            self, "parents", tuple(tuple(int(p) for p in pa) for pa in self.parents)
        )
        if len(self.parents) != L:
            raise StructuralError(
                f"expected {L} parent sets, got {len(self.parents)}"
            )

        rank = {j: r for r, j in enumerate(self.order)}
        for j, pa in enumerate(self.parents):
            if len(set(pa)) != len(pa):
                raise StructuralError(f"duplicate parents for label {j}: {list(pa)}")
            for p in pa:
                if p not in rank:
                    raise StructuralError(f"parent {p} of label {j} is not a label")
                if rank[p] >= rank[j]:
                    raise StructuralError(
                        f"parent {p} of label {j} does not precede it in order "
                        f"{list(self.order)}"
                    )

        if self.kind is ChainKind.TREE:
            roots = [j for j, pa in enumerate(self.parents) if len(pa) == 0]
            if any(len(pa) > 1 for pa in self.parents):
                raise StructuralError("tree chains allow at most one parent per label")
            if L > 0 and roots != [self.order[0]]:
                raise StructuralError(
                    f"tree chain must have exactly one root at the head of the "
                    f"order, got roots {roots}"
                )

    @classmethod
    def plain(cls, order: Sequence[int]) -> "ChainStructure":
        """Classic chain: label ``order[r]`` has parents ``order[:r]``."""
        order = validate_order(order)
        parents: list[tuple[int, ...]] = [()] * len(order)
        for r, j in enumerate(order):
            parents[j] = order[:r]
        return cls(order=order, parents=tuple(parents), kind=ChainKind.PLAIN)

    @classmethod
    def tree(
        cls, order: Sequence[int], parents: Sequence[Sequence[int]]
    ) -> "ChainStructure":
        """Tree chain with single-parent sets."""
        return cls(
            order=tuple(int(j) for j in order),
            parents=tuple(tuple(int(p) for p in pa) for pa in parents),
            kind=ChainKind.TREE,
        )

    @property
    def num_labels(self) -> int:
        return len(self.order)

    def rank(self, label: int) -> int:
        """Position of *label* in the order."""
        return self.order.index(label)
