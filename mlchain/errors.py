"""Error and warning types raised by the chain engine.

Collaborator failures (label classifiers, evaluators, dependency
estimators) are never wrapped: their exceptions propagate unchanged.
"""

from __future__ import annotations


class StructuralError(ValueError):
    """Invalid chain structure: bad order, malformed parent sets, cycles,
    or a dependency matrix of the wrong shape."""


class RootIndexError(StructuralError, IndexError):
    """Tree root index outside ``[0, L)``."""


class EnumerationLimitWarning(UserWarning):
    """Exhaustive inference stopped at its combination cap.

    The returned labels maximise the joint probability over the
    enumerated prefix only.
    """
