"""
Constraint layer.

A constraint is a predicate over primitive floats.  It answers one
question for the arithmetic core: does this value satisfy me, and if not,
which error describes the violation?

Constraints say nothing about *how* a violation is surfaced; that is the
job of the divergence policy (see divergence.py).
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass

from guardfloat.errors import ConstraintViolation, NotExtendedRealError, NotRealError


@dataclass(frozen=True)
class Constraint(ABC):
    """A predicate over primitive values."""

    name: str = "constraint"

    @abstractmethod
    def check(self, value: float) -> ConstraintViolation | None:
        """Return the violation for ``value``, or ``None`` if it is a member."""

    def admits(self, value: float) -> bool:
        return self.check(value) is None


@dataclass(frozen=True)
class IsFloat(Constraint):
    """Every IEEE-754 value, NaN and infinities included."""

    name: str = "float"

    def check(self, value: float) -> ConstraintViolation | None:
        return None


@dataclass(frozen=True)
class IsExtendedReal(Constraint):
    """Real numbers and infinities; NaN is rejected."""

    name: str = "extended_real"

    def check(self, value: float) -> ConstraintViolation | None:
        if math.isnan(value):
            return NotExtendedRealError(value, self.name)
        return None


@dataclass(frozen=True)
class IsReal(Constraint):
    """Finite real numbers only."""

    name: str = "real"

    def check(self, value: float) -> ConstraintViolation | None:
        if not math.isfinite(value):
            return NotRealError(value, self.name)
        return None


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

CONSTRAINTS: dict[str, Constraint] = {
    c.name: c for c in (IsFloat(), IsExtendedReal(), IsReal())
}
