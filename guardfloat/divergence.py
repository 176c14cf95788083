"""
Divergence policies.

A divergence policy decides how a constraint violation is surfaced.  Each
constrained type carries exactly one policy for its whole lifetime:

  PANIC       the violation is fatal; operations return plain values
  RESULT      every operation returns an ``Ok`` / ``Err`` outcome
  EXPRESSION  every operation returns a ``Defined`` / ``Undefined``
              expression that can itself take part in further arithmetic

The operator matrix computes one outcome per operation and hands it to
``Divergence.diverge``, which packages it into the policy's output kind.
"""

from __future__ import annotations

from enum import Enum, auto
from typing import Any

from guardfloat.errors import Panic
from guardfloat.expression import Defined, Undefined
from guardfloat.result import Err, Ok, Result


class Divergence(Enum):
    """How a violated constraint is reported."""

    PANIC = auto()
    RESULT = auto()
    EXPRESSION = auto()

    @property
    def is_deferred(self) -> bool:
        """Whether expressions are accepted as operands."""
        return self is Divergence.EXPRESSION

    def diverge(self, outcome: Result, origin: type | None = None) -> Any:
        """Package an outcome into this policy's output kind.

        ``origin`` is the constrained type that produced the outcome.  An
        ``Undefined`` keeps it so that later operations can still check a
        primitive against that type.
        """
        if self is Divergence.RESULT:
            return outcome

        if self is Divergence.EXPRESSION:
            if isinstance(outcome, Ok):
                return Defined(outcome.value)
            return Undefined(outcome.error, origin)

        # PANIC
        if isinstance(outcome, Err):
            raise Panic(f"constraint violated: {outcome.error}") from outcome.error
        return outcome.value


DIVERGENCES: dict[str, Divergence] = {d.name.lower(): d for d in Divergence}
