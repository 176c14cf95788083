"""
Constrained values and the operator matrix.

A constrained type wraps one primitive float that is guaranteed to satisfy
the type's constraint, and reports violations through the type's
divergence policy::

    class Real(Constrained, constraint=IsReal(), divergence=Divergence.EXPRESSION):
        pass

    x = Real(1.0)
    y = (x / 0.0 + 2.0) * x      # Undefined(NotRealError(inf, 'real'))

Every operation follows the same path, whatever the operand kinds:

  1. operands are checked left to right: a primitive is coerced with the
     constraint check, an undefined expression ends the operation with
     its pending error
  2. the primitive operation runs
  3. the raw result is re-validated against the constraint
  4. the outcome is packaged by the divergence policy

Operands may be raw primitives, values of the same constrained type, or
expressions over it.  Values of different constrained types do not mix.
"""

from __future__ import annotations

import math
import types
from typing import Any, Callable, ClassVar

from guardfloat.constraint import Constraint, IsExtendedReal, IsFloat, IsReal
from guardfloat.divergence import Divergence
from guardfloat.expression import Expression
from guardfloat.real import BinaryFunction, RealFunctions, Sign, UnaryFunction, as_float, is_primitive, sign_of
from guardfloat.result import Err, Ok, Result

_CONSTANTS = {
    "ZERO": 0.0,
    "ONE": 1.0,
    "E": math.e,
    "PI": math.pi,
    "FRAC_1_PI": 1.0 / math.pi,
    "FRAC_2_PI": 2.0 / math.pi,
    "FRAC_2_SQRT_PI": 2.0 / math.sqrt(math.pi),
    "FRAC_PI_2": math.pi / 2.0,
    "FRAC_PI_3": math.pi / 3.0,
    "FRAC_PI_4": math.pi / 4.0,
    "FRAC_PI_6": math.pi / 6.0,
    "FRAC_PI_8": math.pi / 8.0,
    "SQRT_2": math.sqrt(2.0),
    "FRAC_1_SQRT_2": 1.0 / math.sqrt(2.0),
    "LN_2": math.log(2.0),
    "LN_10": math.log(10.0),
    "LOG2_E": math.log2(math.e),
    "LOG10_E": math.log10(math.e),
    "INFINITY": math.inf,
    "NEG_INFINITY": -math.inf,
    "NAN": math.nan,
}


class Constrained(RealFunctions):
    """A primitive float that satisfies ``constraint``."""

    constraint: ClassVar[Constraint]
    divergence: ClassVar[Divergence]

    __slots__ = ("_inner",)

    def __init_subclass__(
        cls,
        constraint: Constraint | None = None,
        divergence: Divergence | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init_subclass__(**kwargs)
        if constraint is not None:
            if hasattr(cls, "constraint"):
                raise TypeError(f"{cls.__name__} is already constrained")
            cls.constraint = constraint
            cls.divergence = divergence if divergence is not None else Divergence.PANIC
        elif divergence is not None:
            raise TypeError("a divergence requires a constraint")

        if hasattr(cls, "constraint"):
            if not hasattr(cls, "divergence"):
                cls.divergence = Divergence.PANIC
            for name, value in _CONSTANTS.items():
                if cls.constraint.admits(value):
                    setattr(cls, name, cls._unchecked(value))

    # -- construction -------------------------------------------------------

    def __init__(self, value: float) -> None:
        """Validate ``value``, raising the constraint's error if it fails."""
        outcome = type(self).try_new(value)
        if isinstance(outcome, Err):
            raise outcome.error
        object.__setattr__(self, "_inner", outcome.value._inner)

    @classmethod
    def _unchecked(cls, value: float) -> Constrained:
        instance = object.__new__(cls)
        object.__setattr__(instance, "_inner", value)
        return instance

    @classmethod
    def try_new(cls, value: float) -> Result:
        """Construct from a primitive: ``Ok(instance)`` or ``Err(violation)``."""
        if not hasattr(cls, "constraint"):
            raise TypeError(f"{cls.__name__} has no constraint")
        if not is_primitive(value):
            raise TypeError(f"expected a primitive number, got {type(value).__name__!r}")
        value = as_float(value)
        error = cls.constraint.check(value)
        if error is not None:
            return Err(error)
        return Ok(cls._unchecked(value))

    @classmethod
    def new(cls, value: float) -> Any:
        """Construct from a primitive, reporting a violation through the policy."""
        return cls.divergence.diverge(cls.try_new(value), cls)

    @classmethod
    def constant(cls, name: str) -> Any:
        """A named constant packaged by the policy, e.g. ``Defined(Real.PI)`` under EXPRESSION."""
        if name not in _CONSTANTS:
            raise AttributeError(f"unknown constant {name!r}")
        if not hasattr(cls, name):
            raise AttributeError(f"{cls.__name__} does not admit {name}")
        return cls.divergence.diverge(Ok(getattr(cls, name)), cls)

    def into_inner(self) -> float:
        return self._inner

    def __float__(self) -> float:
        return self._inner

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __reduce__(self):
        return type(self)._unchecked, (self._inner,)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._inner!r})"

    def __str__(self) -> str:
        return str(self._inner)

    # -- comparison ---------------------------------------------------------

    def _comparable(self, other: Any) -> float | None:
        if type(other) is type(self):
            return other._inner
        if is_primitive(other):
            return as_float(other)
        return None

    def __eq__(self, other: object) -> bool:
        value = self._comparable(other)
        if value is None:
            return NotImplemented
        return self._inner == value

    def __ne__(self, other: object) -> bool:
        value = self._comparable(other)
        if value is None:
            return NotImplemented
        return self._inner != value

    def __lt__(self, other: Any) -> bool:
        value = self._comparable(other)
        if value is None:
            return NotImplemented
        return self._inner < value

    def __le__(self, other: Any) -> bool:
        value = self._comparable(other)
        if value is None:
            return NotImplemented
        return self._inner <= value

    def __gt__(self, other: Any) -> bool:
        value = self._comparable(other)
        if value is None:
            return NotImplemented
        return self._inner > value

    def __ge__(self, other: Any) -> bool:
        value = self._comparable(other)
        if value is None:
            return NotImplemented
        return self._inner >= value

    def __hash__(self) -> int:
        return hash(self._inner)

    # -- predicates ---------------------------------------------------------

    def is_nan(self) -> bool:
        return math.isnan(self._inner)

    def is_infinite(self) -> bool:
        return math.isinf(self._inner)

    def is_finite(self) -> bool:
        return math.isfinite(self._inner)

    def is_zero(self) -> bool:
        return self._inner == 0.0

    def is_one(self) -> bool:
        return self._inner == 1.0

    def sign(self) -> Sign:
        return sign_of(self._inner)

    # -- operator matrix ----------------------------------------------------

    @classmethod
    def _revalidate(cls, raw: float) -> Any:
        return cls.divergence.diverge(cls.try_new(raw), cls)

    def _coerce(self, other: Any) -> Result | None:
        if type(other) is type(self):
            return Ok(other)
        if is_primitive(other):
            return type(self).try_new(other)
        return None

    def _binary(self, function: BinaryFunction, other: Any, reflected: bool = False) -> Any:
        cls = type(self)
        if isinstance(other, Expression):
            if not cls.divergence.is_deferred:
                raise TypeError(
                    f"{cls.__name__} uses the {cls.divergence.name} divergence "
                    "and does not accept expressions as operands"
                )
            return other._binary(function, self, reflected=not reflected)

        operand = self._coerce(other)
        if operand is None:
            return NotImplemented
        if isinstance(operand, Err):
            return cls.divergence.diverge(operand, cls)

        left, right = (operand.value, self) if reflected else (self, operand.value)
        return cls._revalidate(function(left._inner, right._inner))

    def _unary(self, function: UnaryFunction) -> Any:
        return type(self)._revalidate(function(self._inner))

    def _unary_pair(self, function: Callable[[float], tuple[float, float]]) -> tuple[Any, Any]:
        first, second = function(self._inner)
        return type(self)._revalidate(first), type(self)._revalidate(second)


def constrained(
    name: str,
    constraint: Constraint,
    divergence: Divergence = Divergence.PANIC,
    module: str = __name__,
) -> type[Constrained]:
    """Build a constrained type at runtime."""
    return types.new_class(
        name,
        (Constrained,),
        {"constraint": constraint, "divergence": divergence},
        lambda ns: ns.update({"__slots__": (), "__module__": module}),
    )


# ---------------------------------------------------------------------------
# Presets
# ---------------------------------------------------------------------------

class Total(Constrained, constraint=IsFloat()):
    """Any float, NaN included.  Operations never fail."""

    __slots__ = ()


class ExtendedReal(Constrained, constraint=IsExtendedReal()):
    """Never NaN; infinities allowed."""

    __slots__ = ()


class Real(Constrained, constraint=IsReal()):
    """Always finite."""

    __slots__ = ()
