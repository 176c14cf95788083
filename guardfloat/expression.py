"""
Deferred-outcome values.

An ``Expression`` is either ``Defined(value)`` or ``Undefined(error)``.  It
resembles an ``Ok`` / ``Err`` outcome, but it also implements the whole
arithmetic surface, so a chain like ``a + b + c`` can be written without
checking each step.  Once a step is undefined every later step is too,
carrying the first error unchanged; the caller inspects the final value
only once.

Expressions are immutable.  Comparisons only ever hold between two defined
expressions: ``Undefined(e) == Undefined(e)`` is False.

The short-circuit helper
------------------------
``try_expression`` unwraps an expression inside a function decorated with
``@propagating``.  If the expression is undefined, the decorated function
returns ``Undefined(error)`` immediately::

    @propagating
    def hypotenuse(a, b):
        x = try_expression(a * a)
        y = try_expression(b * b)
        return (x + y).sqrt()

``into`` and ``convert`` declare how foreign errors are adapted into the
function's own error type.  An error that is neither an instance of
``into`` nor covered by ``convert`` raises ``TypeError``.
"""

from __future__ import annotations

import functools
import math
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from guardfloat.errors import Panic
from guardfloat.real import BinaryFunction, RealFunctions, Sign, UnaryFunction, as_float, is_primitive, sign_of
from guardfloat.result import Err, Ok, Result

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")


class Expression(RealFunctions, Generic[T, E]):
    """Base of ``Defined`` and ``Undefined``."""

    __slots__ = ()

    # -- conversions --------------------------------------------------------

    @staticmethod
    def from_result(result: Result, origin: type | None = None) -> Expression:
        if isinstance(result, Ok):
            return Defined(result.value)
        return Undefined(result.error, origin)

    def into_result(self) -> Result:
        raise NotImplementedError

    # -- comparison ---------------------------------------------------------

    def partial_cmp(self, other: Expression) -> int | None:
        """-1, 0 or 1 when both sides are defined and ordered, else None."""
        if not (isinstance(self, Defined) and isinstance(other, Defined)):
            return None
        if self.value < other.value:
            return -1
        if self.value > other.value:
            return 1
        if self.value == other.value:
            return 0
        return None

    def _both_defined(self, other: Any) -> bool:
        return isinstance(self, Defined) and isinstance(other, Defined)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Expression):
            return NotImplemented
        return self._both_defined(other) and self.value == other.value

    def __ne__(self, other: object) -> bool:
        if not isinstance(other, Expression):
            return NotImplemented
        return not self == other

    def __lt__(self, other: Expression) -> bool:
        if not isinstance(other, Expression):
            return NotImplemented
        return self._both_defined(other) and self.value < other.value

    def __le__(self, other: Expression) -> bool:
        if not isinstance(other, Expression):
            return NotImplemented
        return self._both_defined(other) and self.value <= other.value

    def __gt__(self, other: Expression) -> bool:
        if not isinstance(other, Expression):
            return NotImplemented
        return self._both_defined(other) and self.value > other.value

    def __ge__(self, other: Expression) -> bool:
        if not isinstance(other, Expression):
            return NotImplemented
        return self._both_defined(other) and self.value >= other.value

    __hash__ = None  # type: ignore[assignment]

    # -- arithmetic ---------------------------------------------------------

    def _binary(self, function: BinaryFunction, other: Any, reflected: bool = False) -> Any:
        if not (isinstance(other, Expression) or is_primitive(other) or _is_constrained(other)):
            return NotImplemented
        left, right = (other, self) if reflected else (self, other)
        return _evaluate_binary(function, left, right)


@dataclass(frozen=True, eq=False, repr=False)
class Defined(Expression[T, E]):
    value: T

    def __repr__(self) -> str:
        return f"Defined({self.value!r})"

    def map(self, f: Callable[[T], U]) -> Defined[U, E]:
        return Defined(f(self.value))

    def and_then(self, f: Callable[[T], Expression[U, E]]) -> Expression[U, E]:
        return f(self.value)

    def zip_map(self, other: Expression, f: Callable[[T, Any], U]) -> Expression[U, E]:
        if isinstance(other, Undefined):
            return other
        return Defined(f(self.value, other.value))

    def defined(self) -> T:
        return self.value

    def undefined(self) -> None:
        return None

    def is_defined(self) -> bool:
        return True

    def is_undefined(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def into_result(self) -> Ok[T]:
        return Ok(self.value)

    # -- predicates ---------------------------------------------------------

    def is_nan(self) -> bool:
        return math.isnan(_numeric_value(self.value))

    def is_infinite(self) -> bool:
        return math.isinf(_numeric_value(self.value))

    def is_finite(self) -> bool:
        return math.isfinite(_numeric_value(self.value))

    def is_zero(self) -> bool:
        return _numeric_value(self.value) == 0.0

    def is_one(self) -> bool:
        return _numeric_value(self.value) == 1.0

    def sign(self) -> Sign:
        return sign_of(_numeric_value(self.value))

    # -- arithmetic ---------------------------------------------------------

    def _unary(self, function: UnaryFunction) -> Expression:
        return _arithmetic_operand(self.value)._unary(function)

    def _unary_pair(self, function: Callable[[float], tuple[float, float]]) -> tuple[Expression, Expression]:
        return _arithmetic_operand(self.value)._unary_pair(function)


@dataclass(frozen=True, eq=False, repr=False)
class Undefined(Expression[T, E]):
    error: E
    # Constrained type whose operation produced ``error``; None when built by hand.
    origin: type | None = None

    def __repr__(self) -> str:
        return f"Undefined({self.error!r})"

    def map(self, f: Callable[[T], U]) -> Undefined[U, E]:
        return self

    def and_then(self, f: Callable[[T], Expression[U, E]]) -> Undefined[U, E]:
        return self

    def zip_map(self, other: Expression, f: Callable[[T, Any], U]) -> Undefined[U, E]:
        # The left error wins even when both sides are undefined.
        return self

    def defined(self) -> None:
        return None

    def undefined(self) -> E:
        return self.error

    def is_defined(self) -> bool:
        return False

    def is_undefined(self) -> bool:
        return True

    def unwrap(self) -> Any:
        cause = self.error if isinstance(self.error, BaseException) else None
        raise Panic(f"called unwrap on {self!r}") from cause

    def into_result(self) -> Err[E]:
        return Err(self.error)

    # -- predicates ---------------------------------------------------------

    def is_nan(self) -> bool:
        return False

    def is_infinite(self) -> bool:
        return False

    def is_finite(self) -> bool:
        return False

    def is_zero(self) -> bool:
        return False

    def is_one(self) -> bool:
        return False

    def sign(self) -> Sign:
        return Sign.ZERO

    # -- arithmetic ---------------------------------------------------------

    def _unary(self, function: UnaryFunction) -> Undefined:
        return self

    def _unary_pair(self, function: Callable[[float], tuple[float, float]]) -> tuple[Undefined, Undefined]:
        return self, self


# ---------------------------------------------------------------------------
# Short-circuit propagation
# ---------------------------------------------------------------------------

class _Propagation(BaseException):
    """Carries an error from ``try_expression`` to the nearest ``@propagating`` frame."""

    def __init__(self, error: Any) -> None:
        super().__init__("try_expression used outside of a @propagating function")
        self.error = error


def try_expression(expression: Expression[T, Any]) -> T:
    """Return the defined value, or end the enclosing ``@propagating`` call."""
    if isinstance(expression, Defined):
        return expression.value
    if isinstance(expression, Undefined):
        raise _Propagation(expression.error)
    raise TypeError(f"expected an Expression, got {type(expression).__name__!r}")


def propagating(
    function: Callable[..., Any] | None = None,
    *,
    into: type | tuple[type, ...] | None = None,
    convert: Callable[[Any], Any] | None = None,
):
    """
    Decorate a function so that ``try_expression`` short-circuits it.

    The decorated function always returns an ``Expression``: a plain return
    value is wrapped in ``Defined``.  A propagated error is returned as
    ``Undefined``, unchanged if it is an instance of ``into`` (or ``into``
    is not given), otherwise passed through ``convert``.
    """

    def decorator(fn: Callable[..., Any]) -> Callable[..., Expression]:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Expression:
            try:
                output = fn(*args, **kwargs)
            except _Propagation as propagation:
                return Undefined(_adapt_error(propagation.error, into, convert))
            if isinstance(output, Expression):
                return output
            return Defined(output)

        return wrapper

    if function is not None:
        return decorator(function)
    return decorator


def _adapt_error(
    error: Any,
    into: type | tuple[type, ...] | None,
    convert: Callable[[Any], Any] | None,
) -> Any:
    if into is None or isinstance(error, into):
        return error
    if convert is not None:
        return convert(error)
    raise TypeError(
        f"no conversion declared from {type(error).__name__!r} to {into!r}"
    )


# ---------------------------------------------------------------------------
# Operator matrix: the deferred side
# ---------------------------------------------------------------------------

def _is_constrained(value: Any) -> bool:
    return getattr(type(value), "divergence", None) is not None


def _require_deferred(cls: type) -> None:
    divergence = getattr(cls, "divergence", None)
    if divergence is None or not divergence.is_deferred:
        raise TypeError(
            f"expressions over {cls.__name__!r} do not support arithmetic; "
            "the type must use the EXPRESSION divergence"
        )


def _arithmetic_operand(value: Any) -> Any:
    """Check that a defined value may take part in deferred arithmetic."""
    _require_deferred(type(value))
    return value


def _numeric_value(value: Any) -> float:
    """The float behind a defined value, as seen by the predicates."""
    if is_primitive(value):
        return as_float(value)
    if _is_constrained(value):
        return value.into_inner()
    raise TypeError(f"{type(value).__name__!r} is not a numeric value")


def _origin_of(operand: Any) -> type | None:
    """The constrained type an operand belongs to, if it can be told."""
    if isinstance(operand, Undefined):
        return operand.origin
    if isinstance(operand, Defined):
        operand = operand.value
    return type(operand) if _is_constrained(operand) else None


def _evaluate_binary(function: BinaryFunction, left: Any, right: Any) -> Expression:
    origins = [cls for cls in (_origin_of(left), _origin_of(right)) if cls is not None]
    for cls in origins:
        _require_deferred(cls)
    origin = origins[0] if origins else None

    # A primitive on the left is checked before a pending error on the right.
    if is_primitive(left) and isinstance(right, Undefined) and right.origin is not None:
        coerced = right.origin.try_new(left)
        if isinstance(coerced, Err):
            return Undefined(coerced.error, right.origin)

    # Pending errors propagate left first.
    for operand in (left, right):
        if isinstance(operand, Undefined):
            if operand.origin is None and origin is not None:
                return Undefined(operand.error, origin)
            return operand

    if isinstance(left, Defined):
        left = left.value
    if isinstance(right, Defined):
        right = right.value

    if is_primitive(left):
        output = _arithmetic_operand(right)._binary(function, left, reflected=True)
    else:
        output = _arithmetic_operand(left)._binary(function, right)

    if output is NotImplemented:
        raise TypeError(
            f"unsupported operand types for {function.__name__}: "
            f"{type(left).__name__!r} and {type(right).__name__!r}"
        )
    return output
