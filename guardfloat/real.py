"""
Real-valued function surface.

Two layers live here:

  1. Primitive math.  Plain functions from floats to floats with total
     IEEE-754 semantics: ``1.0 / 0.0`` is ``inf`` and ``sqrt(-1.0)`` is
     ``nan``, never an exception.  They are evaluated with numpy ufuncs
     under ``errstate(all="ignore")``.  Whether such a result is
     acceptable is for the constraint to decide.

  2. ``RealFunctions``, a mixin that spells out the operator and function
     surface once.  Every method funnels into one of three generic hooks
     (``_unary``, ``_binary``, ``_unary_pair``) that the constrained value
     and the deferred-outcome value each implement.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Any, Callable

import numpy as np

UnaryFunction = Callable[[float], float]
BinaryFunction = Callable[[float, float], float]

PRIMITIVES = (int, float)


def is_primitive(value: Any) -> bool:
    """Raw numbers that may be mixed into constrained arithmetic."""
    return isinstance(value, PRIMITIVES) and not isinstance(value, bool)


def as_float(value: Any) -> float:
    """Convert a primitive to float.  Ints beyond the float range round to an infinity."""
    try:
        return float(value)
    except OverflowError:
        return math.inf if value > 0 else -math.inf


def evaluate(function: Callable[..., Any], *args: float) -> float:
    """Apply a numpy function with floating-point warnings silenced."""
    with np.errstate(all="ignore"):
        return float(function(*args))


# ---------------------------------------------------------------------------
# Sign
# ---------------------------------------------------------------------------

class Sign(Enum):
    NEGATIVE = -1
    ZERO = 0
    POSITIVE = 1


def sign_of(value: float) -> Sign:
    """Sign of a primitive.  Both zeros and NaN map to ZERO."""
    if value > 0.0:
        return Sign.POSITIVE
    if value < 0.0:
        return Sign.NEGATIVE
    return Sign.ZERO


# ---------------------------------------------------------------------------
# Primitive arithmetic
# ---------------------------------------------------------------------------

def add(a: float, b: float) -> float:
    return evaluate(np.add, a, b)


def sub(a: float, b: float) -> float:
    return evaluate(np.subtract, a, b)


def mul(a: float, b: float) -> float:
    return evaluate(np.multiply, a, b)


def div(a: float, b: float) -> float:
    return evaluate(np.divide, a, b)


def rem(a: float, b: float) -> float:
    """Truncated remainder: the result has the sign of ``a``."""
    return evaluate(np.fmod, a, b)


def neg(a: float) -> float:
    return evaluate(np.negative, a)


def power(a: float, b: float) -> float:
    return evaluate(np.power, a, b)


def powi(a: float, n: int) -> float:
    return evaluate(np.power, a, float(n))


def div_euclid(a: float, b: float) -> float:
    """Quotient of euclidean division, so that ``rem_euclid`` is never negative."""
    q = evaluate(np.trunc, div(a, b))
    if rem(a, b) < 0.0:
        return q - 1.0 if b > 0.0 else q + 1.0
    return q


def rem_euclid(a: float, b: float) -> float:
    r = rem(a, b)
    if r < 0.0:
        return r + abs(b)
    return r


def log_base(a: float, base: float) -> float:
    return div(ln(a), ln(base))


def hypot(a: float, b: float) -> float:
    return evaluate(np.hypot, a, b)


def atan2(a: float, b: float) -> float:
    return evaluate(np.arctan2, a, b)


# ---------------------------------------------------------------------------
# Primitive unary functions
# ---------------------------------------------------------------------------

def absolute(a: float) -> float:
    return evaluate(np.fabs, a)


def floor(a: float) -> float:
    return evaluate(np.floor, a)


def ceil(a: float) -> float:
    return evaluate(np.ceil, a)


def trunc(a: float) -> float:
    return evaluate(np.trunc, a)


def round_half_away(a: float) -> float:
    """Round to the nearest integer, ties away from zero."""
    t = trunc(a)
    # Subtracting the integral part is exact; NaN and infinities fall through.
    if abs(a - t) >= 0.5:
        t += evaluate(np.copysign, 1.0, a)
    return t


def fract(a: float) -> float:
    return sub(a, trunc(a))


def recip(a: float) -> float:
    return div(1.0, a)


def sqrt(a: float) -> float:
    return evaluate(np.sqrt, a)


def cbrt(a: float) -> float:
    return evaluate(np.cbrt, a)


def exp(a: float) -> float:
    return evaluate(np.exp, a)


def exp2(a: float) -> float:
    return evaluate(np.exp2, a)


def expm1(a: float) -> float:
    return evaluate(np.expm1, a)


def ln(a: float) -> float:
    return evaluate(np.log, a)


def log2(a: float) -> float:
    return evaluate(np.log2, a)


def log10(a: float) -> float:
    return evaluate(np.log10, a)


def log1p(a: float) -> float:
    return evaluate(np.log1p, a)


def degrees(a: float) -> float:
    return evaluate(np.degrees, a)


def radians(a: float) -> float:
    return evaluate(np.radians, a)


def sin(a: float) -> float:
    return evaluate(np.sin, a)


def cos(a: float) -> float:
    return evaluate(np.cos, a)


def tan(a: float) -> float:
    return evaluate(np.tan, a)


def asin(a: float) -> float:
    return evaluate(np.arcsin, a)


def acos(a: float) -> float:
    return evaluate(np.arccos, a)


def atan(a: float) -> float:
    return evaluate(np.arctan, a)


def sin_cos(a: float) -> tuple[float, float]:
    return sin(a), cos(a)


def sinh(a: float) -> float:
    return evaluate(np.sinh, a)


def cosh(a: float) -> float:
    return evaluate(np.cosh, a)


def tanh(a: float) -> float:
    return evaluate(np.tanh, a)


def asinh(a: float) -> float:
    return evaluate(np.arcsinh, a)


def acosh(a: float) -> float:
    return evaluate(np.arccosh, a)


def atanh(a: float) -> float:
    return evaluate(np.arctanh, a)


# ---------------------------------------------------------------------------
# Operator and function surface
# ---------------------------------------------------------------------------

class RealFunctions:
    """
    The arithmetic surface shared by constrained and deferred values.

    Implementations provide the three hooks below.  ``_binary`` returns
    ``NotImplemented`` for operand types it does not understand so that
    Python's reflected-operator protocol can take over.
    """

    __slots__ = ()

    def _unary(self, function: UnaryFunction) -> Any:
        raise NotImplementedError

    def _binary(self, function: BinaryFunction, other: Any, reflected: bool = False) -> Any:
        raise NotImplementedError

    def _unary_pair(self, function: Callable[[float], tuple[float, float]]) -> tuple[Any, Any]:
        raise NotImplementedError

    def _call_binary(self, function: BinaryFunction, other: Any) -> Any:
        result = self._binary(function, other)
        if result is NotImplemented:
            raise TypeError(
                f"unsupported operand types for {function.__name__}: "
                f"{type(self).__name__!r} and {type(other).__name__!r}"
            )
        return result

    # -- operators ----------------------------------------------------------

    def __add__(self, other):
        return self._binary(add, other)

    def __radd__(self, other):
        return self._binary(add, other, reflected=True)

    def __sub__(self, other):
        return self._binary(sub, other)

    def __rsub__(self, other):
        return self._binary(sub, other, reflected=True)

    def __mul__(self, other):
        return self._binary(mul, other)

    def __rmul__(self, other):
        return self._binary(mul, other, reflected=True)

    def __truediv__(self, other):
        return self._binary(div, other)

    def __rtruediv__(self, other):
        return self._binary(div, other, reflected=True)

    def __mod__(self, other):
        return self._binary(rem, other)

    def __rmod__(self, other):
        return self._binary(rem, other, reflected=True)

    def __pow__(self, other):
        return self._binary(power, other)

    def __rpow__(self, other):
        return self._binary(power, other, reflected=True)

    def __neg__(self):
        return self._unary(neg)

    def __abs__(self):
        return self._unary(absolute)

    # -- binary functions ---------------------------------------------------

    def pow(self, n):
        return self._call_binary(power, n)

    def log(self, base):
        return self._call_binary(log_base, base)

    def hypot(self, other):
        return self._call_binary(hypot, other)

    def atan2(self, other):
        return self._call_binary(atan2, other)

    def div_euclid(self, n):
        return self._call_binary(div_euclid, n)

    def rem_euclid(self, n):
        return self._call_binary(rem_euclid, n)

    # -- unary functions ----------------------------------------------------

    def abs(self):
        return self._unary(absolute)

    def floor(self):
        return self._unary(floor)

    def ceil(self):
        return self._unary(ceil)

    def round(self):
        return self._unary(round_half_away)

    def trunc(self):
        return self._unary(trunc)

    def fract(self):
        return self._unary(fract)

    def recip(self):
        return self._unary(recip)

    def powi(self, n: int):
        return self._unary(lambda a: powi(a, n))

    def sqrt(self):
        return self._unary(sqrt)

    def cbrt(self):
        return self._unary(cbrt)

    def exp(self):
        return self._unary(exp)

    def exp2(self):
        return self._unary(exp2)

    def expm1(self):
        return self._unary(expm1)

    def ln(self):
        return self._unary(ln)

    def log2(self):
        return self._unary(log2)

    def log10(self):
        return self._unary(log10)

    def log1p(self):
        return self._unary(log1p)

    def degrees(self):
        return self._unary(degrees)

    def radians(self):
        return self._unary(radians)

    def sin(self):
        return self._unary(sin)

    def cos(self):
        return self._unary(cos)

    def tan(self):
        return self._unary(tan)

    def asin(self):
        return self._unary(asin)

    def acos(self):
        return self._unary(acos)

    def atan(self):
        return self._unary(atan)

    def sin_cos(self):
        """Sine and cosine at once.  An error reaches both slots."""
        return self._unary_pair(sin_cos)

    def sinh(self):
        return self._unary(sinh)

    def cosh(self):
        return self._unary(cosh)

    def tanh(self):
        return self._unary(tanh)

    def asinh(self):
        return self._unary(asinh)

    def acosh(self):
        return self._unary(acosh)

    def atanh(self):
        return self._unary(atanh)
