"""
Laws that every constrained type must obey.

A law is a named predicate over a constrained type and zero or more sample
floats.  Laws are purely declarative - they say WHAT must hold; the
factory (see factory.py) decides which samples to feed them.

Law sets
--------
construction_laws   try_new / new agree with the constraint, bit for bit
arithmetic_laws     every operator re-validates its raw result
expression_laws     short-circuiting, left bias, conversions, equality
                    (only for types with the EXPRESSION divergence)
"""

from __future__ import annotations

import inspect
import operator
import struct
from dataclasses import dataclass, field
from typing import Any, Callable

from guardfloat import real
from guardfloat.errors import ConstraintViolation, Panic
from guardfloat.expression import Defined, Expression, Undefined
from guardfloat.result import Err, Ok, Result


# ---------------------------------------------------------------------------
# Core law primitives
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Property:
    """One law: a predicate over the type under test and some sample floats."""

    name: str
    description: str
    predicate: Callable[..., bool]

    @property
    def arity(self) -> int:
        """How many sample floats the predicate takes after the type."""
        return len(inspect.signature(self.predicate).parameters) - 1

    def check(self, cls: type, *samples: float) -> bool:
        return self.predicate(cls, *samples)


@dataclass
class LawSet:
    """Named laws that hold together, checked in insertion order."""

    name: str
    properties: list[Property] = field(default_factory=list)

    def add(self, prop: Property) -> None:
        if any(p.name == prop.name for p in self.properties):
            raise ValueError(f"{self.name} already has a law named {prop.name!r}")
        self.properties.append(prop)

    def __getitem__(self, name: str) -> Property:
        for prop in self.properties:
            if prop.name == name:
                return prop
        raise KeyError(name)

    def __iter__(self):
        return iter(self.properties)

    def __len__(self):
        return len(self.properties)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def same_bits(a: float, b: float) -> bool:
    """Bitwise float equality: tells -0.0 from 0.0 and matches NaN with itself."""
    return struct.pack("<d", a) == struct.pack("<d", b)


def outcome_of(thunk: Callable[[], Any]) -> Result:
    """Run an operation under any policy and normalize its output to an outcome."""
    try:
        output = thunk()
    except Panic as panic:
        # Verification observes the abort; it never resumes the computation.
        return Err(panic.__cause__)
    if isinstance(output, (Ok, Err)):
        return output
    if isinstance(output, Expression):
        return output.into_result()
    return Ok(output)


def _sample_error(value: float) -> ConstraintViolation:
    return ConstraintViolation(value, "sample")


BINARY_OPERATORS: dict[str, tuple[Callable[[Any, Any], Any], real.BinaryFunction]] = {
    "add": (operator.add, real.add),
    "sub": (operator.sub, real.sub),
    "mul": (operator.mul, real.mul),
    "div": (operator.truediv, real.div),
    "rem": (operator.mod, real.rem),
    "pow": (operator.pow, real.power),
}

UNARY_OPERATORS: dict[str, tuple[Callable[[Any], Any], real.UnaryFunction]] = {
    "neg": (operator.neg, real.neg),
    "sqrt": (lambda x: x.sqrt(), real.sqrt),
    "ln": (lambda x: x.ln(), real.ln),
    "exp": (lambda x: x.exp(), real.exp),
}


# ---------------------------------------------------------------------------
# Law builders
# ---------------------------------------------------------------------------

def construction_laws() -> LawSet:
    """Construction agrees with the constraint."""
    laws = LawSet(name="construction")

    laws.add(Property(
        name="round_trip",
        description="try_new(p).unwrap() == p bit for bit when p is admitted",
        predicate=lambda cls, p: (
            not cls.constraint.admits(p)
            or same_bits(cls.try_new(p).unwrap().into_inner(), p)
        ),
    ))

    laws.add(Property(
        name="rejection",
        description="try_new(p) is an error when p is not admitted",
        predicate=lambda cls, p: cls.constraint.admits(p) or cls.try_new(p).is_err(),
    ))

    laws.add(Property(
        name="policy_routing",
        description="new(p) succeeds exactly when try_new(p) does",
        predicate=lambda cls, p: (
            outcome_of(lambda: cls.new(p)).is_ok() == cls.try_new(p).is_ok()
        ),
    ))

    return laws


def _revalidates_binary(op: Callable[[Any, Any], Any], primitive: real.BinaryFunction):
    def predicate(cls, a: float, b: float) -> bool:
        if not (cls.constraint.admits(a) and cls.constraint.admits(b)):
            return True
        x, y = cls.try_new(a).unwrap(), cls.try_new(b).unwrap()
        raw = primitive(a, b)
        outcome = outcome_of(lambda: op(x, y))
        if cls.constraint.admits(raw):
            return outcome.is_ok() and same_bits(outcome.value.into_inner(), raw)
        return outcome.is_err()

    return predicate


def _mixes_primitives(op: Callable[[Any, Any], Any]):
    def predicate(cls, a: float, b: float) -> bool:
        if not (cls.constraint.admits(a) and cls.constraint.admits(b)):
            return True
        x, y = cls.try_new(a).unwrap(), cls.try_new(b).unwrap()
        expected = outcome_of(lambda: op(x, y))
        for mixed in (outcome_of(lambda: op(x, b)), outcome_of(lambda: op(a, y))):
            if mixed.is_ok() != expected.is_ok():
                return False
            if mixed.is_ok() and not same_bits(mixed.value.into_inner(), expected.value.into_inner()):
                return False
        return True

    return predicate


def _revalidates_unary(op: Callable[[Any], Any], primitive: real.UnaryFunction):
    def predicate(cls, a: float) -> bool:
        if not cls.constraint.admits(a):
            return True
        raw = primitive(a)
        outcome = outcome_of(lambda: op(cls.try_new(a).unwrap()))
        if cls.constraint.admits(raw):
            return outcome.is_ok() and same_bits(outcome.value.into_inner(), raw)
        return outcome.is_err()

    return predicate


def arithmetic_laws() -> LawSet:
    """Every operator re-validates its primitive result."""
    laws = LawSet(name="arithmetic")

    for name, (op, primitive) in BINARY_OPERATORS.items():
        laws.add(Property(
            name=f"{name}_revalidation",
            description=f"{name}(a, b) is an error exactly when the raw result is not admitted",
            predicate=_revalidates_binary(op, primitive),
        ))
        laws.add(Property(
            name=f"{name}_primitive_mixing",
            description=f"{name} gives the same outcome for primitive and constrained operands",
            predicate=_mixes_primitives(op),
        ))

    for name, (op, primitive) in UNARY_OPERATORS.items():
        laws.add(Property(
            name=f"{name}_revalidation",
            description=f"{name}(a) is an error exactly when the raw result is not admitted",
            predicate=_revalidates_unary(op, primitive),
        ))

    return laws


def _short_circuits(cls, p: float, b: float) -> bool:
    error = _sample_error(p)
    x = Undefined(error)
    chains = (
        ((x + b) * b - b) / b,
        b + (b * (b - x)),
        (x % b) ** b,
        cls.new(b) + x if cls.constraint.admits(b) else x,
        x.sqrt().exp().pow(b),
    )
    return all(chain.undefined() is error for chain in chains)


def _left_biased(cls) -> bool:
    first, second = _sample_error(1.0), _sample_error(2.0)
    x, y = Undefined(first), Undefined(second)
    return (
        x.zip_map(y, operator.add).undefined() is first
        and (x + y).undefined() is first
        and (y * x).undefined() is second
    )


def _primitive_checked_first(cls, p: float) -> bool:
    pending = _sample_error(1.0)
    result = p + Undefined(pending, cls)
    violation = cls.constraint.check(p)
    if violation is None:
        return result.undefined() is pending
    return type(result.error) is type(violation) and same_bits(result.error.value, p)


def _converts_bijectively(cls, p: float) -> bool:
    expression = cls.new(p)
    back = Expression.from_result(expression.into_result())
    if isinstance(expression, Defined):
        return isinstance(back, Defined) and back.value is expression.value
    return isinstance(back, Undefined) and back.error is expression.error


def _equality_contract(cls, a: float, b: float) -> bool:
    x, y = cls.new(a), cls.new(b)
    if x.is_undefined() or y.is_undefined():
        return not (x == y) and x.partial_cmp(y) is None
    return (x == y) == (x.value == y.value)


def _sin_cos_propagates(cls) -> bool:
    error = _sample_error(0.0)
    sine, cosine = Undefined(error).sin_cos()
    return sine.undefined() is error and cosine.undefined() is error


def expression_laws() -> LawSet:
    """Deferred-outcome behaviour.  Only meaningful under EXPRESSION."""
    laws = LawSet(name="expression")

    laws.add(Property(
        name="short_circuit",
        description="an undefined operand's error reaches the end of any chain unchanged",
        predicate=_short_circuits,
    ))

    laws.add(Property(
        name="left_bias",
        description="when both operands are undefined the left error wins",
        predicate=_left_biased,
    ))

    laws.add(Property(
        name="primitive_left_bias",
        description="a rejected primitive on the left wins over a pending error on the right",
        predicate=_primitive_checked_first,
    ))

    laws.add(Property(
        name="conversion_bijection",
        description="expression -> outcome -> expression preserves variant and payload",
        predicate=_converts_bijectively,
    ))

    laws.add(Property(
        name="equality_contract",
        description="only defined expressions compare, and then as their values do",
        predicate=_equality_contract,
    ))

    laws.add(Property(
        name="sin_cos_propagation",
        description="sin_cos of an undefined expression is undefined in both slots",
        predicate=_sin_cos_propagates,
    ))

    return laws


def build_laws(cls) -> list[LawSet]:
    """All law sets that apply to ``cls``."""
    sets = [construction_laws(), arithmetic_laws()]
    if cls.divergence.is_deferred:
        sets.append(expression_laws())
    return sets
