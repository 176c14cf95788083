"""
Tests for constrained values and the three divergence policies.

Each policy is driven through the same operations:
  - PANIC       plain values, ``Panic`` on violation
  - RESULT      ``Ok`` / ``Err`` from every operation
  - EXPRESSION  ``Defined`` / ``Undefined`` from every operation
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import math
import pickle

import pytest

from guardfloat.constraint import IsExtendedReal, IsFloat, IsReal
from guardfloat.divergence import DIVERGENCES, Divergence
from guardfloat.errors import ConstraintViolation, NotExtendedRealError, NotRealError, Panic
from guardfloat.expression import Defined, Undefined
from guardfloat.proxy import Constrained, ExtendedReal, Real, Total, constrained
from guardfloat.result import Err, Ok


class ResultReal(Constrained, constraint=IsReal(), divergence=Divergence.RESULT):
    __slots__ = ()


class ExpressionReal(Constrained, constraint=IsReal(), divergence=Divergence.EXPRESSION):
    __slots__ = ()


# ---------------------------------------------------------------------------
# Abort policy
# ---------------------------------------------------------------------------

class TestPanic:
    def test_defined_operations_return_plain_values(self):
        result = Real(1.0) + 2.0
        assert isinstance(result, Real)
        assert result == 3.0

    def test_violation_panics_with_cause(self):
        with pytest.raises(Panic) as excinfo:
            Real(1.0) / 0.0
        cause = excinfo.value.__cause__
        assert isinstance(cause, NotRealError)
        assert cause.value == math.inf
        assert cause.constraint == "real"

    def test_panic_escapes_broad_handlers(self):
        def swallow():
            try:
                return Real(-1.0).sqrt()
            except Exception:
                return "swallowed"

        with pytest.raises(Panic):
            swallow()

    def test_invalid_primitive_operand_panics(self):
        with pytest.raises(Panic) as excinfo:
            ExtendedReal(1.0) * math.nan
        assert isinstance(excinfo.value.__cause__, NotExtendedRealError)

    def test_unary_violation(self):
        with pytest.raises(Panic):
            Real(0.0).ln()
        assert ExtendedReal(0.0).ln() == -math.inf

    def test_total_never_panics(self):
        assert (Total(0.0) / 0.0).is_nan()
        assert Total(-1.0).sqrt().is_nan()
        assert (Total(1.0) / 0.0).into_inner() == math.inf


# ---------------------------------------------------------------------------
# Outcome policy
# ---------------------------------------------------------------------------

class TestResult:
    def test_success_is_ok(self):
        result = ResultReal(1.0) + 2.0
        assert result == Ok(ResultReal(3.0))
        assert result.is_ok()

    def test_violation_is_err(self):
        result = ResultReal(1.0) / 0.0
        assert result.is_err()
        assert isinstance(result.err(), NotRealError)

    def test_reflected_operator(self):
        assert (2.0 - ResultReal(1.0)).unwrap() == 1.0

    def test_outcomes_have_no_arithmetic(self):
        """Each intermediate outcome must be unwrapped before it is used again."""
        step = ResultReal(1.0) + 1.0
        with pytest.raises(TypeError):
            step + 1.0
        with pytest.raises(TypeError):
            ResultReal(1.0) + step

    def test_unwrap_err_panics(self):
        error = (ResultReal(1.0) / 0.0).err()
        with pytest.raises(Panic) as excinfo:
            Err(error).unwrap()
        assert excinfo.value.__cause__ is error

    def test_expressions_rejected(self):
        with pytest.raises(TypeError):
            ResultReal(1.0) + Defined(ResultReal(1.0))

    def test_invalid_primitive_operand(self):
        result = ResultReal(1.0) + math.inf
        assert isinstance(result.err(), NotRealError)


# ---------------------------------------------------------------------------
# Deferred policy
# ---------------------------------------------------------------------------

class TestExpression:
    def test_success_is_defined(self):
        result = ExpressionReal(1.0) + 2.0
        assert isinstance(result, Defined)
        assert result.value == ExpressionReal(3.0)

    def test_violation_is_undefined(self):
        result = ExpressionReal(1.0) / 0.0
        assert isinstance(result, Undefined)
        assert isinstance(result.error, NotRealError)

    def test_results_keep_composing(self):
        result = (ExpressionReal(3.0) * 2.0 + 1.0) / ExpressionReal(7.0)
        assert result.unwrap() == 1.0


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

class TestConstruction:
    def test_constructor_validates(self):
        with pytest.raises(NotRealError):
            Real(math.nan)
        with pytest.raises(NotRealError):
            Real(math.inf)
        with pytest.raises(NotExtendedRealError):
            ExtendedReal(math.nan)
        assert ExtendedReal(math.inf).is_infinite()
        assert Total(math.nan).is_nan()

    def test_violation_is_an_ordinary_exception(self):
        assert issubclass(NotRealError, ConstraintViolation)
        assert issubclass(ConstraintViolation, ArithmeticError)

    def test_try_new(self):
        assert Real.try_new(1.5) == Ok(Real(1.5))
        outcome = Real.try_new(math.inf)
        assert isinstance(outcome, Err)
        assert isinstance(outcome.error, NotRealError)

    def test_try_new_coerces_ints(self):
        value = Real.try_new(2).unwrap().into_inner()
        assert type(value) is float
        assert value == 2.0

    def test_try_new_saturates_huge_ints(self):
        outcome = Real.try_new(10 ** 400)
        assert isinstance(outcome.error, NotRealError)
        assert outcome.error.value == math.inf
        assert Real.try_new(-10 ** 400).error.value == -math.inf
        assert ExtendedReal(10 ** 400).into_inner() == math.inf

    def test_huge_int_operand_routes_through_policy(self):
        with pytest.raises(Panic):
            Real(1.0) + 10 ** 400
        assert (ResultReal(1.0) * 10 ** 400).is_err()
        assert (10 ** 400 - ExpressionReal(1.0)).is_undefined()

    def test_comparison_with_huge_ints(self):
        assert Real(1.0) < 10 ** 400
        assert Real(1.0) > -10 ** 400
        assert ExtendedReal.INFINITY == 10 ** 400

    def test_try_new_rejects_non_primitives(self):
        with pytest.raises(TypeError):
            Real.try_new("1.0")
        with pytest.raises(TypeError):
            Real.try_new(True)
        with pytest.raises(TypeError):
            Real.try_new(Real(1.0))

    def test_new_routes_through_policy(self):
        assert Real.new(1.0) == Real(1.0)
        with pytest.raises(Panic):
            Real.new(math.nan)
        assert ResultReal.new(1.0) == Ok(ResultReal(1.0))
        assert ResultReal.new(math.nan).is_err()
        assert ExpressionReal.new(1.0).is_defined()
        assert ExpressionReal.new(math.nan).is_undefined()

    def test_unconstrained_base_cannot_be_built(self):
        with pytest.raises(TypeError):
            Constrained.try_new(1.0)

    def test_conversions(self):
        x = Real(2.5)
        assert x.into_inner() == 2.5
        assert float(x) == 2.5
        assert repr(x) == "Real(2.5)"
        assert str(x) == "2.5"


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

class TestConstants:
    def test_finite_constants(self):
        assert Real.ZERO == 0.0
        assert Real.ONE == 1.0
        assert Real.E == math.e
        assert Real.PI == math.pi
        assert isinstance(Real.PI, Real)

    def test_mathematical_constants(self):
        assert Real.SQRT_2 == math.sqrt(2.0)
        assert Real.FRAC_1_SQRT_2 == 1.0 / math.sqrt(2.0)
        assert Real.FRAC_PI_2 == math.pi / 2.0
        assert Real.FRAC_PI_4 == math.pi / 4.0
        assert Real.FRAC_PI_8 == math.pi / 8.0
        assert Real.FRAC_1_PI == 1.0 / math.pi
        assert Real.FRAC_2_SQRT_PI == 2.0 / math.sqrt(math.pi)
        assert Real.LN_2 == math.log(2.0)
        assert Real.LN_10 == math.log(10.0)
        assert Real.LOG2_E == pytest.approx(1.0 / math.log(2.0))
        assert Real.LOG10_E == pytest.approx(1.0 / math.log(10.0))

    def test_constant_packaged_by_policy(self):
        defined = ExpressionReal.constant("PI")
        assert isinstance(defined, Defined)
        assert defined.value is ExpressionReal.PI
        assert ResultReal.constant("E") == Ok(ResultReal.E)
        assert Real.constant("ONE") is Real.ONE

    def test_constant_usable_in_expressions(self):
        half_turn = ExpressionReal.constant("FRAC_PI_2") * 2.0
        assert half_turn.unwrap().into_inner() == math.pi

    def test_constant_outside_the_constraint(self):
        with pytest.raises(AttributeError, match="does not admit NAN"):
            Real.constant("NAN")
        assert ExtendedReal.constant("INFINITY").into_inner() == math.inf

    def test_unknown_constant(self):
        with pytest.raises(AttributeError, match="unknown constant"):
            Real.constant("TAU")

    def test_constants_follow_the_constraint(self):
        assert not hasattr(Real, "INFINITY")
        assert not hasattr(Real, "NAN")
        assert ExtendedReal.INFINITY.into_inner() == math.inf
        assert ExtendedReal.NEG_INFINITY.into_inner() == -math.inf
        assert not hasattr(ExtendedReal, "NAN")
        assert Total.NAN.is_nan()

    def test_subclass_constants_have_subclass_type(self):
        class Probability(Real):
            __slots__ = ()

        assert type(Probability.ONE) is Probability


# ---------------------------------------------------------------------------
# Value semantics
# ---------------------------------------------------------------------------

class TestValueSemantics:
    def test_immutable(self):
        x = Real(1.0)
        with pytest.raises(AttributeError):
            x._inner = 2.0
        with pytest.raises(AttributeError):
            x.other = 2.0
        with pytest.raises(AttributeError):
            del x._inner

    def test_hashable(self):
        assert len({Real(1.0), Real(1.0), Real(2.0)}) == 2
        assert hash(Real(1.0)) == hash(1.0)

    def test_pickle(self):
        x = Real(1.5)
        y = pickle.loads(pickle.dumps(x))
        assert type(y) is Real
        assert y == x

    def test_comparison_with_primitives(self):
        assert Real(1.0) < 2.0
        assert Real(1.0) <= 1
        assert Real(3.0) > Real(2.0)
        assert Real(1.0) == 1

    def test_different_types_are_unequal(self):
        assert Real(1.0) != ExtendedReal(1.0)
        with pytest.raises(TypeError):
            Real(1.0) < ExtendedReal(2.0)

    def test_nan_comparisons(self):
        assert Total.NAN != Total.NAN
        assert not (Total.NAN < Total.ONE)


# ---------------------------------------------------------------------------
# Declaring types
# ---------------------------------------------------------------------------

class TestDeclaration:
    def test_default_policy_is_panic(self):
        class Unit(Constrained, constraint=IsReal()):
            __slots__ = ()

        assert Unit.divergence is Divergence.PANIC

    def test_cannot_constrain_twice(self):
        with pytest.raises(TypeError, match="already constrained"):
            class Twice(Real, constraint=IsFloat()):
                __slots__ = ()

    def test_divergence_requires_constraint(self):
        with pytest.raises(TypeError):
            class Loose(Constrained, divergence=Divergence.RESULT):
                __slots__ = ()

    def test_runtime_construction(self):
        cls = constrained("Finite", IsReal(), Divergence.EXPRESSION, module="models")
        assert cls.__name__ == "Finite"
        assert cls.__module__ == "models"
        assert issubclass(cls, Constrained)
        assert cls.constraint == IsReal()
        assert cls.divergence is Divergence.EXPRESSION
        assert (cls(1.0) / 0.0).is_undefined()

    def test_presets(self):
        assert Total.constraint == IsFloat()
        assert ExtendedReal.constraint == IsExtendedReal()
        assert Real.constraint == IsReal()
        for cls in (Total, ExtendedReal, Real):
            assert cls.divergence is Divergence.PANIC


# ---------------------------------------------------------------------------
# The policy selector itself
# ---------------------------------------------------------------------------

class TestDiverge:
    def test_registry(self):
        assert DIVERGENCES == {
            "panic": Divergence.PANIC,
            "result": Divergence.RESULT,
            "expression": Divergence.EXPRESSION,
        }

    def test_only_expression_is_deferred(self):
        assert Divergence.EXPRESSION.is_deferred
        assert not Divergence.RESULT.is_deferred
        assert not Divergence.PANIC.is_deferred

    def test_diverge(self):
        error = ConstraintViolation(math.nan, "real")
        assert Divergence.PANIC.diverge(Ok(1)) == 1
        assert Divergence.RESULT.diverge(Err(error)) == Err(error)
        assert Divergence.EXPRESSION.diverge(Err(error)).undefined() is error
        with pytest.raises(Panic) as excinfo:
            Divergence.PANIC.diverge(Err(error))
        assert excinfo.value.__cause__ is error

    def test_diverge_records_origin(self):
        error = ConstraintViolation(math.nan, "real")
        assert Divergence.EXPRESSION.diverge(Err(error), Real).origin is Real
        assert Divergence.EXPRESSION.diverge(Err(error)).origin is None

    def test_failed_operation_records_its_type(self):
        assert (ExpressionReal(1.0) / 0.0).origin is ExpressionReal
        assert ExpressionReal.new(math.nan).origin is ExpressionReal
        assert ExpressionReal(-1.0).sqrt().origin is ExpressionReal
