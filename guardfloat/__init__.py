"""
Constrained floating-point values with selectable error handling.

A constrained type wraps a float that always satisfies its constraint
(never NaN, always finite, ...).  Its divergence policy decides what
happens when arithmetic would break the constraint: abort (``PANIC``),
return an ``Ok`` / ``Err`` outcome (``RESULT``), or return a deferred
``Defined`` / ``Undefined`` expression that keeps composing (``EXPRESSION``).
"""

from guardfloat.constraint import CONSTRAINTS, Constraint, IsExtendedReal, IsFloat, IsReal
from guardfloat.divergence import Divergence
from guardfloat.errors import ConstraintViolation, NotExtendedRealError, NotRealError, Panic
from guardfloat.expression import Defined, Expression, Undefined, propagating, try_expression
from guardfloat.proxy import Constrained, ExtendedReal, Real, Total, constrained
from guardfloat.real import Sign
from guardfloat.result import Err, Ok, Result

__all__ = [
    # Constraints
    "CONSTRAINTS",
    "Constraint",
    "IsExtendedReal",
    "IsFloat",
    "IsReal",
    # Policies
    "Divergence",
    # Errors
    "ConstraintViolation",
    "NotExtendedRealError",
    "NotRealError",
    "Panic",
    # Outcomes
    "Defined",
    "Err",
    "Expression",
    "Ok",
    "Result",
    "Undefined",
    "propagating",
    "try_expression",
    # Constrained values
    "Constrained",
    "ExtendedReal",
    "Real",
    "Sign",
    "Total",
    "constrained",
]
