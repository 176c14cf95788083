"""
Error taxonomy for constrained arithmetic.

There is a single kind of error, the constraint violation, parameterized
by which constraint failed and the primitive value it rejected.  Violations
are ordinary values: they travel inside ``Err`` and ``Undefined`` and are
only raised where a policy (or the validating constructor) says so.

``Panic`` is different.  It signals an unrecoverable fault: a violation
under the abort policy, or unwrapping an outcome that holds an error.  It
derives from ``BaseException`` so that ``except Exception`` blocks never
absorb it.
"""

from __future__ import annotations


class ConstraintViolation(ArithmeticError):
    """A primitive value does not satisfy a constraint."""

    def __init__(self, value: float, constraint: str) -> None:
        self.value = value
        self.constraint = constraint
        super().__init__(f"{value!r} violates constraint {constraint!r}")


class NotExtendedRealError(ConstraintViolation):
    """The value is NaN."""


class NotRealError(ConstraintViolation):
    """The value is NaN or infinite."""


class Panic(BaseException):
    """An unrecoverable fault.  Never caught and retried."""
