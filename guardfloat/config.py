"""Declarative configuration for constrained types.

A ``TypeDeclaration`` names a constraint and a divergence policy by their
registry keys, so constrained types can be described in plain data (for
example a settings file) and built on demand::

    TypeDeclaration(name="Probability", constraint="real", divergence="expression").build()
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from guardfloat.constraint import CONSTRAINTS
from guardfloat.divergence import DIVERGENCES
from guardfloat.factory import ConstrainedFactory
from guardfloat.proxy import Constrained, constrained


class TypeDeclaration(BaseModel):
    """Data description of one constrained type."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, max_length=128)
    constraint: str = Field(
        ...,
        description="Constraint registry key, e.g. 'real' or 'extended_real'",
    )
    divergence: Literal["panic", "result", "expression"] = "panic"
    verify: bool = Field(
        default=True,
        description="Check the type against its laws before returning it",
    )

    @field_validator("name")
    @classmethod
    def name_is_identifier(cls, v: str) -> str:
        if not v.isidentifier():
            raise ValueError(f"Type name must be a valid identifier, got {v!r}")
        return v

    @field_validator("constraint")
    @classmethod
    def constraint_is_registered(cls, v: str) -> str:
        if v not in CONSTRAINTS:
            known = ", ".join(sorted(CONSTRAINTS))
            raise ValueError(f"Unknown constraint {v!r}; expected one of: {known}")
        return v

    def build(self) -> type[Constrained]:
        """Create the constrained type this declaration describes."""
        constraint = CONSTRAINTS[self.constraint]
        divergence = DIVERGENCES[self.divergence]
        if self.verify:
            return ConstrainedFactory.create(self.name, constraint, divergence)
        return constrained(self.name, constraint, divergence)
