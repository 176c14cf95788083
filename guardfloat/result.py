"""
Plain success/error outcomes.

``Ok`` and ``Err`` are what the outcome policy hands back from every
operation.  They deliberately define no arithmetic: a caller using the
outcome policy must unwrap each intermediate step before continuing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar, Union

from guardfloat.errors import Panic

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def ok(self) -> T | None:
        return self.value

    def err(self) -> None:
        return None

    def unwrap(self) -> T:
        return self.value

    def map(self, f: Callable[[T], Any]) -> Ok:
        return Ok(f(self.value))


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def ok(self) -> None:
        return None

    def err(self) -> E | None:
        return self.error

    def unwrap(self) -> Any:
        cause = self.error if isinstance(self.error, BaseException) else None
        raise Panic(f"called unwrap on {self!r}") from cause

    def map(self, f: Callable[[Any], Any]) -> Err[E]:
        return self


Result = Union[Ok[T], Err[E]]
