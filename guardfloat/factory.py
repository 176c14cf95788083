"""
The verified type factory.

The factory does not just construct constrained types - it *verifies*
them against their laws before releasing them.

Flow:
  1. Caller requests a type for a constraint and a divergence policy.
  2. Factory builds the class.
  3. Factory runs every applicable law set over an edge-case sample of
     floats (zeros of both signs, ones, extremes, subnormals,
     infinities, NaN).
  4. If verification passes  -> return the type.
     If verification fails   -> raise, never hand out a broken type.
"""

from __future__ import annotations

import itertools
import logging
import math
import sys
from dataclasses import dataclass, field

from guardfloat.constraint import Constraint
from guardfloat.divergence import Divergence
from guardfloat.laws import LawSet, Property, build_laws
from guardfloat.proxy import Constrained, constrained

logger = logging.getLogger(__name__)

EDGE_SAMPLES: tuple[float, ...] = (
    0.0,
    -0.0,
    1.0,
    -1.0,
    0.5,
    -2.5,
    math.pi,
    sys.float_info.max,
    -sys.float_info.max,
    5e-324,
    math.inf,
    -math.inf,
    math.nan,
)


@dataclass(frozen=True)
class VerificationResult:
    """How one law fared over the sample."""

    law: str
    passed: bool
    samples_checked: int
    counterexample: tuple[float, ...] | None = None

    def __str__(self) -> str:
        line = f"{'ok  ' if self.passed else 'FAIL'} {self.law} [{self.samples_checked} samples]"
        if self.counterexample is not None:
            line += f" counterexample={self.counterexample!r}"
        return line


@dataclass
class VerificationReport:
    """Every law of one law set, checked against one constrained type."""

    type_name: str
    law_set: str
    results: list[VerificationResult] = field(default_factory=list)

    @property
    def failures(self) -> list[VerificationResult]:
        return [r for r in self.results if not r.passed]

    @property
    def passed(self) -> bool:
        return not self.failures

    def summary(self) -> str:
        lines = [f"{self.type_name}: {self.law_set} laws"]
        lines.extend(f"  {r}" for r in self.results)
        if self.passed:
            lines.append("  => all laws hold")
        else:
            lines.append(f"  => {len(self.failures)} of {len(self.results)} laws broken")
        return "\n".join(lines)


class VerificationError(Exception):
    """Raised instead of returning a constrained type that breaks a law."""

    def __init__(self, report: VerificationReport):
        self.report = report
        super().__init__(
            f"{report.type_name} breaks its {report.law_set} laws\n{report.summary()}"
        )


# ---------------------------------------------------------------------------
# The factory
# ---------------------------------------------------------------------------

class ConstrainedFactory:
    """Produces constrained types that are checked against their laws."""

    samples: tuple[float, ...] = EDGE_SAMPLES

    @classmethod
    def create(
        cls,
        name: str,
        constraint: Constraint,
        divergence: Divergence = Divergence.PANIC,
    ) -> type[Constrained]:
        """Build, verify, and return a constrained type."""
        proxy = constrained(name, constraint, divergence)
        cls.verify(proxy)
        return proxy

    @classmethod
    def verify(cls, proxy: type[Constrained]) -> list[VerificationReport]:
        """Check every applicable law set, raising on the first that fails."""
        reports = []
        for laws in build_laws(proxy):
            report = cls._verify_laws(laws, proxy)
            if not report.passed:
                logger.warning("%s", report.summary())
                raise VerificationError(report)
            logger.debug(
                "%s satisfies %d %s laws", proxy.__name__, len(report.results), laws.name,
            )
            reports.append(report)
        return reports

    # -- internal ---------------------------------------------------------

    @classmethod
    def _verify_laws(cls, laws: LawSet, proxy: type[Constrained]) -> VerificationReport:
        report = VerificationReport(type_name=proxy.__name__, law_set=laws.name)
        for prop in laws:
            report.results.append(cls._verify_property(prop, proxy))
        return report

    @classmethod
    def _verify_property(cls, prop: Property, proxy: type[Constrained]) -> VerificationResult:
        checked = 0
        for combo in itertools.product(cls.samples, repeat=prop.arity):
            checked += 1
            if not prop.check(proxy, *combo):
                return VerificationResult(prop.name, False, checked, combo)
        return VerificationResult(prop.name, True, checked)
