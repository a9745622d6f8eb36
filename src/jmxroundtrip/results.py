"""Per-case outcomes and their aggregation into a suite result."""

from __future__ import annotations

import functools
import operator
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from jmxroundtrip.stats import FileStats


class CaseKind(str, Enum):
    ROUND_TRIP = "round-trip"
    LOAD_ONLY = "load-only"
    CONSISTENCY = "consistency"


class Outcome(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    ERROR = "error"


@dataclass(frozen=True)
class CaseResult:
    """Outcome of one fixture or one consistency check."""

    name: str
    kind: CaseKind
    outcome: Outcome
    diagnostics: Tuple[str, ...] = ()
    baseline: Optional[FileStats] = None
    output: Optional[FileStats] = None
    error: Optional[BaseException] = field(default=None, compare=False)

    @property
    def failed(self) -> bool:
        return self.outcome is not Outcome.PASSED

    @classmethod
    def passed(cls, name: str, kind: CaseKind, **kwargs) -> "CaseResult":
        return cls(name=name, kind=kind, outcome=Outcome.PASSED, **kwargs)

    @classmethod
    def failure(cls, name: str, kind: CaseKind, *diagnostics: str, **kwargs) -> "CaseResult":
        return cls(name=name, kind=kind, outcome=Outcome.FAILED, diagnostics=tuple(diagnostics), **kwargs)

    @classmethod
    def errored(cls, name: str, kind: CaseKind, error: BaseException, *diagnostics: str) -> "CaseResult":
        return cls(
            name=name,
            kind=kind,
            outcome=Outcome.ERROR,
            diagnostics=tuple(diagnostics) or (str(error),),
            error=error,
        )


@dataclass(frozen=True)
class SuiteResult:
    """Ordered collection of case results.

    ``failed`` is the OR of every case's failure flag, so merging suite
    results in any order or grouping yields the same verdict.
    """

    results: Tuple[CaseResult, ...] = ()

    @classmethod
    def of(cls, results: Iterable[CaseResult]) -> "SuiteResult":
        return cls(tuple(results))

    @property
    def failed(self) -> bool:
        return functools.reduce(operator.or_, (r.failed for r in self.results), False)

    @property
    def passed(self) -> bool:
        return not self.failed

    def merge(self, *others: "SuiteResult") -> "SuiteResult":
        merged = list(self.results)
        for other in others:
            merged.extend(other.results)
        return SuiteResult(tuple(merged))

    def failures(self) -> List[CaseResult]:
        return [r for r in self.results if r.failed]

    def by_kind(self, kind: CaseKind) -> "SuiteResult":
        return SuiteResult(tuple(r for r in self.results if r.kind is kind))

    def __len__(self) -> int:
        return len(self.results)

    def __iter__(self):
        return iter(self.results)

    def summary(self) -> str:
        counts = {outcome: 0 for outcome in Outcome}
        for result in self.results:
            counts[result.outcome] += 1
        return (
            f"{len(self.results)} cases: {counts[Outcome.PASSED]} passed, "
            f"{counts[Outcome.FAILED]} failed, {counts[Outcome.ERROR]} errors"
        )


def format_report(suite: SuiteResult) -> str:
    """Render every failing case with its diagnostics, followed by the summary line."""
    lines: List[str] = []
    for result in suite.failures():
        lines.append(f"[{result.outcome.value.upper()}] {result.kind.value}: {result.name}")
        lines.extend(f"    {diagnostic}" for diagnostic in result.diagnostics)
    if suite.failed:
        lines.append("One or more failures detected")
    lines.append(suite.summary())
    return "\n".join(lines)


__all__ = ["CaseKind", "CaseResult", "Outcome", "SuiteResult", "format_report"]
