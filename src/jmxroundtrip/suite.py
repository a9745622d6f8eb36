"""
The data-driven regression suite.

Round-trip and load-only fixtures come from the case table; every entry runs
regardless of earlier failures and the verdict is reported once at the end.
With ``workers > 1`` fixtures are processed on a thread pool, but results are
always returned in table order.
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional, Sequence, TypeVar

from jmxroundtrip import logger
from jmxroundtrip.config.models import CaseEntry, CaseTable, LoadOnlyEntry, RunConfig
from jmxroundtrip.consistency import run_consistency_checks
from jmxroundtrip.exceptions import DocumentLoadError
from jmxroundtrip.results import CaseKind, CaseResult, SuiteResult
from jmxroundtrip.service import DocumentService
from jmxroundtrip.validator import RoundTripValidator

T = TypeVar("T")


class RegressionSuite:
    """Runs the round-trip, load-only and consistency checks for one save service."""

    def __init__(
        self,
        service: DocumentService,
        cases: CaseTable,
        run_config: Optional[RunConfig] = None,
    ):
        self.service = service
        self.cases = cases
        self.run_config = run_config or RunConfig()
        self.validator = RoundTripValidator(service, self.run_config)

    def _map(self, func: Callable[[T], CaseResult], entries: Sequence[T]) -> List[CaseResult]:
        if self.run_config.workers <= 1 or len(entries) <= 1:
            return [func(entry) for entry in entries]
        with ThreadPoolExecutor(max_workers=self.run_config.workers) as pool:
            return list(pool.map(func, entries))

    def _round_trip_case(self, entry: CaseEntry) -> CaseResult:
        source = self.cases.fixture_path(entry.file_name)
        reference = self.cases.reference_path(entry)
        logger.debug(f"Round trip {entry.file_name} ({entry.strictness.value})")
        try:
            return self.validator.validate(
                source, reference, entry.requires_size_match, name=entry.file_name
            )
        except DocumentLoadError as e:
            logger.error(f"Exception loading {source.resolve()}: {e.message}")
            return CaseResult.errored(
                entry.file_name, CaseKind.ROUND_TRIP, e, f"Exception loading {source.resolve()}: {e.message}"
            )

    def _load_only_case(self, entry: LoadOnlyEntry) -> CaseResult:
        path = self.cases.fixture_path(entry.file_name)
        try:
            tree = self.service.load_document(path)
        except DocumentLoadError as e:
            logger.error(f"Exception loading {path.resolve()}: {e.message}")
            return CaseResult.failure(
                entry.file_name, CaseKind.LOAD_ONLY, f"Exception loading {path.resolve()}", error=e
            )
        if tree is None:
            return CaseResult.failure(
                entry.file_name, CaseKind.LOAD_ONLY, f"Loading {path.resolve()} returned no tree"
            )
        return CaseResult.passed(entry.file_name, CaseKind.LOAD_ONLY)

    def run_round_trip_suite(self) -> SuiteResult:
        """STRICT fixtures (size and lines must match), then LINES_ONLY fixtures."""
        suite = SuiteResult.of(self._map(self._round_trip_case, self.cases.round_trip_entries))
        self._log_summary("Round-trip", suite)
        return suite

    def run_load_only_suite(self) -> SuiteResult:
        suite = SuiteResult.of(self._map(self._load_only_case, self.cases.load_only))
        self._log_summary("Load-only", suite)
        return suite

    def run_consistency_checks(self) -> SuiteResult:
        suite = SuiteResult.of(run_consistency_checks(self.service, self.run_config))
        self._log_summary("Consistency", suite)
        return suite

    def run_all(self) -> SuiteResult:
        return self.run_round_trip_suite().merge(
            self.run_load_only_suite(),
            self.run_consistency_checks(),
        )

    @staticmethod
    def _log_summary(label: str, suite: SuiteResult) -> None:
        if suite.failed:
            logger.warning(f"{label} checks: {suite.summary()}")
        else:
            logger.info(f"{label} checks: {suite.summary()}")


__all__ = ["RegressionSuite"]
