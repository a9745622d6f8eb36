"""
Round-trip validation of a single fixture.

Comparing the serialized bytes to the original would usually fail because the
order of properties within each element may change between save-service
versions. Comparing the size and line count of the text (with the root element
line exempt from sizing) is enough to catch most regressions, such as a
property being added to or dropped from a component.
"""
from __future__ import annotations

import io
from pathlib import Path
from typing import Optional, Union

from jmxroundtrip import logger
from jmxroundtrip.config.models import RunConfig
from jmxroundtrip.exceptions import FixtureAccessError, log_and_raise
from jmxroundtrip.results import CaseKind, CaseResult
from jmxroundtrip.service import DocumentService
from jmxroundtrip.stats import NO_STATS, FileStats, get_buffer_stats, get_file_stats


class RoundTripValidator:
    """Loads a fixture, writes it back and compares the result to a baseline."""

    def __init__(self, service: DocumentService, run_config: Optional[RunConfig] = None):
        self.service = service
        self.run_config = run_config or RunConfig()

    def _stats(self, path: Union[str, Path, None]) -> FileStats:
        return get_file_stats(path, self.run_config.exempt_prefix, self.run_config.encoding)

    def round_trip(self, source: Path) -> bytes:
        """Load ``source`` and return its re-serialized bytes."""
        out = io.BytesIO()
        try:
            tree = self.service.load_document(source)
            self.service.serialize_document(tree, out)
            data = out.getvalue()
        finally:
            out.close()
        return data

    def validate(
        self,
        source: Union[str, Path],
        reference: Union[str, Path, None],
        require_size_match: bool,
        name: Optional[str] = None,
    ) -> CaseResult:
        """
        Round-trip ``source`` and compare it against the best available baseline.

        The baseline is the reference file's stats when it exists, otherwise the
        source file's own stats. Mismatches are returned as a failed result;
        errors from the save service propagate unchanged.

        Args:
            source: Fixture to load
            reference: Known-good serialization, may be missing
            require_size_match: Whether sizes must match as well as line counts
            name: Name used in diagnostics (defaults to the source file name)

        Raises:
            FixtureAccessError: If a fixture cannot be read or the mismatch dump
                cannot be written
        """
        source = Path(source)
        name = name or source.name

        original_stats = self._stats(source)
        reference_stats = self._stats(reference)
        baseline = original_stats if reference_stats is NO_STATS else reference_stats

        data = self.round_trip(source)
        output_stats = get_buffer_stats(data, self.run_config.exempt_prefix, self.run_config.encoding)

        failed = (
            (require_size_match and not baseline.same_size(output_stats))
            or not baseline.same_line_count(output_stats)
        )

        if not failed:
            logger.debug(f"{name}: round trip matches baseline ({output_stats})")
            return CaseResult.passed(name, CaseKind.ROUND_TRIP, baseline=baseline, output=output_stats)

        diagnostics = [
            f"Loading file {name} and saving it back changes its size "
            f"from {baseline.size} to {output_stats.size}."
        ]
        if not baseline.same_line_count(output_stats):
            diagnostics.append(f"Number of lines changes from {baseline.lines} to {output_stats.lines}")

        for diagnostic in diagnostics:
            logger.warning(diagnostic)

        if self.run_config.dump_mismatch_output:
            out_file = self.write_output(source, data)
            diagnostics.append(f"Wrote {out_file}")

        return CaseResult.failure(
            name, CaseKind.ROUND_TRIP, *diagnostics, baseline=baseline, output=output_stats
        )

    def write_output(self, source: Path, data: bytes) -> Path:
        """Persist mismatching output next to the fixture for inspection."""
        out_file = source.with_name(source.name + self.run_config.output_suffix)
        logger.info(f"Write {out_file}")
        try:
            with open(out_file, "wb") as handle:
                handle.write(data)
        except OSError as e:
            log_and_raise(
                FixtureAccessError(
                    f"Cannot write mismatch output {out_file}: {e}",
                    error_code="FIXTURE_002",
                    context={"file_path": out_file},
                ),
                logger,
            )
        logger.info(f"Wrote {out_file}")
        return out_file


__all__ = ["RoundTripValidator"]
