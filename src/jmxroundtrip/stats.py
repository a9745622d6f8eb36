"""
Content fingerprints for serialized test plans.

A fingerprint is the number of lines in a document and the number of
characters on those lines, ignoring line terminators and the root element
line. The root element carries attributes whose order and length vary between
save-service versions, so its line is counted but its text is not.
"""
from __future__ import annotations

import io
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Union

from jmxroundtrip import logger
from jmxroundtrip.exceptions import FixtureAccessError

DEFAULT_EXEMPT_PREFIX = "<jmeterTestPlan"
DEFAULT_ENCODING = "utf-8"


@dataclass(frozen=True)
class FileStats:
    """Size and line count of a text document.

    ``NO_STATS`` (``-1, -1``) stands for a file that does not exist. It never
    compares equal in size or line count to anything, itself included.
    """

    size: int
    lines: int

    def __post_init__(self) -> None:
        absent = self.size == -1 and self.lines == -1
        present = self.size >= 0 and self.lines >= 0
        if not (absent or present):
            raise ValueError(
                f"FileStats fields must both be non-negative or both -1, got size={self.size}, lines={self.lines}"
            )

    @property
    def is_absent(self) -> bool:
        return self.size == -1

    def same_size(self, other: Optional["FileStats"]) -> bool:
        if other is None or self.is_absent or other.is_absent:
            return False
        return self.size == other.size

    def same_line_count(self, other: Optional["FileStats"]) -> bool:
        if other is None or self.is_absent or other.is_absent:
            return False
        return self.lines == other.lines

    def __str__(self) -> str:
        if self.is_absent:
            return "<no stats>"
        return f"{self.size} chars / {self.lines} lines"


NO_STATS = FileStats(-1, -1)


def _strip_eol(line: str) -> str:
    if line.endswith("\r\n"):
        return line[:-2]
    if line.endswith("\n") or line.endswith("\r"):
        return line[:-1]
    return line


def compute_stats(lines: Iterable[str], exempt_prefix: str = DEFAULT_EXEMPT_PREFIX) -> FileStats:
    """
    Accumulate a fingerprint over ``lines``.

    Every line counts towards ``lines``. A line's length (without its
    terminator) counts towards ``size`` unless the line starts with
    ``exempt_prefix``.

    Args:
        lines: Text lines, with or without trailing terminators
        exempt_prefix: Lines starting with this exact text are not sized

    Returns:
        FileStats for the consumed lines; ``FileStats(0, 0)`` for no input
    """
    size = 0
    count = 0
    for raw in lines:
        line = _strip_eol(raw)
        count += 1
        if not line.startswith(exempt_prefix):
            size += len(line)
    return FileStats(size, count)


def get_file_stats(
    path: Union[str, Path, None],
    exempt_prefix: str = DEFAULT_EXEMPT_PREFIX,
    encoding: str = DEFAULT_ENCODING,
) -> FileStats:
    """
    Fingerprint a file on disk.

    Returns:
        ``NO_STATS`` when ``path`` is None or does not exist

    Raises:
        FixtureAccessError: If the file exists but cannot be read or decoded
    """
    if path is None:
        return NO_STATS

    path = Path(path)
    if not path.exists():
        logger.debug(f"No file at {path}, using NO_STATS")
        return NO_STATS

    try:
        with open(path, "r", encoding=encoding, newline=None) as handle:
            stats = compute_stats(handle, exempt_prefix)
    except (OSError, UnicodeDecodeError) as e:
        raise FixtureAccessError(
            f"Cannot read {path}: {e}",
            error_code="FIXTURE_001",
            context={"file_path": path, "encoding": encoding},
        ) from e

    logger.debug(f"Stats for {path.name}: {stats}")
    return stats


def get_buffer_stats(
    data: bytes,
    exempt_prefix: str = DEFAULT_EXEMPT_PREFIX,
    encoding: str = DEFAULT_ENCODING,
) -> FileStats:
    """
    Fingerprint an in-memory serialization.

    Bytes that are invalid in ``encoding`` decode to U+FFFD, so a serializer
    emitting them is scored as a size or line mismatch.
    """
    with io.TextIOWrapper(io.BytesIO(data), encoding=encoding, errors="replace", newline=None) as reader:
        return compute_stats(reader, exempt_prefix)


__all__ = [
    "DEFAULT_ENCODING",
    "DEFAULT_EXEMPT_PREFIX",
    "FileStats",
    "NO_STATS",
    "compute_stats",
    "get_buffer_stats",
    "get_file_stats",
]
