"""Case table schema version constants and helpers."""

from typing import Final

from semantic_version import Version

from jmxroundtrip.exceptions import VersionError

CURRENT_SCHEMA_VERSION: Final[str] = "1.0.0"


def parse_schema_version(version: str) -> Version:
    """Parse a schema version string into a :class:`semantic_version.Version`."""
    if not isinstance(version, str):
        raise VersionError(
            f"schema version must be a string, got {type(version).__name__}",
            error_code="VERSION_001",
            context={"detected_version": repr(version)},
        )
    try:
        return Version(version.strip())
    except ValueError as exc:
        raise VersionError(
            f"Invalid schema version '{version}': {exc}",
            error_code="VERSION_001",
            context={"detected_version": version},
        ) from exc


def is_supported_version(version: str) -> bool:
    """Return ``True`` when *version* shares the major of :data:`CURRENT_SCHEMA_VERSION` and is not newer."""
    parsed = parse_schema_version(version)
    current = Version(CURRENT_SCHEMA_VERSION)
    return parsed.major == current.major and parsed <= current


def ensure_supported_version(version: str) -> str:
    """Return *version* unchanged or raise :class:`VersionError` if it is unsupported."""
    if not is_supported_version(version):
        raise VersionError(
            f"Case table schema version {version} is not supported (current: {CURRENT_SCHEMA_VERSION})",
            error_code="VERSION_002",
            context={"detected_version": version, "current_version": CURRENT_SCHEMA_VERSION},
        )
    return version
