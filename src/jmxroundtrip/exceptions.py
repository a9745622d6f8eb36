"""
jmxroundtrip Exception Hierarchy

Domain-specific exceptions for the round-trip harness. Content mismatches are
never raised: they are recorded as failed case results. Exceptions are reserved
for conditions that make a case (or the whole run) meaningless:

- HarnessError: Base exception for all jmxroundtrip-specific errors
- ConfigError: Harness configuration or case table could not be loaded/validated
- VersionError: Case table targets an unsupported schema version
- DocumentLoadError: A save service rejected a fixture (malformed document,
  unsupported element)
- FixtureAccessError: A fixture, reference or dump file could not be read or
  written (environment problem, always fatal)
- ServiceResolutionError: The configured save service could not be imported or
  instantiated

Usage Examples:
    >>> try:
    ...     tree = service.load_document(path)
    ... except DocumentLoadError as e:
    ...     logger.error(f"Cannot load fixture: {e}")
    ...     if e.error_code == "LOAD_002":
    ...         # Malformed document
"""

import sys
from typing import Any, Dict, Optional
from pathlib import Path


class HarnessError(Exception):
    """
    Base exception class for all jmxroundtrip-specific errors.

    Attributes:
        error_code (str): Unique identifier for programmatic error handling
        context (Dict[str, Any]): Additional context information for debugging

    Error Codes:
        HARNESS_001: Generic harness error
        HARNESS_002: Unexpected internal error
    """

    def __init__(
        self,
        message: str,
        error_code: str = "HARNESS_001",
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.context = dict(context or {})

        if hasattr(sys, '_getframe'):
            frame = sys._getframe(1)
            # skip subclass constructors
            while frame is not None and frame.f_code.co_name == "__init__":
                frame = frame.f_back
            if frame:
                self.context.setdefault('source_function', frame.f_code.co_name)

        for key, value in list(self.context.items()):
            if isinstance(value, Path):
                self.context[key] = str(value)

    def with_context(self, context: Dict[str, Any]) -> 'HarnessError':
        """
        Add additional context to the exception and return self for chaining.

        Example:
            >>> raise HarnessError("Round trip failed").with_context({
            ...     "file_path": "/fixtures/SimpleTestPlan.jmx",
            ... })
        """
        self.context.update(context)
        return self

    @property
    def message(self) -> str:
        return super().__str__()

    def __str__(self) -> str:
        message = super().__str__()
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{message} [Error Code: {self.error_code}, Context: {context_str}]"
        return f"{message} [Error Code: {self.error_code}]"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={super().__str__()!r}, "
            f"error_code={self.error_code!r}, "
            f"context={self.context!r})"
        )


class ConfigError(HarnessError):
    """
    Harness configuration and case table errors.

    Error Codes:
        CONFIG_001: Configuration file not found
        CONFIG_002: YAML parsing error
        CONFIG_003: Pydantic validation failure
        CONFIG_004: Fixture directory not found
    """

    def __init__(
        self,
        message: str,
        error_code: str = "CONFIG_001",
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message, error_code, context)


class VersionError(ConfigError):
    """
    Case table schema version errors.

    Error Codes:
        VERSION_001: Schema version is not a valid semantic version
        VERSION_002: Schema version is not supported by this harness
    """

    def __init__(
        self,
        message: str,
        error_code: str = "VERSION_001",
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message, error_code, context)


class DocumentLoadError(HarnessError):
    """
    Raised by a save service when a fixture cannot be turned into a tree.

    Error Codes:
        LOAD_001: Fixture file not found
        LOAD_002: Malformed document
        LOAD_003: Unsupported root or element
    """

    def __init__(
        self,
        message: str,
        error_code: str = "LOAD_002",
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message, error_code, context)

    @property
    def file_path(self) -> Optional[str]:
        return self.context.get('file_path')


class FixtureAccessError(HarnessError):
    """
    Environment failure while reading a fixture or writing a diagnostic dump.

    Error Codes:
        FIXTURE_001: Fixture or reference file unreadable
        FIXTURE_002: Mismatch output could not be written
    """

    def __init__(
        self,
        message: str,
        error_code: str = "FIXTURE_001",
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message, error_code, context)


class ServiceResolutionError(HarnessError):
    """
    Save service lookup and instantiation errors.

    Error Codes:
        SERVICE_001: Module or attribute could not be imported
        SERVICE_002: Entry point not found
        SERVICE_003: Service construction failed
        SERVICE_004: Object does not implement the DocumentService protocol
    """

    def __init__(
        self,
        message: str,
        error_code: str = "SERVICE_001",
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message, error_code, context)


def log_and_raise(
    exception: HarnessError,
    logger: Optional[Any] = None,
    level: str = "error"
) -> None:
    """
    Log an exception with its context and then raise it.

    Args:
        exception: The exception to log and raise
        logger: Logger instance to use (optional)
        level: Log level ("error", "warning", "critical")

    Raises:
        The provided exception after logging
    """
    if logger is not None:
        log_method = getattr(logger, level, logger.error)
        log_method(f"{exception.__class__.__name__}: {exception.message}")

        for key, value in exception.context.items():
            log_method(f"  {key}: {value}")

    raise exception


__all__ = [
    'HarnessError',
    'ConfigError',
    'VersionError',
    'DocumentLoadError',
    'FixtureAccessError',
    'ServiceResolutionError',
    'log_and_raise',
]
