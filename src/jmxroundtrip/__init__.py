"""
jmxroundtrip - Round-trip regression harness for test-plan save services.

Loads every fixture named in a case table, re-serializes it through a
pluggable save service and compares the result against a known-good
baseline, alongside version and class-registry consistency checks.

This module also owns the package-wide Loguru configuration so that the
CLI, the library modules and the test-suite all share one logger.
"""

__version__ = "0.1.0"

import sys
import os
import warnings
from pathlib import Path
from typing import Optional, Dict, Union, TextIO

from loguru import logger


log_format_console = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)

log_format_file = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | "
    "{level: <8} | "
    "{name}:{function}:{line} - {message}"
)


# --- Logger Configuration Classes and Types ---

class LoggingConfigError(Exception):
    """Exception raised when logging configuration fails validation or setup."""
    pass


class LoggerState:
    """
    Tracks which sinks this package installed on the shared Loguru logger.

    Tests reset the state between runs; the CLI marks it initialized once it
    has replaced the default console sink.
    """

    def __init__(self):
        self._initialized = False
        self._test_mode = False
        self._sink_ids = []

    def is_initialized(self) -> bool:
        """Check if logger has been initialized."""
        return self._initialized

    def is_test_mode(self) -> bool:
        """Check if logger is in test mode."""
        return self._test_mode

    def mark_initialized(self, test_mode: bool = False):
        """Mark logger as initialized."""
        self._initialized = True
        self._test_mode = test_mode

    def add_sink_id(self, sink_id: int):
        """Track sink IDs for cleanup."""
        self._sink_ids.append(sink_id)

    @property
    def sink_ids(self):
        return list(self._sink_ids)

    def reset(self):
        """Reset logger state for test isolation."""
        self._initialized = False
        self._test_mode = False
        self._sink_ids.clear()


_logger_state = LoggerState()


# --- Configuration Validation Functions ---

def validate_log_level(level: str) -> str:
    """
    Validate a Loguru log level name.

    Args:
        level: Log level string to validate

    Returns:
        Upper-cased log level string

    Raises:
        LoggingConfigError: If log level is invalid
    """
    valid_levels = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}
    level_upper = level.upper()

    if level_upper not in valid_levels:
        raise LoggingConfigError(
            f"Invalid log level '{level}'. Must be one of: {', '.join(sorted(valid_levels))}"
        )

    return level_upper


def validate_output_destination(destination: Union[str, Path, TextIO, None]) -> Union[str, TextIO, None]:
    """
    Validate a sink destination, creating the parent directory of file sinks.

    Raises:
        LoggingConfigError: If destination is invalid
    """
    if destination is None:
        return None

    if hasattr(destination, 'write'):
        return destination

    try:
        path_dest = Path(destination)

        if not path_dest.parent.exists():
            try:
                path_dest.parent.mkdir(parents=True, exist_ok=True)
            except (OSError, PermissionError) as e:
                raise LoggingConfigError(
                    f"Cannot create directory for log destination '{destination}': {e}"
                )

        return str(path_dest)
    except (TypeError, ValueError) as e:
        raise LoggingConfigError(
            f"Invalid output destination '{destination}': {e}"
        )


# --- Core Logging Configuration Functions ---

def configure_console_logging(
    level: str = "INFO",
    format_template: Optional[str] = None,
    colorize: bool = True,
    destination: TextIO = sys.stderr
) -> int:
    """
    Add a console sink to the shared logger.

    Args:
        level: Log level for console output
        format_template: Custom format template (uses default if None)
        colorize: Enable colored console output
        destination: Console destination (default: sys.stderr)

    Returns:
        Sink ID for tracking and cleanup

    Raises:
        LoggingConfigError: If configuration fails
    """
    try:
        validated_level = validate_log_level(level)

        sink_id = logger.add(
            destination,
            level=validated_level,
            format=format_template or log_format_console,
            colorize=colorize
        )

        _logger_state.add_sink_id(sink_id)
        return sink_id

    except LoggingConfigError:
        raise
    except Exception as e:
        raise LoggingConfigError(f"Failed to configure console logging: {e}") from e


def configure_file_logging(
    log_file_path: Union[str, Path],
    level: str = "DEBUG",
    rotation: str = "10 MB",
    retention: str = "7 days",
    format_template: Optional[str] = None,
    encoding: str = "utf-8",
) -> int:
    """
    Add a rotating file sink to the shared logger.

    Args:
        log_file_path: Path to log file
        level: Log level for file output
        rotation: Log rotation setting
        retention: Log retention setting
        format_template: Custom format template (uses default if None)
        encoding: File encoding

    Returns:
        Sink ID for tracking and cleanup

    Raises:
        LoggingConfigError: If configuration fails
    """
    try:
        validated_level = validate_log_level(level)
        validated_path = validate_output_destination(log_file_path)

        sink_id = logger.add(
            validated_path,
            rotation=rotation,
            retention=retention,
            level=validated_level,
            format=format_template or log_format_file,
            encoding=encoding
        )

        _logger_state.add_sink_id(sink_id)
        return sink_id

    except LoggingConfigError:
        raise
    except Exception as e:
        raise LoggingConfigError(f"Failed to configure file logging: {e}") from e


def configure_test_logging(
    console_level: str = "DEBUG",
    console_destination: Optional[TextIO] = None,
) -> Dict[str, int]:
    """
    Configure an uncolored console sink for test runs.

    Returns:
        Dictionary mapping sink types to sink IDs
    """
    reset_logging()

    sink_ids = {
        'console': configure_console_logging(
            level=console_level,
            destination=console_destination if console_destination is not None else sys.stderr,
            colorize=False,
        )
    }

    _logger_state.mark_initialized(test_mode=True)
    return sink_ids


def reset_logging():
    """
    Remove every sink from the shared logger and forget tracked state.

    Raises:
        LoggingConfigError: If reset fails
    """
    try:
        logger.remove()
        _logger_state.reset()
    except Exception as e:
        raise LoggingConfigError(f"Failed to reset logging configuration: {e}") from e


def initialize_logging(
    console_level: str = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    file_level: str = "DEBUG",
    colorize: bool = True,
) -> Dict[str, int]:
    """
    Replace the default sinks with the harness console sink and an optional file sink.

    Returns:
        Dictionary mapping sink types to sink IDs

    Raises:
        LoggingConfigError: If initialization fails
    """
    logger.remove()
    _logger_state.reset()

    sink_ids = {'console': configure_console_logging(level=console_level, colorize=colorize)}

    if log_file is not None:
        sink_ids['file'] = configure_file_logging(log_file, level=file_level)

    _logger_state.mark_initialized(test_mode=False)
    logger.debug("--- jmxroundtrip logger initialized ---")
    return sink_ids


def get_logger_state() -> LoggerState:
    """Get current logger state for test inspection."""
    return _logger_state


def is_logging_initialized() -> bool:
    return _logger_state.is_initialized()


def _auto_initialize_logging():
    """Install the default console sink unless already configured or under pytest."""
    if not _logger_state.is_initialized() and not _is_pytest_running():
        try:
            initialize_logging()
        except LoggingConfigError as e:
            warnings.warn(f"Failed to initialize logging: {e}. Using basic stderr logging.")
            logger.add(sys.stderr, level="INFO")
            _logger_state.mark_initialized(test_mode=False)


def _is_pytest_running() -> bool:
    return "pytest" in sys.modules or "PYTEST_CURRENT_TEST" in os.environ


_auto_initialize_logging()


__all__ = [
    "__version__",
    "logger",
    "log_format_console",
    "log_format_file",
    "LoggingConfigError",
    "LoggerState",
    "validate_log_level",
    "validate_output_destination",
    "configure_console_logging",
    "configure_file_logging",
    "configure_test_logging",
    "reset_logging",
    "initialize_logging",
    "get_logger_state",
    "is_logging_initialized",
]
