"""
YAML configuration handling for the harness.

Loads a harness configuration from a YAML file or a dictionary, validates it
with the Pydantic models and resolves the fixture directory relative to the
file it was declared in. The ``cases`` section may be written inline or name a
separate YAML file holding only the case table, so that fixtures can be added
without touching run settings.
"""
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import ValidationError

from jmxroundtrip import logger
from jmxroundtrip.exceptions import ConfigError, log_and_raise
from .models import CaseTable, HarnessConfig


def _format_validation_errors(error: ValidationError) -> List[str]:
    details = []
    for item in error.errors():
        field_path = " -> ".join(str(loc) for loc in item['loc'])
        details.append(f"Field '{field_path}': {item['msg']}")
    return details


def _read_yaml(path: Path) -> Dict[str, Any]:
    if not path.is_file():
        raise ConfigError(
            f"Configuration file not found: {path}",
            error_code="CONFIG_001",
            context={"config_path": path},
        )

    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Invalid YAML in {path}: {e}",
            error_code="CONFIG_002",
            context={"config_path": path},
        ) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"Top level of {path} must be a mapping, got {type(data).__name__}",
            error_code="CONFIG_003",
            context={"config_path": path},
        )
    return data


def _resolve_fixture_dir(cases: CaseTable, base_dir: Path) -> CaseTable:
    fixture_dir = cases.fixture_dir
    if not fixture_dir.is_absolute():
        fixture_dir = (base_dir / fixture_dir).resolve()

    if not fixture_dir.is_dir():
        raise ConfigError(
            f"Fixture directory not found: {fixture_dir}",
            error_code="CONFIG_004",
            context={"fixture_dir": fixture_dir},
        )
    return cases.model_copy(update={"fixture_dir": fixture_dir})


def load_case_table(path: Union[str, Path]) -> CaseTable:
    """
    Load a standalone case table file.

    Raises:
        ConfigError: If the file is missing, not YAML, or fails validation
    """
    path = Path(path)
    data = _read_yaml(path)
    try:
        cases = CaseTable.model_validate(data)
    except ValidationError as e:
        details = _format_validation_errors(e)
        detailed_error = f"Case table validation failed for {path}:\n" + "\n".join(details)
        log_and_raise(
            ConfigError(
                detailed_error,
                error_code="CONFIG_003",
                context={"config_path": path, "validation_errors": details},
            ),
            logger,
        )
    return _resolve_fixture_dir(cases, path.parent)


def load_config(
    config_path_or_dict: Union[str, Path, Dict[str, Any]],
    base_dir: Optional[Union[str, Path]] = None,
) -> HarnessConfig:
    """Load and validate a harness configuration.

    Args:
        config_path_or_dict: Path to a YAML file, or an already-parsed mapping
        base_dir: Directory relative paths are resolved against; defaults to the
            YAML file's directory, or the current directory for mappings

    Returns:
        HarnessConfig with an absolute, existing ``cases.fixture_dir``

    Raises:
        ConfigError: If the configuration cannot be read or validated
        VersionError: If ``schema_version`` is malformed or unsupported
    """
    if isinstance(config_path_or_dict, dict):
        logger.debug("Processing dictionary-based configuration input")
        data = dict(config_path_or_dict)
        origin = "<dict>"
        resolved_base = Path(base_dir) if base_dir is not None else Path.cwd()
    elif isinstance(config_path_or_dict, (str, Path)):
        config_path = Path(config_path_or_dict)
        data = _read_yaml(config_path)
        origin = str(config_path)
        resolved_base = Path(base_dir) if base_dir is not None else config_path.resolve().parent
    else:
        raise ConfigError(
            f"Invalid input type: {type(config_path_or_dict).__name__}. Expected a string, Path, or dictionary.",
            error_code="CONFIG_003",
        )

    external_cases = data.get("cases")
    if isinstance(external_cases, str):
        cases_path = Path(external_cases)
        if not cases_path.is_absolute():
            cases_path = resolved_base / cases_path
        logger.debug(f"Loading case table from {cases_path}")
        data = {key: value for key, value in data.items() if key != "cases"}
        try:
            cases = load_case_table(cases_path)
        except ConfigError as e:
            raise e.with_context({"harness_config": origin})
    else:
        cases = None

    try:
        config = HarnessConfig.model_validate(data)
    except ValidationError as e:
        details = _format_validation_errors(e)
        detailed_error = f"Configuration validation failed for {origin}:\n" + "\n".join(details)
        log_and_raise(
            ConfigError(
                detailed_error,
                error_code="CONFIG_003",
                context={"config_path": origin, "validation_errors": details},
            ),
            logger,
        )

    if cases is None:
        cases = _resolve_fixture_dir(config.cases, resolved_base)
    config = config.model_copy(update={"cases": cases})

    logger.info(
        f"Loaded configuration from {origin}: {len(cases.strict)} strict, "
        f"{len(cases.lines_only)} lines-only, {len(cases.load_only)} load-only fixtures"
    )
    return config


__all__ = ["load_case_table", "load_config"]
