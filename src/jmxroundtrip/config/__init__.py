"""Harness configuration: models, YAML loading and schema versioning."""

from .models import (
    CaseEntry,
    CaseTable,
    HarnessConfig,
    LoadOnlyEntry,
    RunConfig,
    Strictness,
)
from .versioning import CURRENT_SCHEMA_VERSION, is_supported_version, parse_schema_version
from .yaml_config import load_case_table, load_config

__all__ = [
    "CURRENT_SCHEMA_VERSION",
    "CaseEntry",
    "CaseTable",
    "HarnessConfig",
    "LoadOnlyEntry",
    "RunConfig",
    "Strictness",
    "is_supported_version",
    "load_case_table",
    "load_config",
    "parse_schema_version",
]
