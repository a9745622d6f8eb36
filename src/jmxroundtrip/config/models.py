"""
Pydantic models for the harness configuration.

A harness configuration has two parts:

- ``run``: how to execute (which save service, whether to dump mismatching
  output, the exempt root-element prefix, worker count, expected version
  constants)
- ``cases``: the data-driven case table, i.e. which fixtures are round-tripped
  strictly, which only need a matching line count, and which merely need to
  load

Example YAML::

    schema_version: "1.0.0"
    run:
      service: jmxroundtrip.saveservice:XmlSaveService
      service_options:
        properties_path: saveservice.properties
      dump_mismatch_output: false
    cases:
      fixture_dir: testfiles
      strict:
        - SimpleTestPlan.jmx
        - file: GuiTest.jmx
          reference: SavedGuiTest.jmx
      lines_only:
        - file: GenTest25.jmx
          note: GraphAccumVisualizer obsolete
      load_only:
        - GenTest22.jmx
"""

from __future__ import annotations

import codecs
from enum import Enum
from pathlib import Path, PurePath
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from jmxroundtrip.stats import DEFAULT_ENCODING, DEFAULT_EXEMPT_PREFIX
from .versioning import CURRENT_SCHEMA_VERSION, ensure_supported_version

DEFAULT_SERVICE = "jmxroundtrip.saveservice:XmlSaveService"
DEFAULT_REFERENCE_PREFIX = "Saved"
DEFAULT_OUTPUT_SUFFIX = ".out"


class Strictness(str, Enum):
    """How closely a round-tripped fixture must match its baseline."""

    STRICT = "strict"
    LINES_ONLY = "lines_only"

    @property
    def requires_size_match(self) -> bool:
        return self is Strictness.STRICT


def _validate_relative_name(value: str) -> str:
    if not value:
        raise ValueError("file name must not be empty")
    pure = PurePath(value)
    if pure.is_absolute() or ".." in pure.parts:
        raise ValueError(f"file name must be relative to the fixture directory: {value!r}")
    return value


def _coerce_bare_name(data: Any) -> Any:
    if isinstance(data, str):
        return {"file": data}
    return data


class CaseEntry(BaseModel):
    """One fixture to load, re-serialize and compare."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    file_name: str = Field(alias="file", description="Fixture file name, relative to fixture_dir")
    strictness: Strictness = Strictness.STRICT
    reference_file_name: Optional[str] = Field(
        default=None,
        alias="reference",
        description="Known-good serialization; defaults to <reference_prefix><file_name>",
    )
    note: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def coerce_bare_name(cls, data: Any) -> Any:
        return _coerce_bare_name(data)

    @field_validator("file_name", "reference_file_name")
    @classmethod
    def validate_names(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return _validate_relative_name(v)

    @property
    def requires_size_match(self) -> bool:
        return self.strictness.requires_size_match


class LoadOnlyEntry(BaseModel):
    """A fixture that must load without error; its output is not compared."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    file_name: str = Field(alias="file")
    note: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def coerce_bare_name(cls, data: Any) -> Any:
        return _coerce_bare_name(data)

    @field_validator("file_name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _validate_relative_name(v)


def _reject_duplicates(section: str, names: List[str]) -> None:
    seen = set()
    duplicates = []
    for name in names:
        if name in seen:
            duplicates.append(name)
        seen.add(name)
    if duplicates:
        raise ValueError(f"duplicate entries in '{section}': {', '.join(sorted(set(duplicates)))}")


class CaseTable(BaseModel):
    """The three fixture tables plus where to find them."""

    model_config = ConfigDict(extra="forbid")

    fixture_dir: Path = Field(default=Path("."), description="Directory holding fixtures and references")
    reference_prefix: str = DEFAULT_REFERENCE_PREFIX
    strict: List[CaseEntry] = Field(default_factory=list)
    lines_only: List[CaseEntry] = Field(default_factory=list)
    load_only: List[LoadOnlyEntry] = Field(default_factory=list)

    @field_validator("strict")
    @classmethod
    def mark_strict(cls, v: List[CaseEntry]) -> List[CaseEntry]:
        _reject_duplicates("strict", [entry.file_name for entry in v])
        return [entry.model_copy(update={"strictness": Strictness.STRICT}) for entry in v]

    @field_validator("lines_only")
    @classmethod
    def mark_lines_only(cls, v: List[CaseEntry]) -> List[CaseEntry]:
        _reject_duplicates("lines_only", [entry.file_name for entry in v])
        return [entry.model_copy(update={"strictness": Strictness.LINES_ONLY}) for entry in v]

    @field_validator("load_only")
    @classmethod
    def check_load_only(cls, v: List[LoadOnlyEntry]) -> List[LoadOnlyEntry]:
        _reject_duplicates("load_only", [entry.file_name for entry in v])
        return v

    @property
    def round_trip_entries(self) -> List[CaseEntry]:
        """STRICT entries first, then LINES_ONLY entries."""
        return [*self.strict, *self.lines_only]

    def fixture_path(self, file_name: str) -> Path:
        return self.fixture_dir / file_name

    def reference_path(self, entry: CaseEntry) -> Path:
        if entry.reference_file_name:
            return self.fixture_dir / entry.reference_file_name
        source = Path(entry.file_name)
        return self.fixture_dir / source.with_name(f"{self.reference_prefix}{source.name}")


class RunConfig(BaseModel):
    """Explicit run settings; nothing here is read from the process environment."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    service: str = Field(
        default=DEFAULT_SERVICE,
        description="'module:attribute' or the name of a 'jmxroundtrip.services' entry point",
    )
    service_options: Dict[str, Any] = Field(default_factory=dict)
    dump_mismatch_output: bool = Field(
        default=False,
        description="Write the serialized output of mismatching fixtures next to them",
    )
    exempt_prefix: str = Field(default=DEFAULT_EXEMPT_PREFIX, min_length=1)
    encoding: str = DEFAULT_ENCODING
    output_suffix: str = Field(default=DEFAULT_OUTPUT_SUFFIX, min_length=1)
    workers: int = Field(default=1, ge=1)
    expected_property_version: Optional[str] = None
    expected_properties_fingerprint: Optional[str] = None

    @field_validator("service")
    @classmethod
    def validate_service(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("service must not be empty")
        return v

    @field_validator("encoding")
    @classmethod
    def validate_encoding(cls, v: str) -> str:
        try:
            codecs.lookup(v)
        except LookupError as e:
            raise ValueError(f"unknown encoding {v!r}") from e
        return v

    @field_validator("output_suffix")
    @classmethod
    def validate_output_suffix(cls, v: str) -> str:
        if "/" in v or "\\" in v:
            raise ValueError("output_suffix must not contain path separators")
        return v


class HarnessConfig(BaseModel):
    """Top-level document: schema version, run settings and case table."""

    model_config = ConfigDict(extra="forbid")

    schema_version: str = CURRENT_SCHEMA_VERSION
    run: RunConfig = Field(default_factory=RunConfig)
    cases: CaseTable = Field(default_factory=CaseTable)

    @field_validator("schema_version", mode="before")
    @classmethod
    def validate_schema_version(cls, v: Any) -> str:
        return ensure_supported_version(v)


__all__ = [
    "CaseEntry",
    "CaseTable",
    "DEFAULT_OUTPUT_SUFFIX",
    "DEFAULT_REFERENCE_PREFIX",
    "DEFAULT_SERVICE",
    "HarnessConfig",
    "LoadOnlyEntry",
    "RunConfig",
    "Strictness",
]
