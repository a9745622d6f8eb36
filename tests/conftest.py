"""
Pytest configuration for the jmxroundtrip test suite.

Provides:
- A Loguru-to-standard-logging bridge so tests can assert on ``caplog``
- An in-memory save service with scriptable output and registry state
- Fixture directories with test plans and reference files on disk
"""

import contextlib
import logging
import sys
from pathlib import Path
from typing import Any, BinaryIO, Dict, List, Optional

# Add the src directory to the Python path
src_path = str(Path(__file__).parent.parent / "src")
sys.path.insert(0, src_path)

import pytest
from hypothesis import settings

from jmxroundtrip import logger
from jmxroundtrip.exceptions import DocumentLoadError

settings.register_profile("jmxroundtrip", max_examples=50, deadline=None)
settings.load_profile("jmxroundtrip")


# ============================================================================
# LOGURU INTEGRATION
# ============================================================================

@pytest.fixture(autouse=True, scope="function")
def capture_loguru_logs_globally(caplog):
    """Propagate Loguru records into pytest's caplog."""

    class PropagateHandler(logging.Handler):
        def emit(self, record):
            logging.getLogger(record.name or "jmxroundtrip").handle(record)

    caplog.set_level(logging.DEBUG)
    handler_id = logger.add(PropagateHandler(), format="{message}", level="DEBUG", enqueue=False)

    yield

    with contextlib.suppress(ValueError):
        logger.remove(handler_id)


# ============================================================================
# SAVE SERVICE DOUBLES
# ============================================================================

class FakeSaveService:
    """
    In-memory DocumentService.

    ``load_document`` returns the file's bytes (or raises for names listed in
    ``broken``); ``serialize_document`` writes ``outputs[name]`` when scripted,
    otherwise the bytes unchanged.
    """

    def __init__(
        self,
        outputs: Optional[Dict[str, bytes]] = None,
        broken: Optional[List[str]] = None,
        builtin_version: str = "5.0",
        fingerprint: str = "abc123",
        consistent: bool = True,
        missing_classes: Optional[List[str]] = None,
    ):
        self.outputs = dict(outputs or {})
        self.broken = set(broken or [])
        self.builtin_version = builtin_version
        self.fingerprint = fingerprint
        self.consistent = consistent
        self.missing_classes = list(missing_classes or [])
        self.loaded: List[str] = []

    def load_document(self, path: Path) -> Any:
        path = Path(path)
        self.loaded.append(path.name)
        if path.name in self.broken:
            raise DocumentLoadError(f"Malformed test plan {path}", context={"file_path": path})
        return (path.name, path.read_bytes())

    def serialize_document(self, tree: Any, stream: BinaryIO) -> None:
        name, data = tree
        stream.write(self.outputs.get(name, data))

    def current_builtin_version(self) -> str:
        return self.builtin_version

    def current_properties_fingerprint(self) -> str:
        return self.fingerprint

    def versions_are_consistent(self) -> bool:
        return self.consistent

    def unresolved_registry_classes(self) -> List[str]:
        return list(self.missing_classes)


@pytest.fixture
def fake_service():
    return FakeSaveService()


# ============================================================================
# FIXTURE FILES
# ============================================================================

PLAN_TEXT = "<jmeterTestPlan version=\"1.2\">\n  <hashTree/>\n</jmeterTestPlan>\n"


def write_plan(directory: Path, name: str, text: str = PLAN_TEXT) -> Path:
    path = directory / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(text.encode("utf-8"))
    return path


@pytest.fixture
def fixture_dir(tmp_path):
    directory = tmp_path / "testfiles"
    directory.mkdir()
    return directory


@pytest.fixture
def properties_file(tmp_path):
    path = tmp_path / "saveservice.properties"
    path.write_text(
        "# aliases\n"
        "_version=5.0\n"
        "OrderedDict=collections.OrderedDict\n"
        "Counter=collections:Counter\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture(name="write_plan")
def write_plan_fixture():
    return write_plan


@pytest.fixture
def make_service():
    return FakeSaveService
