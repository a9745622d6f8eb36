"""
Fixture-independent checks on the save service.

Each check takes the service (and, where relevant, the expected value) and
returns a :class:`~jmxroundtrip.results.CaseResult`. Expected version constants
come from the run configuration, falling back to the ``PROPERTY_VERSION`` and
``FILE_VERSION`` attributes the service declares about itself.
"""
from typing import List, Optional

from jmxroundtrip import logger
from jmxroundtrip.config.models import RunConfig
from jmxroundtrip.results import CaseKind, CaseResult
from jmxroundtrip.service import DocumentService

PROPERTY_VERSION_CHECK = "property-version"
PROPERTIES_FINGERPRINT_CHECK = "properties-fingerprint"
VERSIONS_CHECK = "versions"
REGISTRY_CLASSES_CHECK = "registry-classes"


def _expected(configured: Optional[str], service: DocumentService, attribute: str) -> Optional[str]:
    if configured is not None:
        return configured
    return getattr(service, attribute, None)


def check_property_version(service: DocumentService, expected: Optional[str]) -> CaseResult:
    """The expected property version must equal the one the properties resource declares."""
    actual = service.current_builtin_version()
    if expected is None:
        return CaseResult.failure(
            PROPERTY_VERSION_CHECK,
            CaseKind.CONSISTENCY,
            f"No expected property version configured; the properties resource declares {actual!r}",
        )
    if expected != actual:
        message = (
            f"Property Version mismatch: expected {expected!r} but the properties resource declares "
            f"{actual!r}; update PROPERTY_VERSION with the _version property value"
        )
        logger.error(message)
        return CaseResult.failure(PROPERTY_VERSION_CHECK, CaseKind.CONSISTENCY, message)
    return CaseResult.passed(PROPERTY_VERSION_CHECK, CaseKind.CONSISTENCY)


def check_properties_fingerprint(service: DocumentService, expected: Optional[str]) -> CaseResult:
    """The expected fingerprint must equal the properties resource's current fingerprint."""
    actual = service.current_properties_fingerprint()
    if expected is None:
        return CaseResult.failure(
            PROPERTIES_FINGERPRINT_CHECK,
            CaseKind.CONSISTENCY,
            f"No expected properties fingerprint configured; current fingerprint is {actual!r}",
        )
    if expected != actual:
        message = (
            f"Property File Version mismatch: expected {expected!r} but the properties resource "
            f"fingerprint is {actual!r}; update FILE_VERSION with the new fingerprint"
        )
        logger.error(message)
        return CaseResult.failure(PROPERTIES_FINGERPRINT_CHECK, CaseKind.CONSISTENCY, message)
    return CaseResult.passed(PROPERTIES_FINGERPRINT_CHECK, CaseKind.CONSISTENCY)


def check_versions(service: DocumentService) -> CaseResult:
    if not service.versions_are_consistent():
        logger.error("Unexpected version found")
        return CaseResult.failure(VERSIONS_CHECK, CaseKind.CONSISTENCY, "Unexpected version found")
    return CaseResult.passed(VERSIONS_CHECK, CaseKind.CONSISTENCY)


def check_registry_classes(service: DocumentService) -> CaseResult:
    """Every class in the service's class registry must resolve."""
    missing: List[str] = list(service.unresolved_registry_classes())
    if missing:
        message = f"One or more classes not found: {missing}"
        logger.error(message)
        return CaseResult.failure(REGISTRY_CLASSES_CHECK, CaseKind.CONSISTENCY, message)
    return CaseResult.passed(REGISTRY_CLASSES_CHECK, CaseKind.CONSISTENCY)


def run_consistency_checks(service: DocumentService, run_config: Optional[RunConfig] = None) -> List[CaseResult]:
    """Run all four checks; a failing check never prevents the others from running."""
    run_config = run_config or RunConfig()
    return [
        check_property_version(
            service, _expected(run_config.expected_property_version, service, "PROPERTY_VERSION")
        ),
        check_properties_fingerprint(
            service, _expected(run_config.expected_properties_fingerprint, service, "FILE_VERSION")
        ),
        check_versions(service),
        check_registry_classes(service),
    ]


__all__ = [
    "PROPERTIES_FINGERPRINT_CHECK",
    "PROPERTY_VERSION_CHECK",
    "REGISTRY_CLASSES_CHECK",
    "VERSIONS_CHECK",
    "check_properties_fingerprint",
    "check_property_version",
    "check_registry_classes",
    "check_versions",
    "run_consistency_checks",
]
