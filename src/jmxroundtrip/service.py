"""
The save-service contract the harness drives, and how a configured service is found.

The harness never parses or emits documents itself. Everything it needs from
the document engine goes through :class:`DocumentService`. A run configuration
names the service either as ``"package.module:attribute"`` or as the name of an
entry point registered under the ``jmxroundtrip.services`` group.
"""

import importlib
import importlib.metadata
from pathlib import Path
from typing import Any, BinaryIO, Dict, List, Mapping, Optional, Protocol, runtime_checkable

from jmxroundtrip import logger
from jmxroundtrip.exceptions import ServiceResolutionError

ENTRY_POINT_GROUP = "jmxroundtrip.services"


@runtime_checkable
class DocumentService(Protocol):
    """Protocol for save services under test."""

    def load_document(self, path: Path) -> Any:
        """Load a document file into a tree.

        Raises:
            DocumentLoadError: If the document is malformed or unsupported
        """
        ...

    def serialize_document(self, tree: Any, stream: BinaryIO) -> None:
        """Write ``tree`` to a binary stream."""
        ...

    def current_builtin_version(self) -> str:
        """Property version declared by the versioned properties resource."""
        ...

    def current_properties_fingerprint(self) -> str:
        """Content fingerprint of the versioned properties resource."""
        ...

    def versions_are_consistent(self) -> bool:
        ...

    def unresolved_registry_classes(self) -> List[str]:
        """Class names referenced by the class registry that cannot be loaded."""
        ...


def _entry_points(group: str):
    entry_points = importlib.metadata.entry_points()
    if hasattr(entry_points, 'select'):
        return entry_points.select(group=group)
    return entry_points.get(group, [])


def _import_target(target: str) -> Any:
    module_name, _, attribute = target.partition(":")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ServiceResolutionError(
            f"Cannot import save service module '{module_name}': {e}",
            error_code="SERVICE_001",
            context={"service": target},
        ) from e

    obj: Any = module
    for part in attribute.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as e:
            raise ServiceResolutionError(
                f"Module '{module_name}' has no attribute '{attribute}'",
                error_code="SERVICE_001",
                context={"service": target},
            ) from e
    return obj


def _load_entry_point(name: str) -> Any:
    for entry_point in _entry_points(ENTRY_POINT_GROUP):
        if entry_point.name == name:
            logger.debug(f"Resolved save service '{name}' from entry point {entry_point.value}")
            return entry_point.load()

    raise ServiceResolutionError(
        f"No save service entry point named '{name}' in group '{ENTRY_POINT_GROUP}'",
        error_code="SERVICE_002",
        context={"service": name, "entry_point": ENTRY_POINT_GROUP},
    )


def resolve_service_factory(target: str) -> Any:
    """Return the class or factory named by ``target`` without calling it."""
    if ":" in target:
        return _import_target(target)
    return _load_entry_point(target)


def load_service(target: str, options: Optional[Mapping[str, Any]] = None) -> DocumentService:
    """
    Resolve and instantiate the save service named by ``target``.

    Args:
        target: ``"module:attribute"`` or an entry point name
        options: Keyword arguments passed to the service factory

    Returns:
        An object implementing :class:`DocumentService`

    Raises:
        ServiceResolutionError: If the target cannot be resolved, constructed,
            or does not implement the protocol
    """
    factory = resolve_service_factory(target)
    kwargs: Dict[str, Any] = dict(options or {})

    if isinstance(factory, DocumentService) and not isinstance(factory, type):
        if kwargs:
            raise ServiceResolutionError(
                f"Save service '{target}' is an instance and cannot take options",
                error_code="SERVICE_003",
                context={"service": target, "options": sorted(kwargs)},
            )
        service = factory
    else:
        try:
            service = factory(**kwargs)
        except ServiceResolutionError:
            raise
        except Exception as e:
            raise ServiceResolutionError(
                f"Failed to construct save service '{target}': {e}",
                error_code="SERVICE_003",
                context={"service": target},
            ) from e

    if not isinstance(service, DocumentService):
        raise ServiceResolutionError(
            f"Save service '{target}' does not implement DocumentService",
            error_code="SERVICE_004",
            context={"service": target, "service_type": type(service).__name__},
        )

    logger.info(f"Using save service {type(service).__name__} ({target})")
    return service


__all__ = ["DocumentService", "ENTRY_POINT_GROUP", "load_service", "resolve_service_factory"]
