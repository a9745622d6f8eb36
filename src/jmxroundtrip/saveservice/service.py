"""
ElementTree-backed save service.

Loads test plans as :class:`xml.etree.ElementTree.ElementTree` objects and
writes them back with an XML declaration. Comments and processing
instructions inside the root element survive the round trip; whitespace after
the root element does not.
"""
from __future__ import annotations

import importlib
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import BinaryIO, Dict, List, Optional, Union

from semantic_version import Version

from jmxroundtrip import logger
from jmxroundtrip.exceptions import DocumentLoadError
from .properties import VERSION_KEY, class_aliases, fingerprint_lines, parse_properties, read_lines

XML_DECLARATION = b'<?xml version="1.0" encoding="UTF-8"?>\n'
DEFAULT_ROOT_TAG = "jmeterTestPlan"


def _resolve_class(class_path: str) -> bool:
    if ":" in class_path:
        module_name, _, attribute = class_path.partition(":")
    else:
        module_name, _, attribute = class_path.rpartition(".")
    if not module_name or not attribute:
        return False

    try:
        module = importlib.import_module(module_name)
    except ImportError:
        return False

    obj = module
    for part in attribute.split("."):
        obj = getattr(obj, part, None)
        if obj is None:
            return False
    return isinstance(obj, type)


def _coerce_version(value: str) -> Optional[Version]:
    try:
        return Version.coerce(value.strip())
    except ValueError:
        return None


class XmlSaveService:
    """
    Reference :class:`~jmxroundtrip.service.DocumentService` implementation.

    Args:
        properties_path: The versioned properties resource
        property_version: Property version this service was built for; exposed
            as ``PROPERTY_VERSION``
        file_version: Expected fingerprint of the properties resource; exposed
            as ``FILE_VERSION``
        root_tag: Required root element name, or None to accept any root
        encoding: Encoding of the properties resource
    """

    def __init__(
        self,
        properties_path: Union[str, Path],
        property_version: Optional[str] = None,
        file_version: Optional[str] = None,
        root_tag: Optional[str] = DEFAULT_ROOT_TAG,
        encoding: str = "utf-8",
    ):
        self.properties_path = Path(properties_path)
        self.root_tag = root_tag
        self._lines = read_lines(self.properties_path, encoding=encoding)
        self._properties = parse_properties(self._lines)
        self._encoding = encoding
        self.PROPERTY_VERSION = property_version
        self.FILE_VERSION = file_version
        logger.debug(
            f"Read {len(self._properties)} properties from {self.properties_path}"
        )

    @property
    def class_aliases(self) -> Dict[str, str]:
        return class_aliases(self._properties)

    def load_document(self, path: Path) -> ET.ElementTree:
        path = Path(path)
        if not path.is_file():
            raise DocumentLoadError(
                f"Test plan not found: {path.resolve()}",
                error_code="LOAD_001",
                context={"file_path": path.resolve()},
            )

        parser = ET.XMLParser(target=ET.TreeBuilder(insert_comments=True, insert_pis=True))
        try:
            tree = ET.parse(path, parser=parser)
        except ET.ParseError as e:
            raise DocumentLoadError(
                f"Malformed test plan {path.resolve()}: {e}",
                error_code="LOAD_002",
                context={"file_path": path.resolve(), "position": e.position},
            ) from e

        root = tree.getroot()
        if self.root_tag is not None and root.tag != self.root_tag:
            raise DocumentLoadError(
                f"Unexpected root element <{root.tag}> in {path.resolve()}, expected <{self.root_tag}>",
                error_code="LOAD_003",
                context={"file_path": path.resolve(), "root_tag": root.tag},
            )
        return tree

    def serialize_document(self, tree: ET.ElementTree, stream: BinaryIO) -> None:
        stream.write(XML_DECLARATION)
        tree.write(stream, encoding="utf-8", xml_declaration=False)

    def current_builtin_version(self) -> str:
        return self._properties.get(VERSION_KEY, "")

    def current_properties_fingerprint(self) -> str:
        return fingerprint_lines(self._lines, encoding=self._encoding)

    def versions_are_consistent(self) -> bool:
        """True when ``_version`` parses and matches ``PROPERTY_VERSION`` (if one is declared)."""
        declared = _coerce_version(self.current_builtin_version())
        if declared is None:
            logger.warning(f"Property version {self.current_builtin_version()!r} is not a valid version")
            return False
        if self.PROPERTY_VERSION is None:
            return True
        built_for = _coerce_version(self.PROPERTY_VERSION)
        return built_for is not None and built_for == declared

    def unresolved_registry_classes(self) -> List[str]:
        missing: List[str] = []
        for alias, class_path in self.class_aliases.items():
            if class_path in missing:
                continue
            if not _resolve_class(class_path):
                logger.debug(f"Class alias {alias} -> {class_path} does not resolve")
                missing.append(class_path)
        return missing
