"""Reference save service used when a run configuration names no other."""

from .service import XmlSaveService

__all__ = ["XmlSaveService"]
