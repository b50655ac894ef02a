"""Utility functions for complyscope."""

from .app_dir import ApplicationDirectory
from .documents import DocumentLoader, DocumentValidator, ModelValidator, find_component_definitions
from .storage import WorkspaceStorage

__all__ = [
    "ApplicationDirectory",
    "DocumentLoader",
    "DocumentValidator",
    "ModelValidator",
    "find_component_definitions",
    "WorkspaceStorage",
]
