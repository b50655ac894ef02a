"""Workflow coordination for complyscope."""

from .config import ComplyScopeConfig, configure_logging, get_config
from .workflow import ScopeCoordinator, WorkspaceFileMissing

__all__ = [
    "ComplyScopeConfig",
    "configure_logging",
    "get_config",
    "ScopeCoordinator",
    "WorkspaceFileMissing",
]
