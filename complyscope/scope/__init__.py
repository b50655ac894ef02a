"""Scope resolution and assessment plan filtering."""

from .control_set import ControlSetIndex
from .errors import EmptyInputError, ResolutionTimeout, ScopeError, TitleResolutionError
from .builder import build_scope
from .applier import apply_scope, filter_selection, list_skipped
from .titles import CatalogTitleResolver, ProfileLoader, ResolutionContext, TitleResolver

__all__ = [
    "ControlSetIndex",
    "EmptyInputError",
    "ResolutionTimeout",
    "ScopeError",
    "TitleResolutionError",
    "build_scope",
    "apply_scope",
    "filter_selection",
    "list_skipped",
    "CatalogTitleResolver",
    "ProfileLoader",
    "ResolutionContext",
    "TitleResolver",
]
