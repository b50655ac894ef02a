"""Errors raised by the scope engine."""


class ScopeError(Exception):
    """Base class for scope engine errors."""


class EmptyInputError(ScopeError):
    """No component definitions were supplied to build a scope from."""

    def __init__(self, message: str = "no component definitions found"):
        super().__init__(message)


class TitleResolutionError(ScopeError):
    """A control title could not be determined."""


class ResolutionTimeout(TitleResolutionError):
    """Title resolution ran past its deadline."""
