"""
Errors raised by the filter engine.

Every error derives from InstaFilterError so hosts can catch the whole
family in one place.
"""

from __future__ import annotations

from typing import Any


class InstaFilterError(Exception):
    """Base exception for filter engine errors."""
    pass


class UnsupportedKindError(InstaFilterError, ValueError):
    """A value outside the closed set of filter kinds was used."""
    pass


class FilterInputError(InstaFilterError, ValueError):
    """A filter handle rejected a value for one of its input keys."""
    pass


class NoInputBoundError(InstaFilterError):
    """Render was requested before an input image was bound."""

    def __init__(self, message: str = "No input image bound to filter instance"):
        super().__init__(message)


class RenderUnavailableError(InstaFilterError):
    """
    The underlying filter declined to produce output.

    Recoverable: the previous render result stays valid and the caller
    may retry after changing parameters.
    """

    def __init__(
        self,
        message: str,
        kind: Any = None,
        applied: dict[Any, float | int] | None = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.applied = dict(applied or {})


class PersistFailure(InstaFilterError):
    """Saving a finished image failed. Delivered only via callbacks."""

    def __init__(self, cause: str):
        super().__init__(cause)
        self.cause = cause


class ConfigError(InstaFilterError):
    """Invalid configuration value."""
    pass
