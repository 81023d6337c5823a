"""Starling exception hierarchy.

Shared across the factory, encoder, scheduler, and ASGI layer so every
module raises and catches the same types.
"""

from typing import Any


class StarlingError(Exception):
    """Base for all starling-specific errors."""


class ConfigurationError(StarlingError):
    """Raised when configuration is invalid or an optional dependency is missing."""


class ValidationError(StarlingError):
    """A required option is absent or an option has an unusable value.

    Raised synchronously from event construction and ``repeat()``.  The
    offending option name is kept on ``field`` so callers can report it
    without parsing the message.
    """

    def __init__(self, field: str, detail: str = "") -> None:
        self.field = field
        self.detail = detail or f"Missing required field: {field}"
        super().__init__(self.detail)


class RenderError(StarlingError):
    """A fragment or signal generator raised while an event was rendering.

    ``render()`` itself lets generator exceptions propagate unchanged.
    The scheduler wraps them in this type only to report which event
    failed; the original exception is chained as ``__cause__``.
    """

    def __init__(self, event: Any, cause: BaseException) -> None:
        self.event = event
        kind = getattr(event, "kind", None)
        name = getattr(kind, "value", kind) or type(event).__name__
        super().__init__(f"Failed to render {name}: {type(cause).__name__}: {cause}")
        self.__cause__ = cause


class StreamClosedError(StarlingError):
    """Raised when writing to an output channel that has already closed."""
