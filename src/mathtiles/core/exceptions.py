"""Custom exception hierarchy for the raster tiling pipeline."""

from __future__ import annotations


class RenderError(RuntimeError):
    """Base exception for render pipeline failures."""


class InputError(RenderError):
    """Raised when request parameters are missing or out of range."""


class ResamplingError(InputError):
    """Raised when the resize step receives unusable target dimensions."""


class ConfigError(InputError):
    """Raised when a configuration file cannot be loaded or validated."""


class TypesetError(RenderError):
    """Raised when the rasterizer rejects the markup it was given."""

    def __init__(self, message: str, *, markup: str | None = None) -> None:
        super().__init__(message)
        self.markup = markup


class DegenerateImageError(RenderError):
    """Raised when a raster or crop rectangle has no area."""


def exception_messages(exc: BaseException) -> list[str]:
    """Return the collected message chain for an exception and its causes."""
    messages: list[str] = []
    visited: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in visited:
        visited.add(id(current))
        text = str(current).strip()
        if text:
            first_line = text.splitlines()[0].strip()
            if first_line:
                messages.append(first_line)
        current = current.__cause__ or current.__context__
    return messages


def exception_hint(exc: BaseException) -> str | None:
    """Return the most specific message available for an exception chain."""
    messages = exception_messages(exc)
    return messages[-1] if messages else None


__all__ = [
    "ConfigError",
    "DegenerateImageError",
    "InputError",
    "RenderError",
    "ResamplingError",
    "TypesetError",
    "exception_hint",
    "exception_messages",
]
