"""Diagnostic abstractions shared across the render pipeline."""

from __future__ import annotations

from collections.abc import Mapping
import logging
from typing import Any, Protocol, runtime_checkable


logger = logging.getLogger(__name__)


@runtime_checkable
class DiagnosticEmitter(Protocol):
    """Interface used to surface warnings, errors, and structured events."""

    debug_enabled: bool

    def warning(self, message: str, exc: BaseException | None = None) -> None: ...

    def error(self, message: str, exc: BaseException | None = None) -> None: ...

    def event(self, name: str, payload: Mapping[str, Any]) -> None: ...


class NullEmitter:
    """Emitter that ignores every diagnostic."""

    debug_enabled: bool = False

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        return

    def error(self, message: str, exc: BaseException | None = None) -> None:
        return

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        return


class LoggingEmitter:
    """Emitter that forwards diagnostics to the standard logging module."""

    def __init__(
        self, *, logger_obj: logging.Logger | None = None, debug_enabled: bool = False
    ) -> None:
        self._logger = logger_obj or logger
        self.debug_enabled = debug_enabled

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        self._logger.warning(message, exc_info=exc if self.debug_enabled else None)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        self._logger.error(message, exc_info=exc)

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        message = format_event_message(name, payload)
        if message:
            self._logger.info(message)
            return
        self._logger.debug("diagnostic event %s: %s", name, dict(payload))


def _short(fingerprint: Any) -> str:
    return str(fingerprint or "<unknown>")[:12]


def format_event_message(name: str, payload: Mapping[str, Any]) -> str | None:
    """Return a human-friendly summary for selected pipeline events."""
    data = dict(payload)

    if name == "cache_hit":
        return f"Reusing cached render {_short(data.get('fingerprint'))}"

    if name == "cache_miss":
        return f"Rendering uncached formula {_short(data.get('fingerprint'))}"

    if name == "rasterized":
        width = data.get("width")
        height = data.get("height")
        return f"Rasterized formula to {width}x{height} pixels"

    if name == "render_complete":
        width = data.get("width")
        height = data.get("height")
        tiles = data.get("tiles")
        details: list[str] = []
        if data.get("bytes") is not None:
            details.append(f"{data['bytes']} bytes")
        if data.get("resized"):
            details.append("resized")
        if data.get("empty"):
            details.append("no visible content")
        suffix = f" ({', '.join(details)})" if details else ""
        return f"Rendered {width}x{height} image into {tiles} tile(s){suffix}"

    if name == "render_failed":
        kind = data.get("kind") or "RenderError"
        return f"Render failed with {kind}: {data.get('message') or '<no detail>'}"

    return None


__all__ = [
    "DiagnosticEmitter",
    "LoggingEmitter",
    "NullEmitter",
    "format_event_message",
]
