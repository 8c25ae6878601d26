"""Render orchestration for embedding integrations and the CLI."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor
import contextvars
from dataclasses import dataclass
import logging
from typing import Any

from mathtiles.adapters.rasterizer import MathtextRasterizer, Rasterizer
from mathtiles.core.cache import RenderCache
from mathtiles.core.config import RenderDefaults, ServiceConfig
from mathtiles.core.diagnostics import DiagnosticEmitter, LoggingEmitter
from mathtiles.core.exceptions import InputError, RenderError, exception_hint
from mathtiles.core.models import FitPolicy, RenderParameters, TilePayload

from .pipeline import render_tiles


__all__ = [
    "RenderRequest",
    "RenderService",
]

_log = logging.getLogger(__name__)

# JSON keys accepted for each request field, first match wins.
_FIELD_KEYS: dict[str, tuple[str, ...]] = {
    "markup": ("latex", "markup"),
    "scale": ("scale",),
    "font_size": ("fontSize", "font_size"),
    "color": ("color",),
    "margin": ("margin",),
    "tile_height": ("tileHeight", "tile_height"),
    "alpha_threshold": ("alphaThreshold", "alpha_threshold"),
    "target_width": ("width", "targetWidth", "target_width"),
    "target_height": ("height", "targetHeight", "target_height"),
    "fit": ("fit", "resizeFit"),
}


def _coerce_int(name: str, value: Any) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool):
        raise InputError(f"'{name}' must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise InputError(f"'{name}' must be an integer, got {value!r}")


def _coerce_float(name: str, value: Any) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool):
        raise InputError(f"'{name}' must be a number, got {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            pass
    raise InputError(f"'{name}' must be a number, got {value!r}")


@dataclass(slots=True)
class RenderRequest:
    """Caller-facing render request; unset fields fall back to configured defaults."""

    markup: str
    scale: float | None = None
    font_size: float | None = None
    color: str | None = None
    margin: int | None = None
    tile_height: int | None = None
    alpha_threshold: int | None = None
    target_width: int | None = None
    target_height: int | None = None
    fit: FitPolicy | str | bool | None = None

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> RenderRequest:
        """Parse the JSON body shape posted by game clients."""
        if not isinstance(payload, Mapping):
            raise InputError("Request body must be a JSON object")

        values: dict[str, Any] = {}
        for field_name, keys in _FIELD_KEYS.items():
            for key in keys:
                if key in payload:
                    values[field_name] = payload[key]
                    break

        markup = values.get("markup")
        if not isinstance(markup, str) or not markup.strip():
            raise InputError("Missing 'latex' field")
        color = values.get("color")
        if color is not None and not isinstance(color, str):
            raise InputError(f"'color' must be a string, got {color!r}")

        return cls(
            markup=markup,
            scale=_coerce_float("scale", values.get("scale")),
            font_size=_coerce_float("fontSize", values.get("font_size")),
            color=color,
            margin=_coerce_int("margin", values.get("margin")),
            tile_height=_coerce_int("tileHeight", values.get("tile_height")),
            alpha_threshold=_coerce_int("alphaThreshold", values.get("alpha_threshold")),
            target_width=_coerce_int("width", values.get("target_width")),
            target_height=_coerce_int("height", values.get("target_height")),
            fit=values.get("fit"),
        )

    def to_parameters(self, defaults: RenderDefaults | None = None) -> RenderParameters:
        """Fill unset fields from ``defaults`` and validate the result."""
        defaults = defaults or RenderDefaults()

        def pick(value: Any, fallback: Any) -> Any:
            return fallback if value is None else value

        return RenderParameters(
            markup=self.markup,
            scale=pick(self.scale, defaults.scale),
            font_size=pick(self.font_size, defaults.font_size),
            color=pick(self.color, defaults.color),
            margin=pick(self.margin, defaults.margin),
            tile_height=pick(self.tile_height, defaults.tile_height),
            alpha_threshold=pick(self.alpha_threshold, defaults.alpha_threshold),
            target_width=self.target_width,
            target_height=self.target_height,
            fit=pick(self.fit, defaults.fit),
        )


class RenderService:
    """Validate requests, consult the cache, and run the render pipeline.

    The rasterizer is built once per service and shared by every request.
    Any error aborts the request; no partial payload is ever returned or cached.
    """

    def __init__(
        self,
        rasterizer: Rasterizer | None = None,
        *,
        cache: RenderCache | None = None,
        config: ServiceConfig | None = None,
        emitter: DiagnosticEmitter | None = None,
    ) -> None:
        self.config = config or ServiceConfig()
        self.rasterizer = rasterizer or MathtextRasterizer(
            max_concurrency=self.config.max_concurrency
        )
        if cache is None and self.config.cache.enabled:
            cache = RenderCache(capacity=self.config.cache.capacity)
        self.cache = cache
        self.emitter = emitter or LoggingEmitter()

    def parameters_for(
        self, request: RenderRequest | RenderParameters | Mapping[str, Any]
    ) -> RenderParameters:
        """Normalise any accepted request shape into validated parameters."""
        if isinstance(request, RenderParameters):
            return request
        if isinstance(request, RenderRequest):
            return request.to_parameters(self.config.defaults)
        return RenderRequest.from_mapping(request).to_parameters(self.config.defaults)

    def render(
        self, request: RenderRequest | RenderParameters | Mapping[str, Any]
    ) -> TilePayload:
        """Render a request into tiles, reusing cached payloads when possible."""
        params = self.parameters_for(request)
        if self.cache is None:
            return self._compute(params)

        fingerprint = params.fingerprint()
        payload, hit = self.cache.get_or_compute(fingerprint, lambda: self._compute(params))
        if hit:
            self.emitter.event("cache_hit", {"fingerprint": fingerprint})
        return payload

    def handle(
        self, request: RenderRequest | RenderParameters | Mapping[str, Any]
    ) -> dict[str, Any]:
        """Return the outbound JSON payload, or ``{"error": ...}`` on failure."""
        try:
            payload = self.render(request)
        except Exception as exc:
            hint = exception_hint(exc) or type(exc).__name__
            if isinstance(exc, InputError):
                message = hint
                self.emitter.warning(message, exc)
            elif isinstance(exc, RenderError):
                message = hint
                self.emitter.error(message, exc)
            else:
                message = f"Internal error: {hint}"
                self.emitter.error(message, exc)
            self.emitter.event(
                "render_failed", {"kind": type(exc).__name__, "message": message}
            )
            return {"error": message}
        return payload.to_dict()

    def handle_many(
        self, requests: Iterable[RenderRequest | RenderParameters | Mapping[str, Any]]
    ) -> list[dict[str, Any]]:
        """Handle several requests concurrently, preserving their order."""
        items = list(requests)
        if not items:
            return []
        workers = min(self.config.max_workers, len(items))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="mathtiles") as pool:
            # Each task runs in a copy of the caller's context so context-bound
            # state (such as the CLI state) stays visible to emitters.
            futures = [
                pool.submit(contextvars.copy_context().run, self.handle, item) for item in items
            ]
            return [future.result() for future in futures]

    def _compute(self, params: RenderParameters) -> TilePayload:
        if self.cache is not None:
            self.emitter.event("cache_miss", {"fingerprint": params.fingerprint()})
        _log.debug("Rendering %r", params.markup)
        return render_tiles(params, self.rasterizer, emitter=self.emitter).payload
