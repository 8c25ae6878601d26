"""Configuration models used by the render service.

RenderDefaults

`scale` (`float`)
: Rasterization density multiplier. At `1.0` the renderer works at 72 DPI so a
  font size expressed in points maps one-to-one onto pixels.

`font_size` (`float`)
: Font size in points handed to the typesetter.

`color` (`str`)
: Colour applied to every stroke and fill of the rendered formula. Accepts any
  matplotlib colour specification (`"white"`, `"#ff8800"`, ...).

`margin` (`int`)
: Transparent pixels kept around the visible content after trimming.

`tile_height` (`int`)
: Maximum number of rows carried by each transport tile.

`alpha_threshold` (`int`)
: Pixels whose alpha is strictly greater than this value count as visible
  when trimming.

`fit` (`FitPolicy`)
: Policy used when both resize targets are given (`contain` or `stretch`).

CacheConfig

`enabled` (`bool`)
: Toggle payload caching without discarding other settings.

`capacity` (`int | None`)
: Maximum number of cached payloads. Leave unset to keep every payload for the
  lifetime of the process; set it to bound memory with LRU eviction.

ServiceConfig

`defaults` (`RenderDefaults`)
: Values applied to request fields the caller omits.

`cache` (`CacheConfig`)
: Nested cache settings.

`max_concurrency` (`int`)
: Number of rasterizations allowed to run at the same time. Raw buffers are
  `width * height * 4` bytes, so keep this low on memory-constrained hosts.

`max_workers` (`int`)
: Thread pool size used for batch renders.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
import yaml

from .exceptions import ConfigError, InputError
from .models import FitPolicy


CONFIG_ENV_VAR = "MATHTILES_CONFIG"


class RenderDefaults(BaseModel):
    """Default render parameters applied to incoming requests."""

    model_config = ConfigDict(extra="forbid")

    scale: float = Field(default=1.0, gt=0)
    font_size: float = Field(default=48.0, gt=0)
    color: str = "white"
    margin: int = Field(default=2, ge=0)
    tile_height: int = Field(default=8, gt=0)
    alpha_threshold: int = Field(default=1, ge=0, le=255)
    fit: FitPolicy = FitPolicy.CONTAIN

    @field_validator("fit", mode="before")
    @classmethod
    def coerce_fit(cls, value: Any) -> FitPolicy:
        """Accept the boolean fit flag as well as policy names."""
        try:
            return FitPolicy.coerce(value)
        except InputError as exc:
            raise ValueError(str(exc)) from exc


class CacheConfig(BaseModel):
    """Settings for the in-process payload cache."""

    model_config = ConfigDict(extra="forbid")

    enabled: bool = True
    capacity: int | None = Field(default=None, gt=0)


class ServiceConfig(BaseModel):
    """Top-level configuration for :class:`~mathtiles.api.service.RenderService`."""

    model_config = ConfigDict(extra="forbid")

    defaults: RenderDefaults = Field(default_factory=RenderDefaults)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    max_concurrency: int = Field(default=1, gt=0)
    max_workers: int = Field(default=4, gt=0)


def _read_mapping(path: Path) -> dict[str, Any]:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Unable to read configuration file '{path}': {exc}") from exc
    try:
        payload = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in configuration file '{path}'") from exc
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ConfigError(f"Configuration file '{path}' must contain a mapping.")
    return payload


def load_config(path: str | Path | None = None) -> ServiceConfig:
    """Load the service configuration from YAML.

    When ``path`` is omitted the ``MATHTILES_CONFIG`` environment variable is
    consulted; without either, built-in defaults are returned.
    """
    if path is None:
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if not env_path:
            return ServiceConfig()
        path = env_path

    target = Path(path).expanduser()
    payload = _read_mapping(target)
    try:
        return ServiceConfig.model_validate(payload)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration in '{target}': {exc}") from exc


__all__ = [
    "CONFIG_ENV_VAR",
    "CacheConfig",
    "RenderDefaults",
    "ServiceConfig",
    "load_config",
]
