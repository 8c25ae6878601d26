"""Value objects exchanged between the pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import hashlib
import json
from numbers import Real
from typing import Any

from PIL import Image

from .exceptions import InputError, ResamplingError


__all__ = [
    "BoundingBox",
    "CropInfo",
    "FitPolicy",
    "RasterImage",
    "RenderParameters",
    "TilePayload",
]

_FINGERPRINT_VERSION = 1
_MODES_BY_CHANNELS = {1: "L", 3: "RGB", 4: "RGBA"}


class FitPolicy(str, Enum):
    """How a two-dimensional resize target treats the source aspect ratio."""

    CONTAIN = "contain"
    STRETCH = "stretch"

    @classmethod
    def coerce(cls, value: Any) -> FitPolicy:
        """Accept enum members, policy names, or the legacy boolean fit flag."""
        if isinstance(value, cls):
            return value
        if value is None or value is True:
            return cls.CONTAIN
        if value is False:
            return cls.STRETCH
        if isinstance(value, str):
            token = value.strip().lower()
            for member in cls:
                if member.value == token:
                    return member
        raise InputError(f"Unknown fit policy: {value!r}")


@dataclass(frozen=True, slots=True)
class RasterImage:
    """Interleaved pixel buffer with its geometry."""

    pixels: bytes
    width: int
    height: int
    channels: int = 4

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError(f"Negative raster size {self.width}x{self.height}")
        if self.channels not in _MODES_BY_CHANNELS:
            raise ValueError(f"Unsupported channel count: {self.channels}")
        expected = self.width * self.height * self.channels
        if len(self.pixels) != expected:
            raise ValueError(
                f"Pixel buffer holds {len(self.pixels)} bytes, expected {expected} "
                f"for {self.width}x{self.height}x{self.channels}"
            )

    @property
    def stride(self) -> int:
        return self.width * self.channels

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    @classmethod
    def from_pil(cls, image: Image.Image) -> RasterImage:
        """Wrap a Pillow image, normalising exotic modes to RGBA."""
        if image.mode not in _MODES_BY_CHANNELS.values():
            image = image.convert("RGBA")
        width, height = image.size
        channels = len(image.getbands())
        return cls(pixels=image.tobytes(), width=width, height=height, channels=channels)

    def to_pil(self) -> Image.Image:
        mode = _MODES_BY_CHANNELS[self.channels]
        if self.is_empty:
            return Image.new(mode, (self.width, self.height))
        return Image.frombytes(mode, (self.width, self.height), self.pixels)

    def to_rgba(self) -> RasterImage:
        """Return a four-channel copy, treating alpha-less input as opaque."""
        if self.channels == 4:
            return self
        if self.is_empty:
            return RasterImage(b"", self.width, self.height, 4)
        return RasterImage.from_pil(self.to_pil().convert("RGBA"))


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """Pixel rectangle; ``right`` and ``bottom`` are exclusive."""

    left: int
    top: int
    width: int
    height: int

    @classmethod
    def full(cls, width: int, height: int) -> BoundingBox:
        return cls(0, 0, width, height)

    @property
    def right(self) -> int:
        return self.left + self.width

    @property
    def bottom(self) -> int:
        return self.top + self.height

    def contains(self, other: BoundingBox) -> bool:
        """Return True when ``other`` lies entirely inside this box."""
        return (
            self.left <= other.left
            and self.top <= other.top
            and other.right <= self.right
            and other.bottom <= self.bottom
        )

    def as_tuple(self) -> tuple[int, int, int, int]:
        return (self.left, self.top, self.width, self.height)


@dataclass(frozen=True, slots=True)
class CropInfo:
    """Crop rectangle expressed against the original raster."""

    left: int
    top: int
    width: int
    height: int
    original_width: int
    original_height: int

    @classmethod
    def from_box(cls, box: BoundingBox, original: RasterImage) -> CropInfo:
        return cls(
            left=box.left,
            top=box.top,
            width=box.width,
            height=box.height,
            original_width=original.width,
            original_height=original.height,
        )

    def to_dict(self) -> dict[str, int]:
        return {
            "left": self.left,
            "top": self.top,
            "width": self.width,
            "height": self.height,
            "originalWidth": self.original_width,
            "originalHeight": self.original_height,
        }


@dataclass(frozen=True, slots=True)
class TilePayload:
    """Row-banded RGBA pixels ready for transport."""

    tiles: tuple[bytes, ...]
    width: int
    height: int
    channels: int
    tile_height: int
    crop: CropInfo

    @property
    def byte_length(self) -> int:
        return sum(len(tile) for tile in self.tiles)

    def to_image(self) -> RasterImage:
        """Reassemble the tiles the way the remote consumer does."""
        from .tiler import assemble_tiles

        return assemble_tiles(self.tiles, self.width, self.height, self.channels)

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the JSON shape consumed by the game client."""
        from .tiler import encode_tile

        return {
            "tiles": [encode_tile(tile) for tile in self.tiles],
            "width": self.width,
            "height": self.height,
            "channels": self.channels,
            "tileHeight": self.tile_height,
            "crop": self.crop.to_dict(),
        }


def _require_number(name: str, value: Any, *, positive: bool = True) -> None:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InputError(f"'{name}' must be a number, got {value!r}")
    if positive and not value > 0:
        raise InputError(f"'{name}' must be positive, got {value!r}")


def _require_int(name: str, value: Any, *, minimum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InputError(f"'{name}' must be an integer, got {value!r}")
    if value < minimum:
        raise InputError(f"'{name}' must be at least {minimum}, got {value}")


@dataclass(frozen=True, slots=True)
class RenderParameters:
    """Every knob that affects the bytes of a rendered payload."""

    markup: str
    scale: float = 1.0
    font_size: float = 48.0
    color: str = "white"
    margin: int = 2
    tile_height: int = 8
    alpha_threshold: int = 1
    target_width: int | None = None
    target_height: int | None = None
    fit: FitPolicy = field(default=FitPolicy.CONTAIN)

    def __post_init__(self) -> None:
        if not isinstance(self.markup, str) or not self.markup.strip():
            raise InputError("Missing 'latex' field")
        _require_number("scale", self.scale)
        _require_number("fontSize", self.font_size)
        if not isinstance(self.color, str) or not self.color.strip():
            raise InputError(f"'color' must be a non-empty string, got {self.color!r}")
        _require_int("margin", self.margin, minimum=0)
        _require_int("tileHeight", self.tile_height, minimum=1)
        _require_int("alphaThreshold", self.alpha_threshold, minimum=0)
        if self.alpha_threshold > 255:
            raise InputError(f"'alphaThreshold' must be at most 255, got {self.alpha_threshold}")
        for name, value in (("width", self.target_width), ("height", self.target_height)):
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ResamplingError(
                    f"Resize target '{name}' must be a positive integer, got {value!r}"
                )
        object.__setattr__(self, "fit", FitPolicy.coerce(self.fit))

    @property
    def wants_resize(self) -> bool:
        return self.target_width is not None or self.target_height is not None

    def cache_key_material(self) -> dict[str, Any]:
        """Return the normalised fields hashed into the fingerprint."""
        both_targets = self.target_width is not None and self.target_height is not None
        return {
            "version": _FINGERPRINT_VERSION,
            "markup": self.markup,
            "scale": float(self.scale),
            "font_size": float(self.font_size),
            "color": self.color,
            "margin": self.margin,
            "tile_height": self.tile_height,
            "alpha_threshold": self.alpha_threshold,
            "target_width": self.target_width,
            "target_height": self.target_height,
            # The fit policy only changes output when both targets are set.
            "fit": self.fit.value if both_targets else None,
        }

    def fingerprint(self) -> str:
        encoded = json.dumps(self.cache_key_material(), sort_keys=True).encode("utf-8")
        return hashlib.sha256(encoded).hexdigest()
