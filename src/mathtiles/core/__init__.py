"""Raster post-processing primitives: trimming, cropping, resizing, tiling, caching."""

from __future__ import annotations

from .bbox import DEFAULT_ALPHA_THRESHOLD, detect_bbox
from .cache import CacheStats, RenderCache
from .crop import crop_image, expand_crop
from .exceptions import (
    ConfigError,
    DegenerateImageError,
    InputError,
    RenderError,
    ResamplingError,
    TypesetError,
)
from .models import BoundingBox, CropInfo, FitPolicy, RasterImage, RenderParameters, TilePayload
from .resize import resize_image
from .tiler import DEFAULT_TILE_HEIGHT, assemble_tiles, split_tiles


__all__ = [
    "DEFAULT_ALPHA_THRESHOLD",
    "DEFAULT_TILE_HEIGHT",
    "BoundingBox",
    "CacheStats",
    "ConfigError",
    "CropInfo",
    "DegenerateImageError",
    "FitPolicy",
    "InputError",
    "RasterImage",
    "RenderCache",
    "RenderError",
    "RenderParameters",
    "ResamplingError",
    "TilePayload",
    "TypesetError",
    "assemble_tiles",
    "crop_image",
    "detect_bbox",
    "expand_crop",
    "resize_image",
    "split_tiles",
]
