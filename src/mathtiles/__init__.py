"""Render math markup into transparent RGBA row tiles for PNG-less clients."""

from __future__ import annotations

from mathtiles.adapters.rasterizer import MathtextRasterizer, Rasterizer
from mathtiles.api import (
    PipelineResult,
    RenderRequest,
    RenderService,
    process_raster,
    render_tiles,
)
from mathtiles.core import (
    BoundingBox,
    ConfigError,
    CropInfo,
    DegenerateImageError,
    FitPolicy,
    InputError,
    RasterImage,
    RenderCache,
    RenderError,
    RenderParameters,
    ResamplingError,
    TilePayload,
    TypesetError,
    assemble_tiles,
    crop_image,
    detect_bbox,
    expand_crop,
    resize_image,
    split_tiles,
)
from mathtiles.core.config import RenderDefaults, ServiceConfig, load_config
from mathtiles.version import get_version


__version__ = get_version()

__all__ = [
    "BoundingBox",
    "ConfigError",
    "CropInfo",
    "DegenerateImageError",
    "FitPolicy",
    "InputError",
    "MathtextRasterizer",
    "PipelineResult",
    "RasterImage",
    "Rasterizer",
    "RenderCache",
    "RenderDefaults",
    "RenderError",
    "RenderParameters",
    "RenderRequest",
    "RenderService",
    "ResamplingError",
    "ServiceConfig",
    "TilePayload",
    "TypesetError",
    "__version__",
    "assemble_tiles",
    "crop_image",
    "detect_bbox",
    "expand_crop",
    "load_config",
    "process_raster",
    "render_tiles",
    "resize_image",
    "split_tiles",
]
