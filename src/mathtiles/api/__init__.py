"""High-level API for rendering formulas into transport tiles."""

from __future__ import annotations

from .pipeline import PipelineResult, process_raster, render_tiles
from .service import RenderRequest, RenderService


__all__ = [
    "PipelineResult",
    "RenderRequest",
    "RenderService",
    "process_raster",
    "render_tiles",
]
