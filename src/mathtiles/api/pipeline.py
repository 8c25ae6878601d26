"""Render pipeline: rasterize, trim, pad, resize, and tile a formula."""

from __future__ import annotations

from dataclasses import dataclass
import logging

from mathtiles.adapters.rasterizer import Rasterizer
from mathtiles.core.bbox import detect_bbox
from mathtiles.core.crop import crop_image, expand_crop
from mathtiles.core.diagnostics import DiagnosticEmitter, NullEmitter
from mathtiles.core.exceptions import DegenerateImageError
from mathtiles.core.models import (
    BoundingBox,
    CropInfo,
    RasterImage,
    RenderParameters,
    TilePayload,
)
from mathtiles.core.resize import resize_image
from mathtiles.core.tiler import split_tiles


_log = logging.getLogger(__name__)


@dataclass(slots=True)
class PipelineResult:
    """Payload plus the intermediate facts gathered while producing it."""

    payload: TilePayload
    content_box: BoundingBox | None
    crop_box: BoundingBox
    resized: bool

    @property
    def has_content(self) -> bool:
        return self.content_box is not None


def process_raster(raster: RasterImage, params: RenderParameters) -> PipelineResult:
    """Turn a freshly rasterized image into a tile payload.

    A fully transparent raster is not an error: the whole image is kept so the
    caller still receives a well-formed, if blank, payload.
    """
    if raster.is_empty:
        raise DegenerateImageError(
            f"Rasterizer returned an empty {raster.width}x{raster.height} image"
        )

    content_box = detect_bbox(raster, params.alpha_threshold)
    if content_box is None:
        _log.debug("No pixel above alpha %d; keeping the full raster", params.alpha_threshold)
        trim_box = BoundingBox.full(raster.width, raster.height)
    else:
        trim_box = content_box

    crop_box = expand_crop(trim_box, params.margin, raster.width, raster.height)
    cropped = crop_image(raster.to_rgba(), crop_box)
    if params.wants_resize:
        final = resize_image(
            cropped,
            target_width=params.target_width,
            target_height=params.target_height,
            fit=params.fit,
        )
    else:
        final = cropped

    payload = TilePayload(
        tiles=tuple(split_tiles(final, params.tile_height)),
        width=final.width,
        height=final.height,
        channels=final.channels,
        tile_height=params.tile_height,
        crop=CropInfo.from_box(crop_box, raster),
    )
    return PipelineResult(
        payload=payload,
        content_box=content_box,
        crop_box=crop_box,
        resized=final is not cropped,
    )


def render_tiles(
    params: RenderParameters,
    rasterizer: Rasterizer,
    *,
    emitter: DiagnosticEmitter | None = None,
) -> PipelineResult:
    """Rasterize ``params.markup`` once and post-process it into tiles."""
    emitter = emitter or NullEmitter()
    raster = rasterizer.rasterize(params.markup, params.scale, params.font_size, params.color)
    emitter.event("rasterized", {"width": raster.width, "height": raster.height})

    result = process_raster(raster, params)
    payload = result.payload
    emitter.event(
        "render_complete",
        {
            "width": payload.width,
            "height": payload.height,
            "tiles": len(payload.tiles),
            "bytes": payload.byte_length,
            "resized": result.resized,
            "empty": not result.has_content,
        },
    )
    return result


__all__ = ["PipelineResult", "process_raster", "render_tiles"]
