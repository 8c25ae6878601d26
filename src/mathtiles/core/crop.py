"""Margin expansion and pixel extraction for crop rectangles."""

from __future__ import annotations

from .exceptions import DegenerateImageError, InputError
from .models import BoundingBox, RasterImage


def expand_crop(
    box: BoundingBox,
    margin: int,
    source_width: int,
    source_height: int,
) -> BoundingBox:
    """Grow ``box`` by ``margin`` pixels on every side, clamped to the source."""
    if isinstance(margin, bool) or not isinstance(margin, int) or margin < 0:
        raise InputError(f"Margin must be a non-negative integer, got {margin!r}")

    left = max(0, box.left - margin)
    top = max(0, box.top - margin)
    width = min(source_width - left, box.width + 2 * margin)
    height = min(source_height - top, box.height + 2 * margin)
    if width <= 0 or height <= 0:
        raise DegenerateImageError(
            f"Crop of {source_width}x{source_height} raster has no area "
            f"({width}x{height} at {left},{top})"
        )
    return BoundingBox(left=left, top=top, width=width, height=height)


def crop_image(image: RasterImage, box: BoundingBox) -> RasterImage:
    """Copy the pixels inside ``box`` into a new raster."""
    if box.width <= 0 or box.height <= 0:
        raise DegenerateImageError(f"Cannot extract an empty rectangle {box.as_tuple()}")
    if box.left < 0 or box.top < 0 or box.right > image.width or box.bottom > image.height:
        raise DegenerateImageError(
            f"Crop rectangle {box.as_tuple()} exceeds the {image.width}x{image.height} raster"
        )
    if box == BoundingBox.full(image.width, image.height):
        return image

    stride = image.stride
    start = box.left * image.channels
    span = box.width * image.channels
    view = memoryview(image.pixels)
    rows = [
        view[row * stride + start : row * stride + start + span]
        for row in range(box.top, box.bottom)
    ]
    return RasterImage(b"".join(rows), box.width, box.height, image.channels)


__all__ = ["crop_image", "expand_crop"]
