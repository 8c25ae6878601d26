"""Visible-content bounding box detection."""

from __future__ import annotations

import numpy as np

from .exceptions import InputError
from .models import BoundingBox, RasterImage


DEFAULT_ALPHA_THRESHOLD = 1


def alpha_plane(image: RasterImage) -> np.ndarray:
    """Return a ``(height, width)`` view of the alpha channel without copying."""
    if image.channels < 4:
        raise ValueError("Image has no alpha channel")
    buffer = np.frombuffer(image.pixels, dtype=np.uint8)
    return buffer.reshape(image.height, image.width, image.channels)[:, :, 3]


def detect_bbox(
    image: RasterImage,
    threshold: int = DEFAULT_ALPHA_THRESHOLD,
) -> BoundingBox | None:
    """Return the tight box around pixels whose alpha exceeds ``threshold``.

    Images without an alpha channel count as fully opaque, so the box covers the
    whole raster. ``None`` means no pixel is visible; callers are expected to
    fall back to :meth:`BoundingBox.full`.
    """
    if isinstance(threshold, bool) or not isinstance(threshold, int) or not 0 <= threshold <= 255:
        raise InputError(f"Alpha threshold must be an integer in 0..255, got {threshold!r}")
    if image.is_empty:
        return None
    if image.channels < 4:
        return BoundingBox.full(image.width, image.height)

    visible = alpha_plane(image) > threshold
    rows = np.flatnonzero(visible.any(axis=1))
    if rows.size == 0:
        return None
    columns = np.flatnonzero(visible.any(axis=0))

    min_y, max_y = int(rows[0]), int(rows[-1])
    min_x, max_x = int(columns[0]), int(columns[-1])
    return BoundingBox(
        left=min_x,
        top=min_y,
        width=max_x - min_x + 1,
        height=max_y - min_y + 1,
    )


__all__ = ["DEFAULT_ALPHA_THRESHOLD", "alpha_plane", "detect_bbox"]
