"""Alpha-aware resampling of cropped rasters."""

from __future__ import annotations

import logging

from PIL import Image

from .exceptions import DegenerateImageError, ResamplingError
from .models import FitPolicy, RasterImage


_log = logging.getLogger(__name__)

RESAMPLE_FILTER = Image.Resampling.LANCZOS


def _validate_target(name: str, value: int | None) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ResamplingError(f"Resize target '{name}' must be a positive integer, got {value!r}")


def contained_size(
    width: int,
    height: int,
    target_width: int,
    target_height: int,
) -> tuple[int, int]:
    """Return the largest size fitting the target box at the source aspect ratio.

    Neither side drops below one pixel, however thin the source is.
    """
    ratio = min(target_width / width, target_height / height)
    return (
        min(target_width, max(1, round(width * ratio))),
        min(target_height, max(1, round(height * ratio))),
    )


def proportional_size(
    width: int,
    height: int,
    target_width: int | None,
    target_height: int | None,
) -> tuple[int, int]:
    """Return the size matching one target dimension while keeping the aspect ratio."""
    if target_width is not None:
        return target_width, max(1, round(height * target_width / width))
    if target_height is not None:
        return max(1, round(width * target_height / height)), target_height
    return width, height


# The contained size comes from contained_size, so no side reaches zero pixels.
def _fit_into(
    source: Image.Image,
    target_width: int,
    target_height: int,
    policy: FitPolicy,
) -> Image.Image:
    size = (target_width, target_height)
    if policy is FitPolicy.STRETCH:
        return source.resize(size, RESAMPLE_FILTER)

    inner = contained_size(source.width, source.height, target_width, target_height)
    canvas = Image.new("RGBa", size, (0, 0, 0, 0))
    offset = ((target_width - inner[0]) // 2, (target_height - inner[1]) // 2)
    canvas.paste(source.resize(inner, RESAMPLE_FILTER), offset)
    return canvas


def resize_image(
    image: RasterImage,
    target_width: int | None = None,
    target_height: int | None = None,
    fit: FitPolicy | str | bool = FitPolicy.CONTAIN,
) -> RasterImage:
    """Rescale ``image`` towards the requested targets.

    With no target the image is returned untouched. With a single target the
    other side follows the aspect ratio. With both targets the output is exactly
    ``target_width x target_height``: ``contain`` centres the scaled content on
    a transparent canvas, ``stretch`` ignores the aspect ratio.

    Resampling happens on premultiplied samples so partially transparent edges
    keep their colour instead of picking up a dark fringe.
    """
    _validate_target("width", target_width)
    _validate_target("height", target_height)
    if target_width is None and target_height is None:
        return image
    if image.is_empty:
        raise DegenerateImageError("Cannot resize an empty raster")

    policy = FitPolicy.coerce(fit)
    source = image.to_rgba().to_pil().convert("RGBa")

    try:
        if target_width is not None and target_height is not None:
            resized = _fit_into(source, target_width, target_height, policy)
        else:
            size = proportional_size(image.width, image.height, target_width, target_height)
            resized = source.resize(size, RESAMPLE_FILTER)
    except (ValueError, MemoryError) as exc:
        raise ResamplingError(
            f"Cannot resize {image.width}x{image.height} raster to "
            f"{target_width}x{target_height}: {exc}"
        ) from exc

    _log.debug(
        "Resized %dx%d raster to %dx%d (%s)",
        image.width,
        image.height,
        resized.width,
        resized.height,
        policy.value,
    )
    return RasterImage.from_pil(resized.convert("RGBA"))


__all__ = ["RESAMPLE_FILTER", "contained_size", "proportional_size", "resize_image"]
