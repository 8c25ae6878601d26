from __future__ import annotations

import pytest

from mathtiles.core.bbox import alpha_plane, detect_bbox
from mathtiles.core.exceptions import InputError
from mathtiles.core.models import BoundingBox, RasterImage


def _raster(width: int, height: int, alphas: dict[tuple[int, int], int]) -> RasterImage:
    pixels = bytearray(width * height * 4)
    for (x, y), alpha in alphas.items():
        offset = (y * width + x) * 4
        pixels[offset : offset + 4] = bytes((255, 255, 255, alpha))
    return RasterImage(bytes(pixels), width, height)


def test_two_opaque_pixels_give_tight_box() -> None:
    image = _raster(4, 4, {(1, 1): 255, (2, 2): 255})

    assert detect_bbox(image) == BoundingBox(1, 1, 2, 2)


@pytest.mark.parametrize(("x", "y"), [(0, 0), (4, 2), (2, 3)])
def test_single_pixel_gives_unit_box(x: int, y: int) -> None:
    image = _raster(5, 4, {(x, y): 200})

    assert detect_bbox(image) == BoundingBox(x, y, 1, 1)


def test_fully_transparent_image_has_no_box() -> None:
    assert detect_bbox(_raster(3, 3, {})) is None


def test_threshold_is_strict() -> None:
    image = _raster(3, 3, {(0, 0): 1, (2, 2): 2})

    assert detect_bbox(image, threshold=1) == BoundingBox(2, 2, 1, 1)
    assert detect_bbox(image, threshold=2) is None
    assert detect_bbox(image, threshold=0) == BoundingBox(0, 0, 3, 3)


def test_lower_threshold_box_contains_higher_threshold_box() -> None:
    image = _raster(
        6,
        5,
        {(0, 4): 10, (5, 0): 40, (2, 2): 120, (3, 1): 200, (1, 3): 250},
    )
    thresholds = [0, 10, 39, 119, 199, 249]
    boxes = [detect_bbox(image, threshold) for threshold in thresholds]

    for looser, stricter in zip(boxes, boxes[1:]):
        assert looser is not None
        if stricter is not None:
            assert looser.contains(stricter)
    assert detect_bbox(image, 250) is None


def test_images_without_alpha_are_fully_visible() -> None:
    rgb = RasterImage(b"\x00" * 2 * 3 * 3, 2, 3, 3)

    assert detect_bbox(rgb) == BoundingBox(0, 0, 2, 3)


def test_empty_image_has_no_box() -> None:
    assert detect_bbox(RasterImage(b"", 0, 5)) is None


@pytest.mark.parametrize("threshold", [-1, 256, 1.5, True])
def test_invalid_threshold_is_rejected(threshold: object) -> None:
    with pytest.raises(InputError, match="threshold"):
        detect_bbox(_raster(1, 1, {}), threshold)  # type: ignore[arg-type]


def test_alpha_plane_shape() -> None:
    image = _raster(3, 2, {(2, 1): 77})

    plane = alpha_plane(image)

    assert plane.shape == (2, 3)
    assert int(plane[1, 2]) == 77
