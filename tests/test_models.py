from __future__ import annotations

import pytest

from mathtiles.core.exceptions import InputError, ResamplingError
from mathtiles.core.models import (
    BoundingBox,
    CropInfo,
    FitPolicy,
    RasterImage,
    RenderParameters,
    TilePayload,
)


def test_raster_image_rejects_mismatched_buffer() -> None:
    with pytest.raises(ValueError, match="expected 16"):
        RasterImage(b"\x00" * 15, 2, 2, 4)


def test_raster_image_rejects_unknown_channel_count() -> None:
    with pytest.raises(ValueError, match="channel"):
        RasterImage(b"\x00" * 8, 2, 2, 2)


def test_raster_image_round_trips_through_pillow() -> None:
    pixels = bytes(range(2 * 3 * 4))
    image = RasterImage(pixels, 2, 3)

    restored = RasterImage.from_pil(image.to_pil())

    assert restored == image
    assert image.stride == 8


def test_to_rgba_treats_rgb_as_opaque() -> None:
    rgb = RasterImage(b"\x10\x20\x30" * 4, 2, 2, 3)

    rgba = rgb.to_rgba()

    assert rgba.channels == 4
    assert rgba.pixels == b"\x10\x20\x30\xff" * 4


def test_bounding_box_geometry() -> None:
    outer = BoundingBox(0, 0, 4, 4)
    inner = BoundingBox(1, 1, 2, 2)

    assert inner.right == 3
    assert inner.bottom == 3
    assert outer.contains(inner)
    assert not inner.contains(outer)
    assert BoundingBox.full(4, 4) == outer


def test_crop_info_serialises_camel_case() -> None:
    image = RasterImage(b"\x00" * 4 * 4 * 4, 4, 4)
    info = CropInfo.from_box(BoundingBox(1, 0, 2, 3), image)

    assert info.to_dict() == {
        "left": 1,
        "top": 0,
        "width": 2,
        "height": 3,
        "originalWidth": 4,
        "originalHeight": 4,
    }


def test_tile_payload_to_dict_encodes_tiles() -> None:
    crop = CropInfo(0, 0, 1, 2, 1, 2)
    payload = TilePayload(
        tiles=(b"\xff\x00\x00\xff", b"\x00\xff\x00\xff"),
        width=1,
        height=2,
        channels=4,
        tile_height=1,
        crop=crop,
    )

    data = payload.to_dict()

    assert data["tiles"] == ["/wAA/w==", "AP8A/w=="]
    assert data["tileHeight"] == 1
    assert data["crop"]["originalHeight"] == 2
    assert payload.byte_length == 8
    assert payload.to_image().pixels == b"\xff\x00\x00\xff\x00\xff\x00\xff"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, FitPolicy.CONTAIN),
        (True, FitPolicy.CONTAIN),
        (False, FitPolicy.STRETCH),
        ("Stretch", FitPolicy.STRETCH),
        (FitPolicy.CONTAIN, FitPolicy.CONTAIN),
    ],
)
def test_fit_policy_coerce(value: object, expected: FitPolicy) -> None:
    assert FitPolicy.coerce(value) is expected


def test_fit_policy_rejects_unknown_name() -> None:
    with pytest.raises(InputError, match="fit policy"):
        FitPolicy.coerce("cover")


def test_render_parameters_defaults() -> None:
    params = RenderParameters(markup=r"\alpha")

    assert params.scale == 1.0
    assert params.font_size == 48.0
    assert params.color == "white"
    assert params.margin == 2
    assert params.tile_height == 8
    assert params.alpha_threshold == 1
    assert params.fit is FitPolicy.CONTAIN
    assert not params.wants_resize


@pytest.mark.parametrize(
    "overrides",
    [
        {"markup": "   "},
        {"scale": 0},
        {"font_size": -1.0},
        {"margin": -1},
        {"tile_height": 0},
        {"alpha_threshold": 256},
        {"color": ""},
        {"scale": True},
    ],
)
def test_render_parameters_reject_invalid_values(overrides: dict[str, object]) -> None:
    values: dict[str, object] = {"markup": "x"}
    values.update(overrides)
    with pytest.raises(InputError):
        RenderParameters(**values)  # type: ignore[arg-type]


def test_render_parameters_reject_non_positive_targets() -> None:
    with pytest.raises(ResamplingError, match="width"):
        RenderParameters(markup="x", target_width=0)


def test_fingerprint_is_stable_and_field_sensitive() -> None:
    base = RenderParameters(markup=r"\frac{a}{b}")

    assert base.fingerprint() == RenderParameters(markup=r"\frac{a}{b}").fingerprint()
    assert base.fingerprint() == RenderParameters(markup=r"\frac{a}{b}", scale=1).fingerprint()
    assert base.fingerprint() != RenderParameters(markup=r"\frac{a}{b}", margin=3).fingerprint()
    assert base.fingerprint() != RenderParameters(markup=r"\frac{b}{a}").fingerprint()
    assert len(base.fingerprint()) == 64


def test_fit_only_matters_with_both_targets() -> None:
    one_target = RenderParameters(markup="x", target_width=10, fit=FitPolicy.STRETCH)
    same_target = RenderParameters(markup="x", target_width=10)
    both = RenderParameters(markup="x", target_width=10, target_height=5, fit="stretch")
    both_contain = RenderParameters(markup="x", target_width=10, target_height=5)

    assert one_target.fingerprint() == same_target.fingerprint()
    assert both.fingerprint() != both_contain.fingerprint()
    assert both.fit is FitPolicy.STRETCH
