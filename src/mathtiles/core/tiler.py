"""Row-band tiling used to ship rasters to clients without PNG decoders."""

from __future__ import annotations

import base64
import binascii
from collections.abc import Iterable, Sequence

from .exceptions import InputError
from .models import RasterImage


DEFAULT_TILE_HEIGHT = 8


def _check_tile_height(tile_height: int) -> None:
    if isinstance(tile_height, bool) or not isinstance(tile_height, int) or tile_height <= 0:
        raise InputError(f"Tile height must be a positive integer, got {tile_height!r}")


def tile_rows(tile_height: int, height: int) -> list[int]:
    """Return the number of rows carried by each tile of a ``height``-row image."""
    _check_tile_height(tile_height)
    return [min(tile_height, height - top) for top in range(0, height, tile_height)]


def split_tiles(image: RasterImage, tile_height: int) -> list[bytes]:
    """Slice ``image`` into full-width bands of at most ``tile_height`` rows.

    Tile ``i`` covers rows ``[i * tile_height, min((i + 1) * tile_height, height))``.
    Bytes are copied as-is so channel order and alpha stay untouched.
    """
    _check_tile_height(tile_height)
    stride = image.stride
    view = memoryview(image.pixels)
    tiles: list[bytes] = []
    for top in range(0, image.height, tile_height):
        bottom = min(top + tile_height, image.height)
        tiles.append(bytes(view[top * stride : bottom * stride]))
    return tiles


def encode_tile(tile: bytes) -> str:
    return base64.b64encode(tile).decode("ascii")


def decode_tile(text: str) -> bytes:
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError(f"Tile is not valid base64: {exc}") from exc


def assemble_tiles(
    tiles: Iterable[bytes | str],
    width: int,
    height: int,
    channels: int = 4,
) -> RasterImage:
    """Concatenate tiles back into a raster, accepting raw or base64 tiles."""
    chunks: Sequence[bytes] = [
        decode_tile(tile) if isinstance(tile, str) else bytes(tile) for tile in tiles
    ]
    pixels = b"".join(chunks)
    expected = width * height * channels
    if len(pixels) != expected:
        raise ValueError(
            f"Tiles hold {len(pixels)} bytes but a {width}x{height}x{channels} "
            f"image needs {expected}"
        )
    return RasterImage(pixels, width, height, channels)


__all__ = [
    "DEFAULT_TILE_HEIGHT",
    "assemble_tiles",
    "decode_tile",
    "encode_tile",
    "split_tiles",
    "tile_rows",
]
