"""Typesetting adapters turning math markup into RGBA rasters.

The default backend relies on matplotlib's mathtext engine, which understands
a large subset of TeX math without a TeX installation. Figures are created
through the object-oriented API (never ``pyplot``) so no global figure manager
is involved, and concurrent use is capped by a semaphore.
"""

from __future__ import annotations

import io
import logging
from threading import BoundedSemaphore
from typing import Protocol, runtime_checkable

from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.colors import is_color_like
from matplotlib.figure import Figure
from PIL import Image

from mathtiles.core.exceptions import InputError, TypesetError
from mathtiles.core.models import RasterImage


_log = logging.getLogger(__name__)

BASE_DPI = 72.0
DEFAULT_PAD_INCHES = 0.05


@runtime_checkable
class Rasterizer(Protocol):
    """Adapter contract consumed by the render pipeline."""

    def rasterize(
        self,
        markup: str,
        scale: float,
        font_size: float,
        color: str = "white",
    ) -> RasterImage: ...


def ensure_math_delimiters(markup: str) -> str:
    """Wrap bare expressions in ``$...$`` so mathtext parses them as math."""
    text = markup.strip()
    if "$" in text:
        return text
    return f"${text}$"


class MathtextRasterizer:
    """Render TeX-style math with matplotlib onto a transparent canvas.

    ``scale`` multiplies a 72 DPI base so that, at scale 1, a font size in
    points equals the same number of pixels. ``max_concurrency`` bounds how
    many renders may run at once; the default serialises them.
    """

    def __init__(
        self,
        *,
        max_concurrency: int = 1,
        pad_inches: float = DEFAULT_PAD_INCHES,
        math_fontfamily: str = "cm",
    ) -> None:
        if max_concurrency <= 0:
            raise ValueError(f"max_concurrency must be positive, got {max_concurrency}")
        self.max_concurrency = max_concurrency
        self.pad_inches = pad_inches
        self.math_fontfamily = math_fontfamily
        self._slots = BoundedSemaphore(max_concurrency)

    def rasterize(
        self,
        markup: str,
        scale: float,
        font_size: float,
        color: str = "white",
    ) -> RasterImage:
        if not markup or not markup.strip():
            raise InputError("Missing 'latex' field")
        if not is_color_like(color):
            raise InputError(f"Unknown colour specification: {color!r}")

        dpi = BASE_DPI * scale
        with self._slots:
            png = self._render_png(ensure_math_delimiters(markup), dpi, font_size, color)

        with Image.open(io.BytesIO(png)) as decoded:
            image = RasterImage.from_pil(decoded.convert("RGBA"))
        _log.debug("Rasterized %r at %.1f dpi into %dx%d", markup, dpi, image.width, image.height)
        return image

    def _render_png(self, text: str, dpi: float, font_size: float, color: str) -> bytes:
        figure = Figure(figsize=(0.01, 0.01), dpi=dpi)
        figure.patch.set_alpha(0)
        FigureCanvasAgg(figure)
        figure.text(
            0,
            0,
            text,
            fontsize=font_size,
            color=color,
            math_fontfamily=self.math_fontfamily,
        )
        buffer = io.BytesIO()
        try:
            figure.savefig(
                buffer,
                format="png",
                dpi=dpi,
                bbox_inches="tight",
                pad_inches=self.pad_inches,
                transparent=True,
            )
        except ValueError as exc:
            # mathtext reports syntax errors as ValueError with a caret diagram.
            raise TypesetError(str(exc).strip() or "Invalid math markup", markup=text) from exc
        return buffer.getvalue()


__all__ = [
    "BASE_DPI",
    "DEFAULT_PAD_INCHES",
    "MathtextRasterizer",
    "Rasterizer",
    "ensure_math_delimiters",
]
