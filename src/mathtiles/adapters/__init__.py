"""Adapters bridging external typesetting engines with the pipeline."""

from __future__ import annotations

from .rasterizer import MathtextRasterizer, Rasterizer, ensure_math_delimiters


__all__ = ["MathtextRasterizer", "Rasterizer", "ensure_math_delimiters"]
