"""Implementation of the ``mathtiles render`` command."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import typer

from mathtiles.api.service import RenderRequest, RenderService
from mathtiles.core.config import ServiceConfig, load_config
from mathtiles.core.exceptions import ConfigError
from mathtiles.core.models import FitPolicy
from mathtiles.core.tiler import assemble_tiles

from .._options import (
    AlphaThresholdOption,
    ColorOption,
    ConfigPathOption,
    DebugOption,
    ExpressionsArgument,
    FontSizeOption,
    HeightOption,
    IndentOption,
    MarginOption,
    OutputPathOption,
    PreviewPathOption,
    ScaleOption,
    StretchOption,
    TileHeightOption,
    VerbosityOption,
    WidthOption,
)
from ..diagnostics import CliEmitter
from ..state import cli_logging, emit_error, render_message, set_cli_state


def _preview_targets(preview: Path, count: int) -> list[Path]:
    if count == 1:
        return [preview]
    suffix = preview.suffix or ".png"
    return [preview.with_name(f"{preview.stem}-{index}{suffix}") for index in range(count)]


def write_preview(result: dict[str, Any], destination: Path) -> None:
    """Rebuild the image from its tiles the way the game client does and save it."""
    image = assemble_tiles(
        result["tiles"], result["width"], result["height"], result["channels"]
    )
    destination.parent.mkdir(parents=True, exist_ok=True)
    image.to_pil().save(destination, format="PNG")


def render(
    expressions: ExpressionsArgument,
    scale: ScaleOption = None,
    font_size: FontSizeOption = None,
    color: ColorOption = None,
    margin: MarginOption = None,
    alpha_threshold: AlphaThresholdOption = None,
    width: WidthOption = None,
    height: HeightOption = None,
    stretch: StretchOption = False,
    tile_height: TileHeightOption = None,
    output: OutputPathOption = None,
    preview: PreviewPathOption = None,
    indent: IndentOption = None,
    config_path: ConfigPathOption = None,
    verbose: VerbosityOption = 0,
    debug: DebugOption = False,
) -> None:
    """Render math expressions into base64 RGBA row tiles (JSON on stdout)."""
    state = set_cli_state(verbosity=verbose, debug=debug)

    try:
        config = load_config(config_path) if config_path is not None else ServiceConfig()
    except ConfigError as exc:
        emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc

    service = RenderService(config=config, emitter=CliEmitter(state))
    requests = [
        RenderRequest(
            markup=expression,
            scale=scale,
            font_size=font_size,
            color=color,
            margin=margin,
            tile_height=tile_height,
            alpha_threshold=alpha_threshold,
            target_width=width,
            target_height=height,
            fit=FitPolicy.STRETCH if stretch else None,
        )
        for expression in expressions
    ]
    with cli_logging(state):
        results = service.handle_many(requests)

    # Payloads are all-or-nothing: one failure discards every result.
    failures = state.consume_events("render_failed")
    if failures:
        kinds = ", ".join(sorted({str(event.get("kind")) for event in failures}))
        emit_error(
            f"{len(failures)} of {len(results)} expression(s) failed ({kinds}); "
            "no payload written."
        )
        raise typer.Exit(code=1)

    if preview is not None:
        for result, target in zip(results, _preview_targets(preview, len(results))):
            write_preview(result, target)
            render_message("info", f"Preview written to {target}")

    document: Any = results[0] if len(results) == 1 else results
    text = json.dumps(document, indent=indent)
    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text + "\n", encoding="utf-8")
        if state.verbosity >= 1:
            render_message("info", f"Payload written to {output}")
    else:
        typer.echo(text)


__all__ = ["render", "write_preview"]
