"""Shared Typer option definitions for CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer


TYPESETTING_PANEL = "Typesetting"
LAYOUT_PANEL = "Layout"
OUTPUT_PANEL = "Output"
DIAGNOSTICS_PANEL = "Diagnostics"

ExpressionsArgument = Annotated[
    list[str],
    typer.Argument(
        metavar="LATEX...",
        help="Math expressions to render, e.g. '\\frac{a}{b}'. Dollar signs are optional.",
    ),
]

ScaleOption = Annotated[
    float | None,
    typer.Option(
        "--scale",
        "-s",
        help="Rasterization density multiplier (1.0 renders at 72 DPI).",
        rich_help_panel=TYPESETTING_PANEL,
    ),
]

FontSizeOption = Annotated[
    float | None,
    typer.Option(
        "--font-size",
        "-f",
        help="Font size in points.",
        rich_help_panel=TYPESETTING_PANEL,
    ),
]

ColorOption = Annotated[
    str | None,
    typer.Option(
        "--color",
        help="Colour applied to the rendered formula (name or #rrggbb).",
        rich_help_panel=TYPESETTING_PANEL,
    ),
]

MarginOption = Annotated[
    int | None,
    typer.Option(
        "--margin",
        "-m",
        min=0,
        help="Transparent margin in pixels kept around the trimmed content.",
        rich_help_panel=LAYOUT_PANEL,
    ),
]

AlphaThresholdOption = Annotated[
    int | None,
    typer.Option(
        "--alpha-threshold",
        min=0,
        max=255,
        help="Pixels with alpha above this value count as visible when trimming.",
        rich_help_panel=LAYOUT_PANEL,
    ),
]

WidthOption = Annotated[
    int | None,
    typer.Option(
        "--width",
        "-W",
        min=1,
        help="Resize target width in pixels.",
        rich_help_panel=LAYOUT_PANEL,
    ),
]

HeightOption = Annotated[
    int | None,
    typer.Option(
        "--height",
        "-H",
        min=1,
        help="Resize target height in pixels.",
        rich_help_panel=LAYOUT_PANEL,
    ),
]

StretchOption = Annotated[
    bool,
    typer.Option(
        "--stretch",
        help="Ignore the aspect ratio when both --width and --height are given.",
        rich_help_panel=LAYOUT_PANEL,
    ),
]

TileHeightOption = Annotated[
    int | None,
    typer.Option(
        "--tile-height",
        "-t",
        min=1,
        help="Maximum number of pixel rows per tile.",
        rich_help_panel=OUTPUT_PANEL,
    ),
]

OutputPathOption = Annotated[
    Path | None,
    typer.Option(
        "--output",
        "-o",
        dir_okay=False,
        writable=True,
        resolve_path=True,
        help="Write the JSON payload to this file instead of stdout.",
        rich_help_panel=OUTPUT_PANEL,
    ),
]

PreviewPathOption = Annotated[
    Path | None,
    typer.Option(
        "--preview",
        dir_okay=False,
        writable=True,
        resolve_path=True,
        help="Reassemble the tiles and save them as a PNG for inspection.",
        rich_help_panel=OUTPUT_PANEL,
    ),
]

IndentOption = Annotated[
    int | None,
    typer.Option(
        "--indent",
        min=0,
        help="Pretty-print the JSON payload with this indentation.",
        rich_help_panel=OUTPUT_PANEL,
    ),
]

ConfigPathOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        exists=True,
        dir_okay=False,
        readable=True,
        resolve_path=True,
        envvar="MATHTILES_CONFIG",
        help="YAML file providing render defaults and cache settings.",
        rich_help_panel=DIAGNOSTICS_PANEL,
    ),
]

VerbosityOption = Annotated[
    int,
    typer.Option(
        "--verbose",
        "-v",
        count=True,
        help="Increase diagnostic output (repeat for more detail).",
        rich_help_panel=DIAGNOSTICS_PANEL,
    ),
]

DebugOption = Annotated[
    bool,
    typer.Option(
        "--debug",
        help="Show full tracebacks on unexpected failures.",
        rich_help_panel=DIAGNOSTICS_PANEL,
    ),
]
