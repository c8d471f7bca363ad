from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Optional, Sequence, Tuple, Union

from PIL import Image

from ..export import export_csv, export_json, export_png, export_text
from ..export.context import build_summary
from ..models.pattern import PatternSummary
from ..render.fonts import Fonts, load_fonts
from ..render.compose import stack
from ..render.legend import render_legend
from ..render.segments import split_segments
from ..render.sheet import render_sheet
from ..settings import FONT_PATH, SYMBOLS_DIR, TRANSPARENT_ALPHA_MAX
from ..storage import get_storage
from .extractor import Extraction, PatternGrid, extract_colors, load_image
from .legend import LegendEntry, build_legend
from .symbols import (
    ALPHANUMERIC_LABELS,
    Symbol,
    SymbolInventory,
    create_alphanumeric_symbols,
    load_symbol_inventory,
)
from .types import SHEET_KINDS, SheetKind, Stage

logger = logging.getLogger(__name__)

StageCallback = Callable[[Stage], None]


@dataclass(frozen=True)
class Resources:
    """Everything loaded once at startup and shared read-only by all conversions."""

    inventory: SymbolInventory
    alphanumerics: SymbolInventory
    fonts: Fonts


@dataclass(frozen=True)
class RenderedPattern:
    files: Dict[str, bytes]
    summary: PatternSummary


def load_resources(
    symbols_dir: Union[str, Path] = SYMBOLS_DIR,
    font_path: str = FONT_PATH,
) -> Resources:
    fonts = load_fonts(font_path)
    return Resources(
        inventory=load_symbol_inventory(symbols_dir),
        alphanumerics=create_alphanumeric_symbols(fonts.regular),
        fonts=fonts,
    )


# =====================================================================
#  Rendering
# =====================================================================


def centered_origin(width: int, height: int) -> Tuple[int, int]:
    """Logical coordinate of the top-left cell when (0, 0) sits at the image center."""
    return -((width + 1) // 2), -((height + 1) // 2)


def render_sheet_set(
    grid: PatternGrid,
    legend: Sequence[LegendEntry],
    resources: Resources,
    *,
    origin: Tuple[int, int] = (0, 0),
    origin_bars: bool = False,
    part: Optional[int] = None,
    paint_by_numbers: bool = True,
) -> Dict[SheetKind, Image.Image]:
    fonts = resources.fonts
    sheets: Dict[SheetKind, Image.Image] = {}
    for kind in SHEET_KINDS:
        if kind == "paint_by_numbers":
            if not paint_by_numbers:
                continue
            labels: Sequence[Symbol] = resources.alphanumerics.symbols[: len(legend)]
            sheets[kind] = render_sheet(
                grid, legend, kind, fonts.regular, fonts.big,
                symbols=labels, major_grid=False, part=part,
            )
            continue
        sheets[kind] = render_sheet(
            grid, legend, kind, fonts.regular, fonts.big,
            origin=origin, origin_bars=origin_bars, part=part,
        )
    return sheets


def render_pattern_files(
    stem: str,
    extraction: Extraction,
    legend: Sequence[LegendEntry],
    resources: Resources,
) -> RenderedPattern:
    """
    Render every output file of one image into memory, keyed by relative path.

    The result depends only on the grid, the legend, the resources and the
    layout constants, so it is byte-identical between runs.
    """
    grid = extraction.grid
    fonts = resources.fonts
    segments = split_segments(grid)

    with_paint_by_numbers = len(legend) <= len(resources.alphanumerics)
    if not with_paint_by_numbers:
        logger.warning(
            "%s: %d colors but only %d number labels; skipping paint-by-numbers sheet",
            stem,
            len(legend),
            len(resources.alphanumerics),
        )

    legend_image = render_legend(legend, (grid.width, grid.height), fonts.regular, segments)
    legend_png = export_png(legend_image)

    files: Dict[str, bytes] = {}
    complete_sheets: Dict[SheetKind, Image.Image] = {}
    variants = (("", (0, 0), False), ("centered/", centered_origin(grid.width, grid.height), True))
    for prefix, (origin_x, origin_y), origin_bars in variants:
        sheets = render_sheet_set(
            grid, legend, resources,
            origin=(origin_x, origin_y),
            origin_bars=origin_bars,
            paint_by_numbers=with_paint_by_numbers,
        )
        if not prefix:
            complete_sheets = sheets
        for kind, image in sheets.items():
            files[f"{prefix}{stem}_{kind}_complete.png"] = export_png(image)

        if len(segments) > 1:
            for segment in segments:
                part_sheets = render_sheet_set(
                    segment.grid, legend, resources,
                    origin=(origin_x + segment.left, origin_y + segment.top),
                    origin_bars=origin_bars,
                    part=segment.part,
                    paint_by_numbers=False,
                )
                for kind, image in part_sheets.items():
                    files[f"{prefix}{stem}_{kind}_segment_{segment.part}.png"] = export_png(image)
        files[f"{prefix}{stem}_legend.png"] = legend_png

    files[f"{stem}_pattern.png"] = export_png(stack([complete_sheets["cross_stitch"], legend_image]))

    labels = list(ALPHANUMERIC_LABELS[: len(legend)]) if with_paint_by_numbers else None
    summary = build_summary(
        stem,
        extraction,
        legend,
        segments=segments,
        sheets=[name for name in files if name.endswith(".png")],
        labels=labels,
    )
    files[f"{stem}_legend.txt"] = export_text(summary).encode("utf-8")
    files[f"{stem}_legend.csv"] = export_csv(summary).encode("utf-8")
    files[f"{stem}_pattern.json"] = export_json(summary).encode("utf-8")
    return RenderedPattern(files=files, summary=summary)


# =====================================================================
#  IMAGE → PATTERN DIRECTORY
# =====================================================================


def convert_image(
    image_path: Union[str, Path],
    resources: Resources,
    *,
    output_dir: Optional[Union[str, Path]] = None,
    overwrite: bool = False,
    transparent_alpha_max: int = TRANSPARENT_ALPHA_MAX,
    on_stage: Optional[StageCallback] = None,
) -> Path:
    """
    Convert one image into a pattern directory named after the image.

    Runs ``loaded -> extracted -> allocated -> rendered -> written``; any error
    aborts before the directory appears.
    """
    def advance(stage: Stage) -> None:
        logger.debug("%s: %s", image_path, stage)
        if on_stage is not None:
            on_stage(stage)

    path = Path(image_path)
    stem = path.stem
    storage = get_storage(path, output_dir)
    storage.check_target(stem, overwrite=overwrite)

    image = load_image(path)
    advance("loaded")

    extraction = extract_colors(
        image,
        max_colors=len(resources.inventory),
        transparent_alpha_max=transparent_alpha_max,
        source=str(path),
    )
    advance("extracted")

    legend = build_legend(extraction, resources.inventory)
    advance("allocated")

    rendered = render_pattern_files(stem, extraction, legend, resources)
    advance("rendered")

    target = storage.save_dir(stem, rendered.files, overwrite=overwrite)
    advance("written")
    logger.info(
        "%s: %dx%d, %d colors, %d stitches -> %s",
        path.name,
        extraction.grid.width,
        extraction.grid.height,
        len(legend),
        extraction.total_stitches,
        target,
    )
    return target


__all__ = [
    "RenderedPattern",
    "Resources",
    "centered_origin",
    "convert_image",
    "load_resources",
    "render_pattern_files",
    "render_sheet_set",
]
