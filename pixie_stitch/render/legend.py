from __future__ import annotations

from typing import List, Sequence, Tuple

import numpy as np
from PIL import Image, ImageDraw

from ..core.legend import LegendEntry, total_stitches
from ..settings import LEGEND_BLOCK_COLUMNS, LEGEND_BLOCK_ENTRY_COUNT, TILE_SIZE
from .compose import BLACK, WHITE, draw_text_centered, pad, render_text, stack, text_width
from .fonts import Font
from .segments import Segment
from .sheet import contrast_ink


def _chunks(items: Sequence, size: int) -> List[Sequence]:
    return [items[i : i + size] for i in range(0, len(items), size)]


def render_legend_entry(entry: LegendEntry, font: Font) -> Image.Image:
    """Swatch and symbol side by side, followed by the stitch count."""
    boxes = np.full((TILE_SIZE, 2 * TILE_SIZE, 3), 255, dtype=np.uint8)
    boxes[:, :TILE_SIZE] = entry.rgb
    symbol_tile = boxes[:, TILE_SIZE:]
    symbol_tile[entry.symbol.mask] = contrast_ink(WHITE)

    swatch = Image.fromarray(boxes)
    draw = ImageDraw.Draw(swatch)
    draw.rectangle([0, 0, TILE_SIZE - 1, TILE_SIZE - 1], outline=BLACK)
    draw.rectangle([TILE_SIZE, 0, 2 * TILE_SIZE - 1, TILE_SIZE - 1], outline=BLACK)

    info = render_text([f" {entry.count} stitches"], font)
    return pad(stack([swatch, info], direction="horizontal", align="center"), 0, 0, 2 * TILE_SIZE, 0)


def render_legend_blocks(legend: Sequence[LegendEntry], font: Font) -> Image.Image:
    entries = [render_legend_entry(entry, font) for entry in legend]
    blocks = [stack(chunk, gap=TILE_SIZE) for chunk in _chunks(entries, LEGEND_BLOCK_ENTRY_COUNT)]
    rows = [
        stack(chunk, direction="horizontal", gap=TILE_SIZE)
        for chunk in _chunks(blocks, LEGEND_BLOCK_COLUMNS)
    ]
    return pad(stack(rows, gap=TILE_SIZE), 0, 0, 0, TILE_SIZE + TILE_SIZE // 2)


def render_parts_overview(segments: Sequence[Segment], font: Font) -> Image.Image:
    """Map of the printed parts so they can be laid out in the right order."""
    caption = render_text(["", "", "Pattern parts overview:", ""], font)

    columns = 1 + max(segment.column for segment in segments)
    rows = 1 + max(segment.row for segment in segments)
    # 1px gap between page tiles; pages are drawn in portrait proportion
    tile_w = 1 + text_width(font, f" {len(segments)} ")
    tile_h = 1 + int(tile_w * (9.0 / 6.0))

    pages = Image.new("RGB", (columns * tile_w, rows * tile_h), WHITE)
    draw = ImageDraw.Draw(pages)
    for segment in segments:
        x = segment.column * tile_w
        y = segment.row * tile_h
        draw.rectangle([x, y, x + tile_w - 2, y + tile_h - 2], outline=BLACK)
        draw_text_centered(draw, (x + tile_w / 2, y + tile_h / 2), str(segment.part), font)
    return stack([caption, pages])


def render_legend(
    legend: Sequence[LegendEntry],
    size: Tuple[int, int],
    font: Font,
    segments: Sequence[Segment] = (),
) -> Image.Image:
    """
    Legend page: pattern size, color and stitch totals, then one swatch/symbol
    row per color in palette order, and a parts overview when the pattern is
    printed in several parts.
    """
    width, height = size
    stats = render_text(
        [
            f"Size:     {width}x{height}",
            "",
            f"Colors:   {len(legend)}",
            "",
            f"Stitches: {total_stitches(legend)}",
            "",
            "",
        ],
        font,
    )
    page = stack([stats, render_legend_blocks(legend, font)]) if legend else stats

    if len(segments) > 1:
        overview = render_parts_overview(segments, font)
        separator_y = page.height
        page = stack([page, overview])
        ImageDraw.Draw(page).line([(0, separator_y), (page.width - 1, separator_y)], fill=BLACK)

    return pad(page, TILE_SIZE, TILE_SIZE, TILE_SIZE, TILE_SIZE)


__all__ = [
    "render_legend",
    "render_legend_blocks",
    "render_legend_entry",
    "render_parts_overview",
]
