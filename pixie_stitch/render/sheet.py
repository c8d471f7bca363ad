from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

import numpy as np
from PIL import Image, ImageDraw

from ..core.extractor import EMPTY, PatternGrid
from ..core.legend import LegendEntry
from ..core.symbols import Symbol
from ..core.types import RGB, SheetKind
from ..settings import COLOR_GRID_THICK, COLOR_GRID_THIN, GRID_MAJOR_EVERY, TILE_SIZE
from .compose import BLACK, WHITE, draw_text_centered, line_height, pad, render_text, stack, text_width
from .fonts import Font

ORIGIN_BAR_PADDING = 2


# =====================================================================
#  Color helpers
# =====================================================================


def _linear(channel: int) -> float:
    c = channel / 255.0
    return c / 12.92 if c <= 0.04045 else ((c + 0.055) / 1.055) ** 2.4


def relative_luminance(rgb: RGB) -> float:
    r, g, b = (_linear(int(v)) for v in rgb[:3])
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


def contrast_ink(background: RGB) -> RGB:
    """Black symbols on light cells, white symbols on dark ones."""
    return BLACK if relative_luminance(background) > 0.2 else WHITE


# =====================================================================
#  Cells
# =====================================================================


def build_tiles(
    legend: Sequence[LegendEntry],
    symbols: Sequence[Symbol],
    colorize: bool,
    draw_symbols: bool,
) -> np.ndarray:
    """
    Pre-render one tile per palette entry plus a trailing blank tile for empty cells.

    Returns an array of shape ``(len(legend) + 1, TILE_SIZE, TILE_SIZE, 3)``.
    """
    tiles = np.full((len(legend) + 1, TILE_SIZE, TILE_SIZE, 3), 255, dtype=np.uint8)
    for entry, symbol in zip(legend, symbols):
        background = entry.rgb if colorize else WHITE
        tile = tiles[entry.index]
        tile[:] = background
        if draw_symbols:
            tile[symbol.mask] = contrast_ink(background)
    return tiles


def render_cells(grid: PatternGrid, tiles: np.ndarray) -> np.ndarray:
    blank = tiles.shape[0] - 1
    lookup = np.where(grid.cells == EMPTY, blank, grid.cells)
    blocks = tiles[lookup]  # (h, w, T, T, 3)
    h, w = grid.height, grid.width
    return np.ascontiguousarray(blocks.transpose(0, 2, 1, 3, 4).reshape(h * TILE_SIZE, w * TILE_SIZE, 3))


# =====================================================================
#  Grid lines
# =====================================================================


def draw_grid(canvas: np.ndarray, grid_w: int, grid_h: int) -> None:
    canvas[:, 0 : grid_w * TILE_SIZE : TILE_SIZE] = COLOR_GRID_THIN
    canvas[0 : grid_h * TILE_SIZE : TILE_SIZE, :] = COLOR_GRID_THIN
    # close the grid on the right/bottom border
    canvas[:, -1] = COLOR_GRID_THIN
    canvas[-1, :] = COLOR_GRID_THIN


def draw_major_grid(canvas: np.ndarray, grid_w: int, grid_h: int, origin: Tuple[int, int]) -> None:
    first_x, first_y = origin
    for bx in range(grid_w):
        if (first_x + bx) % GRID_MAJOR_EVERY == 0:
            canvas[:, TILE_SIZE * bx : TILE_SIZE * bx + 2] = COLOR_GRID_THICK
    for by in range(grid_h):
        if (first_y + by) % GRID_MAJOR_EVERY == 0:
            canvas[TILE_SIZE * by : TILE_SIZE * by + 2, :] = COLOR_GRID_THICK
    if (first_x + grid_w) % GRID_MAJOR_EVERY == 0:
        canvas[:, -2:] = COLOR_GRID_THICK
    if (first_y + grid_h) % GRID_MAJOR_EVERY == 0:
        canvas[-2:, :] = COLOR_GRID_THICK


def _origin_line_vertical(canvas: np.ndarray, x: int) -> None:
    canvas[:, max(0, x - 2) : x + 2] = BLACK
    canvas[:, max(0, x - 1) : x + 1] = WHITE


def _origin_line_horizontal(canvas: np.ndarray, y: int) -> None:
    canvas[max(0, y - 2) : y + 2, :] = BLACK
    canvas[max(0, y - 1) : y + 1, :] = WHITE


def draw_origin_bars(
    canvas: np.ndarray,
    grid_w: int,
    grid_h: int,
    origin: Tuple[int, int],
) -> np.ndarray:
    """
    Draw the bold center lines of a centered pattern.

    When the origin lies on an outer edge the canvas is widened by a couple of
    pixels so the bar stays visible; the (possibly new) canvas is returned.
    """
    first_x, first_y = origin
    if 0 < -first_x < grid_w:
        _origin_line_vertical(canvas, TILE_SIZE * -first_x)
    if 0 < -first_y < grid_h:
        _origin_line_horizontal(canvas, TILE_SIZE * -first_y)

    left = ORIGIN_BAR_PADDING if first_x == 0 else 0
    top = ORIGIN_BAR_PADDING if first_y == 0 else 0
    right = ORIGIN_BAR_PADDING if first_x + grid_w == 0 else 0
    bottom = ORIGIN_BAR_PADDING if first_y + grid_h == 0 else 0
    if not (left or top or right or bottom):
        return canvas

    canvas = np.pad(canvas, ((top, bottom), (left, right), (0, 0)), constant_values=255)
    if left:
        _origin_line_vertical(canvas, ORIGIN_BAR_PADDING)
    if right:
        _origin_line_vertical(canvas, left + TILE_SIZE * grid_w)
    if top:
        _origin_line_horizontal(canvas, ORIGIN_BAR_PADDING)
    if bottom:
        _origin_line_horizontal(canvas, top + TILE_SIZE * grid_h)
    return canvas


# =====================================================================
#  Coordinate labels
# =====================================================================


def _ceil_to(value: int, multiple: int) -> int:
    return -(-value // multiple) * multiple


def _floor_to(value: int, multiple: int) -> int:
    return (value // multiple) * multiple


def label_positions(first: int, count: int) -> List[Tuple[int, int]]:
    """
    Return ``(cell offset, logical coordinate)`` pairs that get a label.

    Every multiple of ten is labelled. The first and last partial blocks are
    labelled too when they hold more than 3 cells, so a 7-9 cell remainder is
    not mistaken for a full block of ten.
    """
    result = [
        (offset, first + offset)
        for offset in range(count + 1)
        if (first + offset) % GRID_MAJOR_EVERY == 0
    ]
    if abs(_ceil_to(first, GRID_MAJOR_EVERY) - first) > 3:
        result.append((0, first))
    last = first + count
    if abs(_floor_to(last, GRID_MAJOR_EVERY) - last) > 3:
        result.append((count, last))
    return result


def place_grid_labels(
    img: Image.Image,
    grid_w: int,
    grid_h: int,
    origin: Tuple[int, int],
    font: Font,
) -> Image.Image:
    first_x, first_y = origin
    widest = max(
        len(str(value)) for value in (first_x, first_y, first_x + grid_w, first_y + grid_h)
    )
    advance = max(text_width(font, ch) for ch in "0123456789-")
    padding = advance * (widest + 4)

    result = pad(img, padding, padding, padding, padding)
    draw = ImageDraw.Draw(result)

    for offset, logical in label_positions(first_x, grid_w):
        x = padding + TILE_SIZE * offset
        text = str(logical)
        draw_text_centered(draw, (x, padding // 2), text, font)
        draw_text_centered(draw, (x, result.height - padding // 2), text, font)

    for offset, logical in label_positions(first_y, grid_h):
        y = padding + TILE_SIZE * offset
        # pixel rows grow downwards, labels count upwards
        text = str(-logical)
        draw_text_centered(draw, (padding // 2, y), text, font)
        draw_text_centered(draw, (result.width - padding // 2, y), text, font)

    return result


# =====================================================================
#  Sheets
# =====================================================================


def sheet_style(kind: SheetKind) -> Tuple[bool, bool]:
    """Return ``(colorize, draw_symbols)`` for a sheet kind."""
    if kind == "cross_stitch":
        return False, True
    if kind == "cross_stitch_colorized":
        return True, True
    if kind == "cross_stitch_colorized_no_symbols":
        return True, False
    if kind == "paint_by_numbers":
        return False, True
    raise ValueError(f"Unknown sheet kind: {kind!r}")


def render_sheet(
    grid: PatternGrid,
    legend: Sequence[LegendEntry],
    kind: SheetKind,
    font: Font,
    font_big: Font,
    symbols: Optional[Sequence[Symbol]] = None,
    origin: Tuple[int, int] = (0, 0),
    major_grid: bool = True,
    origin_bars: bool = False,
    part: Optional[int] = None,
) -> Image.Image:
    """
    Render one pattern sheet: one ``TILE_SIZE`` cell per grid cell.

    ``origin`` is the logical coordinate of the top-left cell; it drives where
    the thick lines, labels and origin bars fall, so parts of a larger pattern
    continue the numbering of the whole. ``symbols`` overrides the legend's own
    symbols (used for paint-by-numbers labels).
    """
    colorize, draw_symbols = sheet_style(kind)
    glyphs = symbols if symbols is not None else [entry.symbol for entry in legend]

    tiles = build_tiles(legend, glyphs, colorize=colorize, draw_symbols=draw_symbols)
    canvas = render_cells(grid, tiles)
    draw_grid(canvas, grid.width, grid.height)
    if major_grid:
        draw_major_grid(canvas, grid.width, grid.height, origin)
    if origin_bars:
        canvas = draw_origin_bars(canvas, grid.width, grid.height, origin)

    img = Image.fromarray(canvas)
    if major_grid:
        img = place_grid_labels(img, grid.width, grid.height, origin, font)

    if part is not None:
        header = render_text([f" Pattern Part {part} "], font_big)
        spacer = line_height(font_big)
        img = stack([pad(header, 0, spacer, 0, spacer), img], align="center")
    return img


__all__ = [
    "build_tiles",
    "contrast_ink",
    "draw_grid",
    "draw_major_grid",
    "draw_origin_bars",
    "label_positions",
    "place_grid_labels",
    "relative_luminance",
    "render_cells",
    "render_sheet",
    "sheet_style",
]
