"""Common lightweight type aliases used across the pipeline."""

from typing import Literal, Tuple

RGBA = Tuple[int, int, int, int]
RGB = Tuple[int, int, int]

SheetKind = Literal[
    "cross_stitch",
    "cross_stitch_colorized",
    "cross_stitch_colorized_no_symbols",
    "paint_by_numbers",
]
Stage = Literal["pending", "loaded", "extracted", "allocated", "rendered", "written"]

SHEET_KINDS: Tuple[SheetKind, ...] = (
    "cross_stitch_colorized",
    "cross_stitch",
    "cross_stitch_colorized_no_symbols",
    "paint_by_numbers",
)

__all__ = ["RGBA", "RGB", "SheetKind", "Stage", "SHEET_KINDS"]
