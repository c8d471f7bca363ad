from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Dict, Iterator, List, Tuple, Union

import numpy as np
from PIL import Image, UnidentifiedImageError

from ..settings import TRANSPARENT_ALPHA_MAX
from .errors import TooManyColorsError, UnsupportedFormatError
from .types import RGBA

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = ("PNG", "GIF")
EMPTY = -1

ImageSource = Union[str, Path, bytes, BinaryIO]


class Palette:
    """Ordered set of colors; iteration order is insertion order."""

    def __init__(self, colors: Tuple[RGBA, ...] = ()) -> None:
        self._colors: List[RGBA] = []
        self._index: Dict[RGBA, int] = {}
        for color in colors:
            self.add(color)

    def add(self, color: RGBA) -> int:
        idx = self._index.get(color)
        if idx is None:
            idx = len(self._colors)
            self._index[color] = idx
            self._colors.append(color)
        return idx

    def index_of(self, color: RGBA) -> int:
        return self._index[color]

    def __len__(self) -> int:
        return len(self._colors)

    def __iter__(self) -> Iterator[RGBA]:
        return iter(self._colors)

    def __getitem__(self, idx: int) -> RGBA:
        return self._colors[idx]

    @property
    def colors(self) -> Tuple[RGBA, ...]:
        return tuple(self._colors)

    def __repr__(self) -> str:
        return f"Palette({self._colors!r})"


@dataclass(frozen=True)
class PatternGrid:
    """One cell per source pixel holding a palette index, or ``EMPTY``."""

    cells: np.ndarray
    palette: Palette

    @property
    def width(self) -> int:
        return int(self.cells.shape[1])

    @property
    def height(self) -> int:
        return int(self.cells.shape[0])

    def crop(self, left: int, top: int, width: int, height: int) -> "PatternGrid":
        return PatternGrid(cells=self.cells[top : top + height, left : left + width], palette=self.palette)


@dataclass(frozen=True)
class Extraction:
    palette: Palette
    counts: Tuple[int, ...]
    grid: PatternGrid
    transparent_count: int

    @property
    def total_stitches(self) -> int:
        return int(sum(self.counts))


# =====================================================================
#  Decoding
# =====================================================================


def load_image(source: ImageSource) -> Image.Image:
    """
    Decode a PNG or GIF into an RGBA image.

    GIFs contribute their first frame only; the transparent palette index of a
    GIF (or a tRNS chunk of a paletted PNG) becomes alpha 0.
    """
    name = str(source) if isinstance(source, (str, Path)) else "<stream>"
    if isinstance(source, bytes):
        source = io.BytesIO(source)
    try:
        with Image.open(source) as img:
            if img.format not in SUPPORTED_FORMATS:
                raise UnsupportedFormatError(
                    f"'{name}' is a {img.format or 'unknown'} image; only PNG and GIF are supported"
                )
            img.load()
            rgba = img.convert("RGBA")
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, EOFError, ValueError) as exc:
        raise UnsupportedFormatError(f"Cannot decode '{name}' as PNG or GIF: {exc}") from exc

    logger.debug("Loaded %s (%dx%d)", name, rgba.width, rgba.height)
    return rgba


# =====================================================================
#  Extraction
# =====================================================================


def _pack(pixels: np.ndarray) -> np.ndarray:
    px = pixels.astype(np.uint32)
    return (px[..., 0] << 24) | (px[..., 1] << 16) | (px[..., 2] << 8) | px[..., 3]


def _unpack(value: int) -> RGBA:
    value = int(value)
    return ((value >> 24) & 0xFF, (value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF)


def extract_colors(
    image: Image.Image | np.ndarray,
    max_colors: int,
    transparent_alpha_max: int = TRANSPARENT_ALPHA_MAX,
    source: str | None = None,
) -> Extraction:
    """
    Build the first-seen palette, per-color counts and the pattern grid.

    Pixels whose alpha is ``<= transparent_alpha_max`` are empty cells and never
    reach the palette. Raises ``TooManyColorsError`` when more than
    ``max_colors`` distinct opaque colors are present.
    """
    if isinstance(image, Image.Image):
        pixels = np.asarray(image.convert("RGBA") if image.mode != "RGBA" else image)
    else:
        pixels = np.asarray(image)
    if pixels.ndim != 3 or pixels.shape[2] != 4:
        raise ValueError(f"Expected an RGBA pixel array, got shape {pixels.shape}")

    height, width = pixels.shape[:2]
    flat = _pack(pixels).reshape(-1)
    opaque = pixels[..., 3].reshape(-1) > transparent_alpha_max
    opaque_positions = np.flatnonzero(opaque)

    # np.unique sorts by value; reorder by first occurrence to get scan order.
    uniques, first_seen, inverse, counts = np.unique(
        flat[opaque_positions], return_index=True, return_inverse=True, return_counts=True
    )
    if len(uniques) > max_colors:
        raise TooManyColorsError(len(uniques), max_colors, source)

    order = np.argsort(first_seen, kind="stable")
    rank = np.empty_like(order)
    rank[order] = np.arange(len(order))

    palette = Palette(tuple(_unpack(uniques[i]) for i in order))

    cells = np.full(height * width, EMPTY, dtype=np.int32)
    cells[opaque_positions] = rank[inverse.reshape(-1)]
    cells = cells.reshape(height, width)
    cells.setflags(write=False)

    ordered_counts = tuple(int(counts[i]) for i in order)
    transparent = int(height * width - len(opaque_positions))
    logger.info(
        "Extracted %d colors, %d stitches, %d empty cells%s",
        len(palette),
        sum(ordered_counts),
        transparent,
        f" from {source}" if source else "",
    )
    return Extraction(
        palette=palette,
        counts=ordered_counts,
        grid=PatternGrid(cells=cells, palette=palette),
        transparent_count=transparent,
    )


__all__ = [
    "EMPTY",
    "Extraction",
    "Palette",
    "PatternGrid",
    "SUPPORTED_FORMATS",
    "extract_colors",
    "load_image",
]
