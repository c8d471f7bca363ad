from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Tuple, Union

import numpy as np
from PIL import Image, ImageDraw, ImageFont, UnidentifiedImageError

from ..settings import SYMBOLS_DIR, TILE_SIZE
from .errors import SymbolInventoryError, TooManyColorsError
from .extractor import Palette

logger = logging.getLogger(__name__)

SYMBOL_EXTENSIONS = (".png", ".gif", ".pbm", ".bmp")
# "0" is left out on purpose: it reads as "8" or "O" on cheap printers.
ALPHANUMERIC_LABELS = "123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


@dataclass(frozen=True, eq=False)
class Symbol:
    name: str
    mask: np.ndarray  # bool, TILE_SIZE x TILE_SIZE, True where ink

    def __repr__(self) -> str:
        return f"Symbol({self.name!r})"


@dataclass(frozen=True)
class SymbolInventory:
    """Immutable, ordered glyph set. Safe to share between worker threads."""

    symbols: Tuple[Symbol, ...]

    def __len__(self) -> int:
        return len(self.symbols)

    def __iter__(self) -> Iterator[Symbol]:
        return iter(self.symbols)

    def __getitem__(self, idx: int) -> Symbol:
        return self.symbols[idx]

    @property
    def names(self) -> List[str]:
        return [symbol.name for symbol in self.symbols]


def _read_mask(path: Path) -> np.ndarray:
    try:
        with Image.open(path) as img:
            rgba = np.asarray(img.convert("RGBA"))
    except (UnidentifiedImageError, OSError) as exc:
        raise SymbolInventoryError(f"Cannot read symbol image '{path}': {exc}") from exc

    if rgba.shape[:2] != (TILE_SIZE, TILE_SIZE):
        raise SymbolInventoryError(
            f"Symbol '{path.name}' is {rgba.shape[1]}x{rgba.shape[0]}, "
            f"expected {TILE_SIZE}x{TILE_SIZE}"
        )
    # Glyphs are black on white; white and fully transparent pixels are background.
    white = (rgba[..., :3] == 255).all(axis=-1)
    mask = (rgba[..., 3] > 0) & ~white
    mask.setflags(write=False)
    return mask


def load_symbol_inventory(directory: Union[str, Path] = SYMBOLS_DIR) -> SymbolInventory:
    """
    Load every numbered glyph (``1.png``, ``07.pbm``, ...) from ``directory``.

    Files are ordered by their number, so the same directory always yields the
    same inventory. Files whose stem is not a number are ignored.
    """
    root = Path(directory)
    if not root.is_dir():
        raise SymbolInventoryError(f"Missing symbol directory '{root}'")

    numbered: List[Tuple[int, Path]] = []
    for path in root.rglob("*"):
        if path.suffix.lower() not in SYMBOL_EXTENSIONS or not path.is_file():
            continue
        if not path.stem.isdigit():
            logger.debug("Ignoring non-numbered file %s in symbol directory", path.name)
            continue
        numbered.append((int(path.stem), path))
    numbered.sort(key=lambda item: (item[0], str(item[1])))

    seen: dict[int, Path] = {}
    for number, path in numbered:
        if number in seen:
            raise SymbolInventoryError(
                f"Symbols '{seen[number].name}' and '{path.name}' share the number {number}"
            )
        seen[number] = path

    if not numbered:
        raise SymbolInventoryError(f"No symbol images found in '{root}'")

    symbols = tuple(Symbol(name=path.name, mask=_read_mask(path)) for _, path in numbered)
    logger.info("Loaded %d symbols from %s", len(symbols), root)
    return SymbolInventory(symbols=symbols)


def create_alphanumeric_symbols(font: ImageFont.ImageFont | ImageFont.FreeTypeFont) -> SymbolInventory:
    """Render ``ALPHANUMERIC_LABELS`` as tile-sized glyphs for paint-by-numbers sheets."""
    symbols: List[Symbol] = []
    for label in ALPHANUMERIC_LABELS:
        tile = Image.new("L", (TILE_SIZE, TILE_SIZE), 255)
        draw = ImageDraw.Draw(tile)
        left, top, right, bottom = draw.textbbox((0, 0), label, font=font)
        x = (TILE_SIZE - (right - left)) // 2 - left
        y = (TILE_SIZE - (bottom - top)) // 2 - top
        draw.text((x, y), label, fill=0, font=font)
        mask = np.asarray(tile) < 128
        mask.setflags(write=False)
        symbols.append(Symbol(name=label, mask=mask))
    return SymbolInventory(symbols=tuple(symbols))


def assign_symbols(palette: Palette, inventory: SymbolInventory) -> Tuple[Symbol, ...]:
    """
    Pair palette entries with inventory symbols, both in their fixed order.

    Each symbol is used at most once, so the mapping is injective.
    """
    if len(palette) > len(inventory):
        raise TooManyColorsError(len(palette), len(inventory))
    return tuple(inventory[idx] for idx in range(len(palette)))


__all__ = [
    "ALPHANUMERIC_LABELS",
    "Symbol",
    "SymbolInventory",
    "assign_symbols",
    "create_alphanumeric_symbols",
    "load_symbol_inventory",
]
