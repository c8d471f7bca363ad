from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from .extractor import Extraction
from .symbols import SymbolInventory, Symbol, assign_symbols
from .types import RGBA


@dataclass(frozen=True)
class LegendEntry:
    index: int
    color: RGBA
    symbol: Symbol
    count: int

    @property
    def rgb(self) -> Tuple[int, int, int]:
        return self.color[:3]


def build_legend(extraction: Extraction, inventory: SymbolInventory) -> Tuple[LegendEntry, ...]:
    """Return one entry per palette color, in palette order, with its symbol and stitch count."""
    symbols = assign_symbols(extraction.palette, inventory)
    return tuple(
        LegendEntry(index=idx, color=color, symbol=symbol, count=count)
        for idx, (color, symbol, count) in enumerate(
            zip(extraction.palette, symbols, extraction.counts)
        )
    )


def total_stitches(legend: Tuple[LegendEntry, ...]) -> int:
    return sum(entry.count for entry in legend)


__all__ = ["LegendEntry", "build_legend", "total_stitches"]
