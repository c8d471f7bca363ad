from __future__ import annotations


class PixieStitchError(Exception):
    """Base class for every error that aborts the conversion of one image."""


class UnsupportedFormatError(PixieStitchError):
    pass


class TooManyColorsError(PixieStitchError):
    def __init__(self, count: int, limit: int, source: str | None = None) -> None:
        self.count = count
        self.limit = limit
        self.source = source
        where = f" in '{source}'" if source else ""
        super().__init__(
            f"Found {count} distinct colors{where} but only {limit} symbols are available"
        )


class OutputWriteError(PixieStitchError):
    pass


class SymbolInventoryError(PixieStitchError):
    """The symbol resource directory is missing or holds unusable glyphs."""


__all__ = [
    "PixieStitchError",
    "UnsupportedFormatError",
    "TooManyColorsError",
    "OutputWriteError",
    "SymbolInventoryError",
]
