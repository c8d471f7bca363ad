from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Union

from PIL import ImageFont

from ..settings import FONT_PATH, FONT_SIZE, FONT_SIZE_BIG

logger = logging.getLogger(__name__)

FONT_CANDIDATES = [
    Path("assets/fonts/DejaVuSans.ttf"),
    Path("/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"),
    Path("/usr/local/share/fonts/DejaVuSans.ttf"),
]

Font = Union[ImageFont.ImageFont, ImageFont.FreeTypeFont]


@dataclass(frozen=True)
class Fonts:
    regular: Font
    big: Font


def _candidates(font_path: str) -> List[Path]:
    if font_path:
        return [Path(font_path), *FONT_CANDIDATES]
    return list(FONT_CANDIDATES)


def load_font(size: int, font_path: str = FONT_PATH) -> Font:
    for candidate in _candidates(font_path):
        if not candidate.exists():
            continue
        try:
            return ImageFont.truetype(str(candidate), size)
        except OSError as exc:
            logger.warning("Failed to load font %s: %s", candidate, exc)
    logger.debug("No TrueType font found, using Pillow's built-in font")
    return ImageFont.load_default(size)


def load_fonts(font_path: str = FONT_PATH) -> Fonts:
    return Fonts(regular=load_font(FONT_SIZE, font_path), big=load_font(FONT_SIZE_BIG, font_path))


__all__ = ["FONT_CANDIDATES", "Font", "Fonts", "load_font", "load_fonts"]
