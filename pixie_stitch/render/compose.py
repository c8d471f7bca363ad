"""Small helpers to draw text and glue images together on a white page."""

from __future__ import annotations

import math
from typing import Iterable, List, Literal, Sequence, Tuple

from PIL import Image, ImageDraw, ImageOps

from .fonts import Font

WHITE = (255, 255, 255)
BLACK = (0, 0, 0)

Align = Literal["start", "center"]


def line_height(font: Font) -> int:
    _, top, _, bottom = font.getbbox("Ag0")
    return int(bottom) + 4


def text_width(font: Font, text: str) -> int:
    return int(math.ceil(font.getlength(text)))


def render_text(lines: Sequence[str], font: Font) -> Image.Image:
    """Draw ``lines`` left-aligned, black on white; empty strings become blank lines."""
    lh = line_height(font)
    width = max((text_width(font, line) for line in lines), default=0)
    img = Image.new("RGB", (max(width, 1), max(lh * len(lines), 1)), WHITE)
    draw = ImageDraw.Draw(img)
    for idx, line in enumerate(lines):
        if line:
            draw.text((0, idx * lh), line, fill=BLACK, font=font)
    return img


def draw_text_centered(
    draw: ImageDraw.ImageDraw,
    center: Tuple[float, float],
    text: str,
    font: Font,
    fill: Tuple[int, int, int] = BLACK,
) -> None:
    left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
    x = center[0] - (left + right) / 2
    y = center[1] - (top + bottom) / 2
    draw.text((int(round(x)), int(round(y))), text, fill=fill, font=font)


def stack(
    images: Iterable[Image.Image],
    direction: Literal["vertical", "horizontal"] = "vertical",
    gap: int = 0,
    align: Align = "start",
) -> Image.Image:
    items: List[Image.Image] = list(images)
    if not items:
        return Image.new("RGB", (1, 1), WHITE)

    if direction == "vertical":
        width = max(img.width for img in items)
        height = sum(img.height for img in items) + gap * (len(items) - 1)
    else:
        width = sum(img.width for img in items) + gap * (len(items) - 1)
        height = max(img.height for img in items)

    result = Image.new("RGB", (width, height), WHITE)
    offset = 0
    for img in items:
        if direction == "vertical":
            x = (width - img.width) // 2 if align == "center" else 0
            result.paste(img, (x, offset))
            offset += img.height + gap
        else:
            y = (height - img.height) // 2 if align == "center" else 0
            result.paste(img, (offset, y))
            offset += img.width + gap
    return result


def pad(img: Image.Image, left: int, top: int, right: int, bottom: int) -> Image.Image:
    return ImageOps.expand(img, border=(left, top, right, bottom), fill=WHITE)


__all__ = [
    "BLACK",
    "WHITE",
    "draw_text_centered",
    "line_height",
    "pad",
    "render_text",
    "stack",
    "text_width",
]
