from __future__ import annotations

import io
import struct
import zlib
from pathlib import Path
from typing import Optional, Sequence, Tuple

from PIL import Image

RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)
GREEN = (0, 160, 0, 255)
WHITE = (255, 255, 255, 255)
CLEAR = (0, 0, 0, 0)

Pixel = Tuple[int, int, int, int]


def make_image(rows: Sequence[Sequence[Pixel]]) -> Image.Image:
    height = len(rows)
    width = len(rows[0]) if rows else 0
    img = Image.new("RGBA", (width, height), CLEAR)
    for y, row in enumerate(rows):
        for x, pixel in enumerate(row):
            img.putpixel((x, y), tuple(pixel))
    return img


def distinct_colors(count: int) -> list[Pixel]:
    return [(10 * i % 256, (37 * i) % 256, 200, 255) for i in range(count)]


def strip_image(count: int) -> Image.Image:
    """One row of ``count`` distinct opaque colors."""
    return make_image([distinct_colors(count)])


def checker_image(width: int, height: int, colors: Sequence[Pixel] = (RED, BLUE)) -> Image.Image:
    rows = [[colors[(x + y) % len(colors)] for x in range(width)] for y in range(height)]
    return make_image(rows)


def save_png(img: Image.Image, directory: Path, name: str = "sprite.png") -> Path:
    path = directory / name
    img.save(path, format="PNG")
    return path


def to_bytes(img: Image.Image, fmt: str = "PNG", **params) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format=fmt, **params)
    return buf.getvalue()


def make_gif_with_transparency(directory: Path, name: str = "sprite.gif") -> Path:
    """2x1 GIF: a red pixel and a pixel using the transparent palette index."""
    img = Image.new("P", (2, 1), 0)
    img.putpalette([255, 0, 0, 0, 0, 255] + [0, 0, 0] * 254)
    img.putpixel((0, 0), 0)
    img.putpixel((1, 0), 1)
    path = directory / name
    img.save(path, format="GIF", transparency=1)
    return path


def cell_pixel(
    img: Image.Image,
    x: int,
    y: int,
    dx: int,
    dy: int,
    tile: int = 16,
    offset: Optional[Tuple[int, int]] = None,
) -> Tuple[int, ...]:
    ox, oy = offset or (0, 0)
    return img.getpixel((ox + x * tile + dx, oy + y * tile + dy))


def _png_chunk(tag: bytes, data: bytes) -> bytes:
    return struct.pack(">I", len(data)) + tag + data + struct.pack(">I", zlib.crc32(tag + data))


def header_only_png(directory: Path, width: int, height: int, name: str = "huge.png") -> Path:
    """A PNG whose header claims ``width`` x ``height`` but carries no real pixel data."""
    ihdr = struct.pack(">IIBBBBB", width, height, 8, 6, 0, 0, 0)
    data = (
        b"\x89PNG\r\n\x1a\n"
        + _png_chunk(b"IHDR", ihdr)
        + _png_chunk(b"IDAT", zlib.compress(b""))
        + _png_chunk(b"IEND", b"")
    )
    path = directory / name
    path.write_bytes(data)
    return path
