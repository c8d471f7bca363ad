from __future__ import annotations

from dataclasses import dataclass
from typing import List

from ..core.extractor import PatternGrid
from ..settings import SEGMENT_HEIGHT, SEGMENT_WIDTH


@dataclass(frozen=True)
class Segment:
    part: int  # 1-based, row-major
    column: int
    row: int
    left: int
    top: int
    grid: PatternGrid


def split_segments(
    grid: PatternGrid,
    width: int = SEGMENT_WIDTH,
    height: int = SEGMENT_HEIGHT,
) -> List[Segment]:
    """Cut the grid into printable parts of at most ``width`` x ``height`` cells."""
    columns = max(1, -(-grid.width // width))
    rows = max(1, -(-grid.height // height))
    segments: List[Segment] = []
    for row in range(rows):
        for column in range(columns):
            left = column * width
            top = row * height
            segments.append(
                Segment(
                    part=len(segments) + 1,
                    column=column,
                    row=row,
                    left=left,
                    top=top,
                    grid=grid.crop(left, top, width, height),
                )
            )
    return segments


__all__ = ["Segment", "split_segments"]
