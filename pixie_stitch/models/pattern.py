from typing import List, Optional, Tuple

from pydantic import BaseModel, Field


class CanvasGrid(BaseModel):
    width: int
    height: int


class LegendRow(BaseModel):
    index: int
    rgba: Tuple[int, int, int, int]
    hex: str
    symbol: str
    label: Optional[str] = None
    count: int
    percent: float


class SegmentRef(BaseModel):
    part: int
    column: int
    row: int
    left: int
    top: int
    width: int
    height: int


class PatternSummary(BaseModel):
    title: str
    source: str
    canvasGrid: CanvasGrid
    palette_size: int
    total_stitches: int
    transparent_cells: int
    legend: List[LegendRow]
    segments: List[SegmentRef] = Field(default_factory=list)
    sheets: List[str] = Field(default_factory=list)
