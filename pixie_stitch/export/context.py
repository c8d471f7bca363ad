from __future__ import annotations

from typing import Iterable, List, Sequence

from ..core.extractor import Extraction
from ..core.legend import LegendEntry
from ..models.pattern import CanvasGrid, LegendRow, PatternSummary, SegmentRef
from ..render.segments import Segment


def rgb_to_hex(rgb) -> str:
    if not rgb:
        return "#FFFFFF"
    r, g, b = (int(v) for v in rgb[:3])
    return f"#{r:02X}{g:02X}{b:02X}"


def legend_rows(
    legend: Sequence[LegendEntry],
    labels: Sequence[str] | None = None,
) -> List[LegendRow]:
    total = sum(entry.count for entry in legend) or 1
    rows: List[LegendRow] = []
    for entry in legend:
        rows.append(
            LegendRow(
                index=entry.index + 1,
                rgba=tuple(int(v) for v in entry.color),
                hex=rgb_to_hex(entry.rgb),
                symbol=entry.symbol.name,
                label=labels[entry.index] if labels and entry.index < len(labels) else None,
                count=entry.count,
                percent=round(entry.count / total * 100, 2),
            )
        )
    return rows


def build_summary(
    source: str,
    extraction: Extraction,
    legend: Sequence[LegendEntry],
    *,
    segments: Iterable[Segment] = (),
    sheets: Iterable[str] = (),
    labels: Sequence[str] | None = None,
) -> PatternSummary:
    grid = extraction.grid
    segment_list: List[Segment] = list(segments)
    return PatternSummary(
        title=source,
        source=source,
        canvasGrid=CanvasGrid(width=grid.width, height=grid.height),
        palette_size=len(extraction.palette),
        total_stitches=extraction.total_stitches,
        transparent_cells=extraction.transparent_count,
        legend=legend_rows(legend, labels),
        segments=[
            SegmentRef(
                part=s.part,
                column=s.column,
                row=s.row,
                left=s.left,
                top=s.top,
                width=s.grid.width,
                height=s.grid.height,
            )
            for s in segment_list
        ]
        if len(segment_list) > 1
        else [],
        sheets=sorted(sheets),
    )


__all__ = ["build_summary", "legend_rows", "rgb_to_hex"]
