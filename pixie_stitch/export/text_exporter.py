from __future__ import annotations

from typing import List

from ..models.pattern import PatternSummary


def export_text(summary: PatternSummary) -> str:
    """Plain-text legend, readable without an image viewer."""
    grid = summary.canvasGrid
    lines: List[str] = [
        summary.title,
        "",
        f"Size:     {grid.width}x{grid.height}",
        f"Colors:   {summary.palette_size}",
        f"Stitches: {summary.total_stitches}",
        "",
    ]
    for row in summary.legend:
        label = f"  [{row.label}]" if row.label else ""
        lines.append(
            f"{row.index:>3}  {row.hex}  {row.symbol:<12}{label}  {row.count:>7} stitches  ({row.percent}%)"
        )
    if summary.segments:
        lines.append("")
        lines.append(f"Printed in {len(summary.segments)} parts:")
        for seg in summary.segments:
            lines.append(
                f"  Part {seg.part}: columns {seg.left}-{seg.left + seg.width - 1}, "
                f"rows {seg.top}-{seg.top + seg.height - 1}"
            )
    return "\n".join(lines) + "\n"
