import csv
import io

from ..models.pattern import PatternSummary


def export_csv(summary: PatternSummary) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(["index", "symbol", "label", "hex", "r", "g", "b", "a", "count", "percent"])
    for row in summary.legend:
        writer.writerow([
            row.index,
            row.symbol,
            row.label or "",
            row.hex,
            *row.rgba,
            row.count,
            row.percent,
        ])
    return buf.getvalue()
