"""Export helpers for pattern files."""

from .csv_exporter import export_csv
from .json_exporter import export_json
from .png_exporter import export_png
from .text_exporter import export_text

__all__ = [
    "export_csv",
    "export_json",
    "export_png",
    "export_text",
]
