import os
from pathlib import Path

RESOURCES_DIR = Path(__file__).resolve().parent / "resources"

SYMBOLS_DIR = os.getenv("PIXIE_STITCH_SYMBOLS_DIR", str(RESOURCES_DIR / "symbols"))
OUTPUT_DIR = os.getenv("PIXIE_STITCH_OUTPUT_DIR", "")  # empty: next to the input image
FONT_PATH = os.getenv("PIXIE_STITCH_FONT_PATH", "")
TRANSPARENT_ALPHA_MAX = int(os.getenv("PIXIE_STITCH_TRANSPARENT_ALPHA_MAX", "0"))
MAX_WORKERS = int(os.getenv("PIXIE_STITCH_MAX_WORKERS", "4"))

# Layout constants. Changing any of these changes the rendered bytes.
TILE_SIZE = 16
SEGMENT_WIDTH = 60
SEGMENT_HEIGHT = 80
LEGEND_BLOCK_ENTRY_COUNT = 5
LEGEND_BLOCK_COLUMNS = 4
GRID_MAJOR_EVERY = 10
COLOR_GRID_THIN = (128, 128, 128)
COLOR_GRID_THICK = (64, 64, 64)
FONT_SIZE = 12
FONT_SIZE_BIG = 24
