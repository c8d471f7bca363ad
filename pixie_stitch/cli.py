from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .core.errors import SymbolInventoryError
from .core.jobs import run_batch
from .core.pipeline import load_resources
from .settings import FONT_PATH, MAX_WORKERS, OUTPUT_DIR, SYMBOLS_DIR, TRANSPARENT_ALPHA_MAX

logger = logging.getLogger("pixie_stitch")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pixie-stitch",
        description="Turn pixel-art PNG/GIF images into cross-stitch patterns",
    )
    parser.add_argument("images", nargs="*", type=Path, help="PNG or GIF images to convert")
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path(OUTPUT_DIR) if OUTPUT_DIR else None,
        help="Where pattern folders are created (default: next to each image)",
    )
    parser.add_argument("--symbols-dir", type=Path, default=Path(SYMBOLS_DIR))
    parser.add_argument("--font", default=FONT_PATH, help="TrueType font for labels and legend")
    parser.add_argument(
        "--alpha-threshold",
        type=int,
        default=TRANSPARENT_ALPHA_MAX,
        help="Pixels with alpha at or below this value are left unstitched (default: %(default)s)",
    )
    parser.add_argument("--workers", type=int, default=MAX_WORKERS)
    parser.add_argument(
        "--overwrite",
        action="store_true",
        help="Replace an existing pattern folder instead of failing",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.images:
        parser.error("Please drag and drop one (or more) image(s) onto the executable")
    if not 0 <= args.alpha_threshold <= 254:
        parser.error("--alpha-threshold must be between 0 and 254")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        resources = load_resources(args.symbols_dir, args.font)
    except SymbolInventoryError as exc:
        logger.error("%s", exc)
        return 1

    records = run_batch(
        args.images,
        resources,
        output_dir=args.output_dir,
        overwrite=args.overwrite,
        transparent_alpha_max=args.alpha_threshold,
        max_workers=args.workers,
    )

    failed = [r for r in records if r.status == "failed"]
    for record in records:
        if record.status == "failed":
            print(f"FAILED {record.job_id}: {record.error_type}: {record.error}", file=sys.stderr)
        else:
            print(f"OK     {record.job_id} -> {record.output_dir}")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
