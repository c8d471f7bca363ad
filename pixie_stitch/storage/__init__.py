from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from ..settings import OUTPUT_DIR
from .fs_storage import FSStorage


def get_storage(image_path: Union[str, Path], output_dir: Optional[Union[str, Path]] = None) -> FSStorage:
    """Storage rooted at ``output_dir``, the configured output dir, or the image's own folder."""
    root = output_dir or OUTPUT_DIR
    if root:
        return FSStorage(root)
    return FSStorage(Path(image_path).resolve().parent)


__all__ = ["FSStorage", "get_storage"]
