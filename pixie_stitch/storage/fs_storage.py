from __future__ import annotations

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Mapping, Union

from ..core.errors import OutputWriteError

logger = logging.getLogger(__name__)


class FSStorage:
    """
    Writes one pattern directory per image under ``root``.

    Files are written to a hidden staging directory next to the target and
    renamed into place once every file is on disk, so a failed run never
    leaves something that looks like a finished pattern.
    """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    def target_for(self, name: str) -> Path:
        return self.root / name

    def check_target(self, name: str, overwrite: bool = False) -> Path:
        target = self.target_for(name)
        if target.exists():
            if not target.is_dir():
                raise OutputWriteError(f"Cannot create '{target}': a file with that name exists")
            if not overwrite and any(target.iterdir()):
                raise OutputWriteError(
                    f"Output directory '{target}' already contains files; "
                    "remove it or pass --overwrite"
                )
        return target

    def save_dir(self, name: str, files: Mapping[str, bytes], overwrite: bool = False) -> Path:
        target = self.check_target(name, overwrite=overwrite)
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            staging = Path(tempfile.mkdtemp(prefix=f".{name}.", suffix=".partial", dir=self.root))
        except OSError as exc:
            raise OutputWriteError(f"Cannot create output directory in '{self.root}': {exc}") from exc

        try:
            os.chmod(staging, 0o755)
            for rel_path, data in files.items():
                path = staging / rel_path
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_bytes(data)
        except OSError as exc:
            shutil.rmtree(staging, ignore_errors=True)
            raise OutputWriteError(f"Cannot write pattern files to '{target}': {exc}") from exc

        try:
            if overwrite:
                self._swap_into_place(staging, target)
            else:
                # rename onto an empty directory succeeds; onto a non-empty one it fails
                staging.rename(target)
        except OSError as exc:
            shutil.rmtree(staging, ignore_errors=True)
            if not overwrite and target.exists():
                raise OutputWriteError(
                    f"Output directory '{target}' was filled by another conversion; "
                    "remove it or pass --overwrite"
                ) from exc
            raise OutputWriteError(f"Cannot write pattern files to '{target}': {exc}") from exc

        logger.info("Wrote %d files to %s", len(files), target)
        return target

    def _swap_into_place(self, staging: Path, target: Path) -> None:
        if not target.exists():
            staging.rename(target)
            return
        # Move the old directory aside first; rename cannot replace a non-empty directory.
        previous = Path(tempfile.mkdtemp(prefix=f".{target.name}.", suffix=".old", dir=self.root))
        previous.rmdir()
        target.rename(previous)
        try:
            staging.rename(target)
        except OSError:
            previous.rename(target)
            raise
        shutil.rmtree(previous, ignore_errors=True)
