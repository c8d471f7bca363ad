from __future__ import annotations

import copy
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from threading import Lock
from typing import Dict, Iterable, List, Optional, Union

from ..settings import MAX_WORKERS, TRANSPARENT_ALPHA_MAX
from ..storage import get_storage
from .errors import OutputWriteError, PixieStitchError
from .pipeline import Resources, convert_image
from .types import Stage

logger = logging.getLogger(__name__)

STAGE_ORDER: tuple[Stage, ...] = ("pending", "loaded", "extracted", "allocated", "rendered", "written")


@dataclass
class JobRecord:
    job_id: str
    status: str = "pending"  # pending | processing | done | failed
    stage: Stage = "pending"
    error: Optional[str] = None
    error_type: Optional[str] = None
    output_dir: Optional[str] = None
    created_at: float = field(default_factory=lambda: time.time())
    updated_at: float = field(default_factory=lambda: time.time())


class JobStore:
    """Thread-safe record of where each image of a batch got to."""

    def __init__(self) -> None:
        self._jobs: Dict[str, JobRecord] = {}
        self._lock = Lock()

    def create(self, job_id: str) -> JobRecord:
        record = JobRecord(job_id=job_id)
        with self._lock:
            self._jobs[job_id] = record
        return copy.deepcopy(record)

    def advance(self, job_id: str, stage: Stage) -> JobRecord:
        """Move a job forward; stages can only be entered in pipeline order."""
        with self._lock:
            record = self._jobs[job_id]
            if record.status in ("done", "failed"):
                raise ValueError(f"Job {job_id} already finished as {record.status}")
            current = STAGE_ORDER.index(record.stage)
            if stage not in STAGE_ORDER or STAGE_ORDER.index(stage) != current + 1:
                raise ValueError(f"Job {job_id} cannot go from {record.stage!r} to {stage!r}")
            record.stage = stage
            record.status = "done" if stage == "written" else "processing"
            record.updated_at = time.time()
            return copy.deepcopy(record)

    def fail(self, job_id: str, exc: BaseException) -> JobRecord:
        with self._lock:
            record = self._jobs[job_id]
            record.status = "failed"
            record.error = str(exc)
            record.error_type = type(exc).__name__
            record.updated_at = time.time()
            return copy.deepcopy(record)

    def set_output(self, job_id: str, output_dir: Union[str, Path]) -> JobRecord:
        with self._lock:
            record = self._jobs[job_id]
            record.output_dir = str(output_dir)
            record.updated_at = time.time()
            return copy.deepcopy(record)

    def get(self, job_id: str) -> Optional[JobRecord]:
        with self._lock:
            record = self._jobs.get(job_id)
            return copy.deepcopy(record) if record else None

    def list(self, *, status: Optional[str] = None) -> List[JobRecord]:
        with self._lock:
            records = list(self._jobs.values())
        if status:
            records = [r for r in records if r.status == status]
        records.sort(key=lambda r: r.created_at)
        return [copy.deepcopy(r) for r in records]


def _claim_targets(
    paths: List[str],
    output_dir: Optional[Union[str, Path]],
) -> Dict[str, str]:
    """Return ``{path: earlier path}`` for every path whose target directory is already taken."""
    owners: Dict[Path, str] = {}
    clashes: Dict[str, str] = {}
    for path in paths:
        target = get_storage(path, output_dir).target_for(Path(path).stem).resolve()
        if target in owners:
            clashes[path] = owners[target]
        else:
            owners[target] = path
    return clashes


def run_batch(
    image_paths: Iterable[Union[str, Path]],
    resources: Resources,
    *,
    output_dir: Optional[Union[str, Path]] = None,
    overwrite: bool = False,
    transparent_alpha_max: int = TRANSPARENT_ALPHA_MAX,
    max_workers: int = MAX_WORKERS,
    store: Optional[JobStore] = None,
) -> List[JobRecord]:
    """
    Convert several images independently; a failing image never stops the others.

    Images whose pattern directory would be the same as an earlier image's
    (``a/cat.png`` and ``b/cat.png`` into one output root, or ``cat.png`` next
    to ``cat.gif``) fail with ``OutputWriteError`` instead of replacing it.

    Returns one record per distinct input path, in input order.
    """
    store = store or JobStore()
    paths: List[str] = list(dict.fromkeys(str(p) for p in image_paths))
    for path in paths:
        store.create(path)

    clashes = _claim_targets(paths, output_dir)
    for path, owner in clashes.items():
        exc = OutputWriteError(
            f"'{path}' and '{owner}' would both write the pattern directory '{Path(path).stem}'"
        )
        logger.error("%s: %s", path, exc)
        store.fail(path, exc)

    def _run(path: str) -> None:
        try:
            target = convert_image(
                path,
                resources,
                output_dir=output_dir,
                overwrite=overwrite,
                transparent_alpha_max=transparent_alpha_max,
                on_stage=lambda stage: store.advance(path, stage),
            )
        except PixieStitchError as exc:
            logger.error("%s: %s", path, exc)
            store.fail(path, exc)
            return
        except Exception as exc:
            logger.exception("%s: unexpected error", path)
            store.fail(path, exc)
            return
        store.set_output(path, target)

    pending = [path for path in paths if path not in clashes]
    if pending:
        workers = max(1, min(max_workers, len(pending)))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(_run, path) for path in pending]
            for future in futures:
                future.result()

    return [store.get(path) for path in paths]


__all__ = ["JobRecord", "JobStore", "STAGE_ORDER", "run_batch"]
