from __future__ import annotations

import itertools
import logging
import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable, Iterable, List

from .hasher import DEFAULT_ALGORITHM, hash_file, new_digest
from .models import FileRecord

PROGRESS_INTERVAL = 100

logger = logging.getLogger(__name__)


def default_worker_count() -> int:
    return os.cpu_count() or 1


def hash_files(
    paths: Iterable[Path],
    *,
    max_workers: int | None = None,
    algorithm: str = DEFAULT_ALGORITHM,
    progress_interval: int = PROGRESS_INTERVAL,
    progress_callback: Callable[[int], None] | None = None,
) -> List[FileRecord]:
    """
    Hash every path on a thread pool and return the resulting records.

    ``paths`` is consumed on the calling thread only, so a lazy walker can feed
    the pool directly. Records come back in completion order. The first
    failure, whether raised by ``paths`` itself or by a worker, cancels the
    remaining work and is re-raised unchanged.
    """
    # Fail on a bad algorithm before any work is queued.
    new_digest(algorithm)
    workers = max_workers or default_worker_count()
    interval = max(progress_interval, 1)
    completed = itertools.count(1)
    aborted = threading.Event()

    def _hash_one(path: Path) -> FileRecord | None:
        if aborted.is_set():
            return None
        try:
            fingerprint = hash_file(path, algorithm=algorithm)
        except BaseException:
            aborted.set()
            raise
        done = next(completed)
        if done % interval == 0:
            logger.info(f"Hashed {done} files")
            if progress_callback:
                try:
                    progress_callback(done)
                except Exception:
                    pass
        return FileRecord(path=path, fingerprint=fingerprint)

    futures: List[Future] = []
    records: List[FileRecord] = []
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="workdedup-hash") as executor:
        try:
            for path in paths:
                if aborted.is_set():
                    break
                futures.append(executor.submit(_hash_one, path))
            for future in as_completed(futures):
                record = future.result()
                if record is not None:
                    records.append(record)
        except BaseException:
            aborted.set()
            for future in futures:
                future.cancel()
            raise

    logger.debug(f"Hashing finished: {len(records)} files on {workers} workers")
    return records
