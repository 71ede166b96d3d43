from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, Iterator, List

from .errors import TraversalError

logger = logging.getLogger(__name__)


def walk_files(root: Path, *, exclude: Iterable[Path] = ()) -> Iterator[Path]:
    """Yield the path of every non-directory entry under ``root``.

    Descends with an explicit stack of open ``os.scandir`` iterators so deep
    trees never hit the recursion limit. Any directory that cannot be listed
    aborts the walk with :class:`TraversalError`.
    """
    root = Path(root)
    excluded = {Path(path) for path in exclude}
    stack: List[os.ScandirIterator] = [_open_dir(root)]
    try:
        while stack:
            entry = _next_entry(stack[-1], root)
            if entry is None:
                stack.pop().close()
                continue
            path = Path(entry.path)
            if _is_real_dir(entry):
                if path in excluded:
                    logger.debug(f"Skipping excluded directory: {path}")
                    continue
                stack.append(_open_dir(path))
            elif _is_linked_dir(entry):
                logger.debug(f"Not following directory symlink: {path}")
            else:
                yield path
    finally:
        for iterator in stack:
            iterator.close()


def _open_dir(path: Path) -> os.ScandirIterator:
    try:
        return os.scandir(path)
    except OSError as exc:
        raise TraversalError(f"Cannot list directory {path}: {exc}", "WALK_FAILED") from exc


def _next_entry(iterator: os.ScandirIterator, root: Path) -> os.DirEntry | None:
    try:
        return next(iterator, None)
    except OSError as exc:
        raise TraversalError(f"Directory listing failed under {root}: {exc}", "WALK_FAILED") from exc


def _is_real_dir(entry: os.DirEntry) -> bool:
    try:
        return entry.is_dir(follow_symlinks=False)
    except OSError as exc:
        raise TraversalError(f"Cannot stat {entry.path}: {exc}", "WALK_FAILED") from exc


def _is_linked_dir(entry: os.DirEntry) -> bool:
    try:
        return entry.is_symlink() and entry.is_dir()
    except OSError:
        # Dangling links are left for the hasher to report.
        return False
