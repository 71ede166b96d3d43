from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Mapping

from dotenv import find_dotenv, load_dotenv

from ..scanner.coordinator import PROGRESS_INTERVAL
from ..scanner.errors import ConfigurationError
from ..scanner.hasher import DEFAULT_ALGORITHM, SUPPORTED_ALGORITHMS
from ..scanner.models import RunSettings

MAX_WORKERS_ENV = "WORKDEDUP_MAX_WORKERS"
PROGRESS_INTERVAL_ENV = "WORKDEDUP_PROGRESS_INTERVAL"
ALGORITHM_ENV = "WORKDEDUP_ALGORITHM"
LOG_LEVEL_ENV = "WORKDEDUP_LOG_LEVEL"

OUT_DIR_SUFFIX = ".out"


def load_environment() -> Mapping[str, str]:
    """Merge a local .env file (if any) into the process environment."""
    load_dotenv(find_dotenv(usecwd=True))
    return os.environ


def build_settings(
    root: Path,
    work_dir: Path,
    out_dir: Path | None = None,
    *,
    rename: bool = False,
    max_workers: int | None = None,
    algorithm: str | None = None,
    verify: bool = False,
    env: Mapping[str, str] | None = None,
) -> RunSettings:
    """
    Validate user input and turn it into RunSettings.

    ``work_dir`` is resolved relative to ``root`` (an absolute value replaces
    it). When ``out_dir`` is omitted the working directory with its suffix
    swapped for ``.out`` is used. Every check runs before any file is read.
    """
    env = env if env is not None else {}

    root = Path(root).expanduser()
    if not root.exists():
        raise ConfigurationError(f"root {root} doesn't exist", "ROOT_MISSING")
    if not root.is_dir():
        raise ConfigurationError(f"root {root} is not a directory", "ROOT_MISSING")
    root = root.resolve()

    work_dir = root / Path(work_dir).expanduser()
    if not work_dir.exists():
        raise ConfigurationError(f"work-dir {work_dir} doesn't exist", "WORK_DIR_MISSING")
    work_dir = work_dir.resolve()
    if not work_dir.is_relative_to(root):
        raise ConfigurationError(
            f"work-dir {work_dir} is not under root {root}", "WORK_DIR_OUTSIDE_ROOT"
        )
    if not work_dir.is_dir():
        raise ConfigurationError(f"work-dir {work_dir} is not a directory", "WORK_DIR_MISSING")

    out_dir = _resolve_out_dir(work_dir, out_dir)
    if root.is_relative_to(out_dir) or work_dir.is_relative_to(out_dir):
        raise ConfigurationError(
            f"out-dir {out_dir} would overlap the scanned tree", "OUT_DIR_CONFLICT"
        )
    if out_dir.exists() and not out_dir.is_dir():
        raise ConfigurationError(f"out-dir {out_dir} is not a directory", "OUT_DIR_CONFLICT")

    algorithm = (algorithm or env.get(ALGORITHM_ENV) or DEFAULT_ALGORITHM).lower()
    if algorithm not in SUPPORTED_ALGORITHMS:
        raise ConfigurationError(
            f"Unsupported hash algorithm: {algorithm!r}", "UNSUPPORTED_ALGORITHM"
        )

    if max_workers is None:
        max_workers = _int_from_env(env, MAX_WORKERS_ENV)
    if max_workers is not None and max_workers <= 0:
        raise ConfigurationError("Worker count must be positive", "INVALID_SETTING")

    progress_interval = _int_from_env(env, PROGRESS_INTERVAL_ENV)
    if progress_interval is None:
        progress_interval = PROGRESS_INTERVAL
    elif progress_interval <= 0:
        raise ConfigurationError("Progress interval must be positive", "INVALID_SETTING")

    return RunSettings(
        root=root,
        work_dir=work_dir,
        out_dir=out_dir,
        rename=rename,
        max_workers=max_workers,
        progress_interval=progress_interval,
        algorithm=algorithm,
        verify=verify,
    )


def resolve_log_level(*, quiet: bool = False, verbose: bool = False, env: Mapping[str, str] | None = None) -> int:
    if quiet:
        return logging.WARNING
    if verbose:
        return logging.DEBUG
    name = (env or {}).get(LOG_LEVEL_ENV, "").upper()
    level = logging.getLevelName(name) if name else logging.INFO
    return level if isinstance(level, int) else logging.INFO


def _resolve_out_dir(work_dir: Path, out_dir: Path | None) -> Path:
    if out_dir is None:
        if work_dir.parent == work_dir:
            raise ConfigurationError(
                "out-dir must be given when the working directory is the filesystem root",
                "OUT_DIR_CONFLICT",
            )
        return work_dir.with_suffix(OUT_DIR_SUFFIX)
    return Path(out_dir).expanduser().resolve()


def _int_from_env(env: Mapping[str, str], key: str) -> int | None:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{key} must be an integer, got {raw!r}", "INVALID_SETTING") from exc
