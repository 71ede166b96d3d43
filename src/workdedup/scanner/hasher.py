from __future__ import annotations

import hashlib
from pathlib import Path
from typing import BinaryIO

from .errors import ConfigurationError, HashingError

SUPPORTED_ALGORITHMS = ("md5", "sha1", "sha256")
DEFAULT_ALGORITHM = "md5"
_HASH_CHUNK_SIZE = 4096  # 4 KiB chunks for streaming hash calculation.


def new_digest(algorithm: str = DEFAULT_ALGORITHM):
    if algorithm not in SUPPORTED_ALGORITHMS:
        raise ConfigurationError(
            f"Unsupported hash algorithm: {algorithm!r} (choose from {', '.join(SUPPORTED_ALGORITHMS)})",
            "UNSUPPORTED_ALGORITHM",
        )
    return hashlib.new(algorithm)


def _calculate_stream_hash(
    file_obj: BinaryIO,
    algorithm: str = DEFAULT_ALGORITHM,
    chunk_size: int = _HASH_CHUNK_SIZE,
) -> str:
    """Fold a binary stream into a digest one chunk at a time."""
    hasher = new_digest(algorithm)
    while chunk := file_obj.read(chunk_size):
        hasher.update(chunk)
    return hasher.hexdigest()


def hash_file(
    path: Path,
    *,
    algorithm: str = DEFAULT_ALGORITHM,
    chunk_size: int = _HASH_CHUNK_SIZE,
) -> str:
    """
    Return the lowercase hex fingerprint of the file at ``path``.

    The file is streamed in ``chunk_size`` pieces so large files never sit in
    memory. Open and read failures raise :class:`HashingError`; a partial
    digest is never returned.
    """
    if chunk_size <= 0:
        raise ConfigurationError("Chunk size must be positive", "INVALID_SETTING")
    try:
        with open(path, "rb") as file_obj:
            return _calculate_stream_hash(file_obj, algorithm, chunk_size)
    except OSError as exc:
        raise HashingError(f"Cannot hash {path}: {exc}", "HASH_FAILED") from exc
