from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True, slots=True)
class FileRecord:
    path: Path
    fingerprint: str


@dataclass(frozen=True, order=True, slots=True)
class DuplicateRecord:
    """A suppressed working file and the identifier of the file it duplicates."""

    path: str
    duplicate_of: str

    def format(self) -> str:
        return f"{self.path} = {self.duplicate_of}"


class GroupOutcome(str, Enum):
    IGNORED = "ignored"
    EXTERNAL_DUPLICATE = "external_duplicate"
    UNIQUE = "unique"


@dataclass(slots=True)
class GroupDecision:
    fingerprint: str
    outcome: GroupOutcome
    paths: Tuple[Path, ...] = ()
    representative: Optional[Path] = None
    duplicates: Tuple[Path, ...] = ()
    existing: Optional[Path] = None

    @property
    def sort_key(self) -> str:
        if self.representative is not None:
            return str(self.representative)
        return str(self.paths[0]) if self.paths else ""


@dataclass(slots=True)
class PlacedFile:
    source: Path
    destination: Path
    retagged: bool = False

    @property
    def name(self) -> str:
        return self.destination.name


@dataclass(slots=True)
class RunSettings:
    """
    Validated inputs for a single deduplication run.

    ``root`` and ``work_dir`` are absolute, ``work_dir`` lies under ``root``
    and ``out_dir`` never equals either of them.
    """

    root: Path
    work_dir: Path
    out_dir: Path
    rename: bool = False
    max_workers: int | None = None
    progress_interval: int = 100
    algorithm: str = "md5"
    verify: bool = False


@dataclass(slots=True)
class RunResult:
    files_hashed: int = 0
    groups: int = 0
    decisions: List[GroupDecision] = field(default_factory=list)
    placed: List[PlacedFile] = field(default_factory=list)
    duplicates: List[DuplicateRecord] = field(default_factory=list)
    summary: Dict[str, int] = field(default_factory=dict)

    def report_lines(self) -> List[str]:
        return [record.format() for record in self.duplicates]
