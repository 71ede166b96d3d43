"""Service for materializing unique working files into the output directory."""

from __future__ import annotations

import filecmp
import logging
import shutil
from pathlib import Path
from typing import List, Set, Tuple

from ...scanner.errors import PlacementError
from ...scanner.models import DuplicateRecord, GroupDecision, GroupOutcome, PlacedFile

logger = logging.getLogger(__name__)


class OutputPlacementService:
    """Copy group representatives into ``out_dir`` under collision-free names."""

    def __init__(self, out_dir: Path, work_dir: Path, *, rename: bool = False) -> None:
        self.out_dir = Path(out_dir)
        self.work_dir = Path(work_dir)
        self.rename = rename
        self._claimed: Set[str] = set()
        self._prepared = False

    def prepare(self) -> None:
        """Create the output directory (and parents) once per run."""
        if self._prepared:
            return
        try:
            self.out_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise PlacementError(
                f"Cannot create output directory {self.out_dir}: {exc}", "OUT_DIR_FAILED"
            ) from exc
        self._prepared = True

    def destination_name(self, decision: GroupDecision) -> Tuple[str, bool]:
        """
        Pick the output basename for a group's representative.

        Returns the name and whether it differs from the requested one because
        that name is already taken in the output directory. A taken tagged name
        gets a counter after the fingerprint: ``{fingerprint}_{n}_{basename}``.
        """
        if decision.representative is None:
            raise ValueError("Only groups with a representative can be placed")
        source = decision.representative
        base_name = source.name
        tagged = f"{decision.fingerprint}_{base_name}"
        requested = tagged if self.rename else base_name
        if self._is_free(requested, source):
            return requested, False

        candidate = tagged
        counter = 0
        while candidate == requested or not self._is_free(candidate, source):
            counter += 1
            candidate = f"{decision.fingerprint}_{counter}_{base_name}"
        logger.warning(f"{requested} already exists in {self.out_dir}, renaming to {candidate}")
        return candidate, True

    def _is_free(self, name: str, source: Path) -> bool:
        if name in self._claimed:
            return False
        existing = self.out_dir / name
        return not existing.exists() or _same_content(existing, source)

    def place(self, decision: GroupDecision) -> Tuple[PlacedFile, List[DuplicateRecord]]:
        """Copy the representative and report the group's suppressed working files."""
        if decision.outcome is not GroupOutcome.UNIQUE:
            raise ValueError(f"Cannot place a group classified as {decision.outcome.value}")
        self.prepare()

        name, retagged = self.destination_name(decision)
        source = decision.representative
        destination = self.out_dir / name
        try:
            shutil.copy2(source, destination)
        except OSError as exc:
            raise PlacementError(f"Cannot copy {source} to {destination}: {exc}", "COPY_FAILED") from exc
        self._claimed.add(name)
        logger.debug(f"Copied {source} -> {destination}")

        duplicates = [
            DuplicateRecord(path=path.relative_to(self.work_dir).as_posix(), duplicate_of=name)
            for path in decision.duplicates
        ]
        if retagged:
            duplicates.append(
                DuplicateRecord(path=source.relative_to(self.work_dir).as_posix(), duplicate_of=name)
            )
        return PlacedFile(source=source, destination=destination, retagged=retagged), duplicates


def _same_content(existing: Path, candidate: Path) -> bool:
    # Output left by an earlier run with identical bytes is simply refreshed.
    try:
        return existing.is_file() and filecmp.cmp(existing, candidate, shallow=False)
    except OSError:
        return False
