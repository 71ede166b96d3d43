"""Service for classifying fingerprint groups into unique and duplicate working files."""

from __future__ import annotations

import filecmp
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Sequence

from ...scanner.errors import HashCollisionError, HashingError
from ...scanner.models import DuplicateRecord, FileRecord, GroupDecision, GroupOutcome

logger = logging.getLogger(__name__)


class DuplicateClassificationService:
    """
    Decide the fate of every working file once all fingerprints are known.

    A file is "working" when its absolute path lies under ``work_dir``;
    everything else under ``root`` is treated as pre-existing content.
    """

    def __init__(self, root: Path, work_dir: Path) -> None:
        self.root = Path(root)
        self.work_dir = Path(work_dir)

    def is_working(self, path: Path) -> bool:
        return path.is_relative_to(self.work_dir)

    def group_by_fingerprint(self, records: Iterable[FileRecord]) -> Dict[str, List[Path]]:
        """Partition records by fingerprint, each group sorted by full path."""
        groups: Dict[str, List[Path]] = {}
        for record in records:
            groups.setdefault(record.fingerprint, []).append(record.path)
        for paths in groups.values():
            paths.sort(key=str)
        return groups

    def classify_group(self, fingerprint: str, paths: Sequence[Path]) -> GroupDecision:
        ordered = tuple(sorted(paths, key=str))
        working = [path for path in ordered if self.is_working(path)]
        if not working:
            return GroupDecision(fingerprint=fingerprint, outcome=GroupOutcome.IGNORED, paths=ordered)

        existing = next((path for path in ordered if not self.is_working(path)), None)
        if existing is not None:
            return GroupDecision(
                fingerprint=fingerprint,
                outcome=GroupOutcome.EXTERNAL_DUPLICATE,
                paths=ordered,
                duplicates=tuple(working),
                existing=existing,
            )

        return GroupDecision(
            fingerprint=fingerprint,
            outcome=GroupOutcome.UNIQUE,
            paths=ordered,
            representative=working[0],
            duplicates=tuple(working[1:]),
        )

    def classify(self, records: Iterable[FileRecord], *, verify: bool = False) -> List[GroupDecision]:
        """
        Classify every fingerprint group.

        Args:
            records: The complete set of hashed files for the run
            verify: Compare group members byte-for-byte before trusting the digest

        Returns:
            Decisions ordered by representative (or first member) path
        """
        decisions: List[GroupDecision] = []
        for fingerprint, paths in self.group_by_fingerprint(records).items():
            decision = self.classify_group(fingerprint, paths)
            if verify and decision.outcome is not GroupOutcome.IGNORED:
                self.verify_group(decision.paths)
            decisions.append(decision)
        decisions.sort(key=lambda d: d.sort_key)
        return decisions

    def external_duplicates(self, decision: GroupDecision) -> List[DuplicateRecord]:
        if decision.outcome is not GroupOutcome.EXTERNAL_DUPLICATE or decision.existing is None:
            return []
        existing = self.relative_to_root(decision.existing)
        return [
            DuplicateRecord(path=self.relative_to_work_dir(path), duplicate_of=existing)
            for path in decision.duplicates
        ]

    def verify_group(self, paths: Sequence[Path]) -> None:
        """Raise HashCollisionError if any member differs from the first one."""
        if len(paths) < 2:
            return
        first = paths[0]
        for other in paths[1:]:
            try:
                same = filecmp.cmp(first, other, shallow=False)
            except OSError as exc:
                raise HashingError(
                    f"Cannot compare {first} with {other}: {exc}", "HASH_FAILED"
                ) from exc
            if not same:
                raise HashCollisionError(
                    f"Fingerprint collision: {first} and {other} differ", "HASH_COLLISION"
                )
        logger.debug(f"Verified {len(paths)} files byte-for-byte")

    def relative_to_work_dir(self, path: Path) -> str:
        return path.relative_to(self.work_dir).as_posix()

    def relative_to_root(self, path: Path) -> str:
        return path.relative_to(self.root).as_posix()
