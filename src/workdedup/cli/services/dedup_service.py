"""Service that runs a full walk -> hash -> classify -> place pass."""

from __future__ import annotations

import logging
from typing import Callable, List

from ...scanner.coordinator import hash_files
from ...scanner.models import DuplicateRecord, GroupOutcome, RunResult, RunSettings
from ...scanner.walker import walk_files
from .duplicate_classification_service import DuplicateClassificationService
from .output_placement_service import OutputPlacementService

logger = logging.getLogger(__name__)


class DedupService:
    """Service for separating unique working files from their duplicates."""

    def __init__(self, settings: RunSettings) -> None:
        self.settings = settings
        self.classifier = DuplicateClassificationService(settings.root, settings.work_dir)
        self.placer = OutputPlacementService(
            settings.out_dir, settings.work_dir, rename=settings.rename
        )

    def run(self, *, progress_callback: Callable[[int], None] | None = None) -> RunResult:
        """
        Execute one deduplication pass.

        Hashing must finish for the whole tree before any file is classified,
        since a working file's fate depends on every file sharing its
        fingerprint. Any error aborts the run; files already copied stay put.
        """
        settings = self.settings
        logger.info(f"Scanning {settings.root} (working directory: {settings.work_dir})")

        records = hash_files(
            walk_files(settings.root, exclude=[settings.out_dir]),
            max_workers=settings.max_workers,
            algorithm=settings.algorithm,
            progress_interval=settings.progress_interval,
            progress_callback=progress_callback,
        )
        logger.info(f"Hashed {len(records)} files")

        decisions = self.classifier.classify(records, verify=settings.verify)
        result = RunResult(files_hashed=len(records), groups=len(decisions), decisions=decisions)

        duplicates: List[DuplicateRecord] = []
        self.placer.prepare()
        for decision in decisions:
            if decision.outcome is GroupOutcome.EXTERNAL_DUPLICATE:
                duplicates.extend(self.classifier.external_duplicates(decision))
            elif decision.outcome is GroupOutcome.UNIQUE:
                placed, group_duplicates = self.placer.place(decision)
                result.placed.append(placed)
                duplicates.extend(group_duplicates)

        duplicates.sort()
        result.duplicates = duplicates
        result.summary = _summarize(result)
        logger.info(
            f"Copied {len(result.placed)} unique files, found {len(duplicates)} duplicates"
        )
        return result


def _summarize(result: RunResult) -> dict[str, int]:
    outcomes = {outcome: 0 for outcome in GroupOutcome}
    for decision in result.decisions:
        outcomes[decision.outcome] += 1
    return {
        "files_hashed": result.files_hashed,
        "fingerprint_groups": result.groups,
        "groups_ignored": outcomes[GroupOutcome.IGNORED],
        "groups_external": outcomes[GroupOutcome.EXTERNAL_DUPLICATE],
        "groups_unique": outcomes[GroupOutcome.UNIQUE],
        "files_copied": len(result.placed),
        "files_renamed": sum(1 for placed in result.placed if placed.retagged),
        "duplicates": len(result.duplicates),
    }
