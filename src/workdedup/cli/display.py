from __future__ import annotations

from typing import Any, Dict, Iterable, List

from rich.panel import Panel
from rich.table import Table

from ..scanner.models import DuplicateRecord, RunResult, RunSettings


def render_report(records: Iterable[DuplicateRecord]) -> List[str]:
    """Render the duplicate report, one ``path = identifier`` line per record."""
    return [record.format() for record in sorted(records)]


def build_json_payload(settings: RunSettings, result: RunResult) -> Dict[str, Any]:
    return {
        "root": str(settings.root),
        "work_dir": str(settings.work_dir),
        "out_dir": str(settings.out_dir),
        "algorithm": settings.algorithm,
        "summary": dict(result.summary),
        "copied": [
            {
                "source": placed.source.relative_to(settings.work_dir).as_posix(),
                "name": placed.name,
                "renamed": placed.retagged,
            }
            for placed in result.placed
        ],
        "duplicates": [
            {"path": record.path, "duplicate_of": record.duplicate_of}
            for record in sorted(result.duplicates)
        ],
    }


def render_summary_panel(settings: RunSettings, result: RunResult) -> Panel:
    """Build the completion banner shown on the diagnostic console."""
    summary = result.summary
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold")
    table.add_column()
    # Summary keys are filled in by DedupService; fall back to the raw lists.
    rows = [
        ("Root", str(settings.root)),
        ("Working directory", str(settings.work_dir)),
        ("Output directory", str(settings.out_dir)),
        ("Files hashed", str(summary.get("files_hashed", result.files_hashed))),
        ("Fingerprint groups", str(summary.get("fingerprint_groups", result.groups))),
        ("Files copied", str(summary.get("files_copied", len(result.placed)))),
        ("Renamed on collision", str(summary.get("files_renamed", 0))),
        ("Duplicates", str(summary.get("duplicates", len(result.duplicates)))),
    ]
    for label, value in rows:
        table.add_row(label, value)
    return Panel(table, title="[bold cyan]Deduplication complete[/bold cyan]", border_style="cyan", expand=False)
