from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from .config import build_settings, load_environment, resolve_log_level
from .display import build_json_payload, render_report, render_summary_panel
from .services.dedup_service import DedupService
from ..scanner.errors import DedupError
from ..scanner.hasher import SUPPORTED_ALGORITHMS

PACKAGE_LOGGER = "workdedup"

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="workdedup",
        description=(
            "Copy the files of a working directory that have no byte-identical "
            "copy elsewhere under root into an output directory."
        ),
    )
    parser.add_argument("--root", type=Path, required=True, help="Top-level directory to scan.")
    parser.add_argument(
        "--work-dir",
        type=Path,
        required=True,
        help="Working directory, relative to root, whose files are deduplicated.",
    )
    parser.add_argument(
        "--out-dir",
        type=Path,
        help="Where unique files are copied (default: <work-dir>.out).",
    )
    parser.add_argument(
        "--rename",
        action="store_true",
        help="Prefix every output filename with its content fingerprint.",
    )
    parser.add_argument("--workers", type=int, help="Number of hashing threads (default: CPU count).")
    parser.add_argument(
        "--algorithm",
        choices=SUPPORTED_ALGORITHMS,
        help="Digest used to fingerprint file contents (default: md5).",
    )
    parser.add_argument(
        "--verify",
        action="store_true",
        help="Compare files byte-for-byte inside each fingerprint group.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Emit the duplicate report as JSON instead of plain lines.",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only report warnings and errors.")
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Emit debug diagnostics.")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    env = load_environment()
    console = Console(stderr=True)
    configure_logging(resolve_log_level(quiet=args.quiet, verbose=args.verbose, env=env), console)

    try:
        settings = build_settings(
            args.root,
            args.work_dir,
            args.out_dir,
            rename=args.rename,
            max_workers=args.workers,
            algorithm=args.algorithm,
            verify=args.verify,
            env=env,
        )
        result = DedupService(settings).run()
    except DedupError as exc:
        logger.error(str(exc))
        payload = {"error": exc.code, "message": str(exc)}
        print(json.dumps(payload), file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(build_json_payload(settings, result), indent=2))
    else:
        for line in render_report(result.duplicates):
            print(line)

    if not args.quiet:
        console.print(render_summary_panel(settings, result))
    return 0


def configure_logging(level: int, console: Console) -> None:
    """Send package diagnostics to stderr through a single rich handler."""
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(level)
    for handler in list(package_logger.handlers):
        if isinstance(handler, RichHandler):
            package_logger.removeHandler(handler)
    package_logger.addHandler(RichHandler(console=console, show_path=False, markup=False))


if __name__ == "__main__":
    sys.exit(main())
