"""Command-line entry point.

Usage:
    python -m drive_untrash                     # whole drive
    python -m drive_untrash -v FOLDER_ID ...    # selected folders, verbose
    python -m drive_untrash --aggressive FOLDER_ID
"""

from __future__ import annotations

import argparse
import logging
import sys

from drive_untrash import __version__
from drive_untrash.config import AGGRESSIVE_MAX_ATTEMPTS, load_config
from drive_untrash.drive.client import DriveAuthError
from drive_untrash.orchestration.restorer import trash_restorer_from_config

logger = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer: {value}")
    return number


def _folder_id(value: str) -> str:
    if not value.strip():
        raise argparse.ArgumentTypeError("folder id must not be blank")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="drive-untrash",
        description="Restore explicitly trashed Google Drive items below the given folders.",
    )
    parser.add_argument(
        "folders",
        nargs="*",
        type=_folder_id,
        metavar="FOLDER_ID",
        help="Folder ids to walk (default: the whole drive)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="verbose logging")
    parser.add_argument(
        "--aggressive",
        action="store_true",
        help=f"retry transient errors up to {AGGRESSIVE_MAX_ATTEMPTS} times per call",
    )
    parser.add_argument("--max-connections", type=_positive_int, help="max remote calls in flight")
    parser.add_argument("--workers", type=_positive_int, help="worker threads")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # Keep third-party transport chatter out of verbose output.
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("google").setLevel(logging.WARNING)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = load_config().with_overrides(
            max_connections=args.max_connections,
            workers=args.workers,
            max_attempts=AGGRESSIVE_MAX_ATTEMPTS if args.aggressive else None,
        )
        restorer = trash_restorer_from_config(config)
    except (DriveAuthError, ValueError) as exc:
        logger.error("[main] unable to start; error:%s", exc)
        return 1

    report = restorer.run(args.folders)
    print(
        f"folders processed: {report.folders_processed}, "
        f"items restored: {report.items_restored}, "
        f"restore failures: {report.restore_failures}, "
        f"listing failures: {report.listing_failures}, "
        f"retries: {report.retries}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
