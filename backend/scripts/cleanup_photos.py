#!/usr/bin/env python3
"""Remove stale employee photos.

Deletes files in PHOTO_DIR that are older than the cutoff and not referenced
by any employee (or by the backup sheet). Run from the backend/ directory:

    python3 scripts/cleanup_photos.py [--max-age-days N] [--dry-run] [--verbose]
"""

from __future__ import annotations

import argparse
import logging
import os
import sys

_project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from roster.core.config import Settings  # noqa: E402
from roster.services.photo_service import PhotoService, run_photo_cleanup  # noqa: E402
from roster.services.roster_service import RosterService  # noqa: E402
from roster.storage.factory import open_workbook  # noqa: E402

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Delete unreferenced employee photos older than a cutoff",
    )
    parser.add_argument(
        "--max-age-days",
        type=float,
        default=None,
        help="Only delete files older than this many days (default: PHOTO_MAX_AGE_DAYS)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="List the files that would be removed without deleting them",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )
    return parser.parse_args(argv)


def cleanup(args: argparse.Namespace, settings: Settings | None = None) -> list[str]:
    settings = settings or Settings()
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(message)s")

    max_age_days = args.max_age_days if args.max_age_days is not None else settings.PHOTO_MAX_AGE_DAYS

    logger.info("Opening roster store (%s)...", settings.STORE_BACKEND)
    roster = RosterService.from_settings(open_workbook(settings), settings)
    try:
        photos = PhotoService.from_settings(settings)
        removed = run_photo_cleanup(roster, photos, max_age_days, dry_run=args.dry_run)
    finally:
        roster.close()

    for name in removed:
        logger.debug("%s %s", "Would remove" if args.dry_run else "Removed", name)
    logger.info("Cleanup complete: %d file(s) older than %s days", len(removed), max_age_days)
    if args.dry_run:
        logger.info("[DRY RUN] No files were actually deleted.")
    return removed


def main() -> None:
    cleanup(parse_args())


if __name__ == "__main__":
    main()
