"""
Delete every user's exercise logs dated today (or --date).

Logs are scanned page by page in document id order and filtered in memory,
so no composite index on `date` is needed.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from backend.config import get_settings
from backend.dependencies import build_store
from backend.maintenance import delete_logs_dated
from backend.store import InMemoryDocumentStore
from shared.dates import parse_iso_date, today_iso
from shared.firebase_constants import MAX_BATCH_WRITES


logger = logging.getLogger(__name__)


def _date_arg(value: str) -> str:
    try:
        parse_iso_date(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e
    return value


def main() -> int:
    parser = argparse.ArgumentParser(description="Delete exercise logs for one date")
    parser.add_argument(
        "--date",
        type=_date_arg,
        default=None,
        help="YYYY-MM-DD to delete (defaults to today, local time)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=MAX_BATCH_WRITES,
        help="Max deletes per Firestore batch",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report how many logs match without deleting",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(message)s")
    settings = get_settings()
    store = build_store(settings)
    if isinstance(store, InMemoryDocumentStore):
        logger.error("Firebase is not configured; nothing to delete")
        return 1

    date = args.date or today_iso()
    logger.info(
        "Running delete against project: %s, date == %s",
        settings.firebase_project_id or "unknown",
        date,
    )
    delete_logs_dated(store, date, dry_run=args.dry_run, batch_size=args.batch_size)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
