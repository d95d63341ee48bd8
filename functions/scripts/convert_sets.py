"""
Convert legacy exercise sets to the current set shape.

Old logs stored the unit (kg, lbs, time, distance, steps) in `setType`. This
rewrites the `sets` of every user's logs so the unit lives in `measure` and
`setType` is a set kind again.
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
from backend.maintenance import migrate_exercise_logs
from backend.store import InMemoryDocumentStore
from shared.firebase_constants import MAX_BATCH_WRITES


logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Convert legacy exercise sets")
    parser.add_argument(
        "--batch-size",
        type=int,
        default=MAX_BATCH_WRITES,
        help="Max writes per Firestore batch",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report how many logs would be rewritten without saving",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(message)s")
    settings = get_settings()
    store = build_store(settings)
    if isinstance(store, InMemoryDocumentStore):
        logger.error("Firebase is not configured; refusing to migrate an empty store")
        return 1

    logger.info(
        "Running migration against project: %s",
        settings.firebase_project_id or "unknown",
    )
    report = migrate_exercise_logs(
        store, dry_run=args.dry_run, batch_size=args.batch_size
    )
    logger.info("Migration complete: %d of %d logs", report.queued, report.scanned)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
