"""
Bulk maintenance jobs over every user's exercise logs.

Both jobs scan the logs collection group page by page and queue their writes
on a BatchWriter, so no single commit exceeds the Firestore batch limit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from backend.store import DocumentStore
from shared.firebase_constants import FITNESS_LOGS_COLLECTION, MAX_BATCH_WRITES
from shared.types import Measure, SetType

logger = logging.getLogger(__name__)

# Old logs stored the unit in `setType`; it now lives in `measure`.
LEGACY_MEASURES: Dict[str, Measure] = {
    "kg": Measure.KG,
    "lbs": Measure.LBS,
    "time": Measure.SEC,
    "distance": Measure.DISTANCE,
    "steps": Measure.STEP,
}
DEFAULT_MEASURE = Measure.KG
DEFAULT_REPS = "8-9"


@dataclass
class MaintenanceReport:
    scanned: int = 0
    queued: int = 0
    commits: int = 0
    dry_run: bool = False


def convert_legacy_sets(sets: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Rewrites legacy sets into the current shape.

    The legacy `setType` becomes the measure (unknown values fall back to kg),
    every set becomes a normal set, values are stringified and reps are reset
    to a placeholder range since the old shape did not record them.
    """
    converted = []
    for legacy in sets:
        value = legacy.get("value")
        converted.append(
            {
                "setType": SetType.NORMAL.value,
                "measure": LEGACY_MEASURES.get(legacy.get("setType"), DEFAULT_MEASURE).value,
                "value": str(value) if value is not None else None,
                "reps": DEFAULT_REPS,
            }
        )
    return converted


def migrate_exercise_logs(
    store: DocumentStore,
    dry_run: bool = False,
    batch_size: int = MAX_BATCH_WRITES,
) -> MaintenanceReport:
    """Converts the sets of every log that has any; logs without sets are skipped."""
    report = MaintenanceReport(dry_run=dry_run)
    with store.batch_writer(batch_size) as writer:
        for log in store.scan_exercise_logs():
            report.scanned += 1
            sets = log.data.get("sets") or []
            if not sets:
                continue
            report.queued += 1
            if not dry_run:
                writer.merge(
                    log.user_id,
                    FITNESS_LOGS_COLLECTION,
                    log.log_id,
                    {"sets": convert_legacy_sets(sets)},
                )
    report.commits = writer.commits
    logger.info(
        "Scanned %d logs. Queued %d docs for update in %d commits%s.",
        report.scanned,
        report.queued,
        report.commits,
        " (dry run)" if dry_run else "",
    )
    return report


def delete_logs_dated(
    store: DocumentStore,
    date: str,
    dry_run: bool = False,
    batch_size: int = MAX_BATCH_WRITES,
    progress_every: Optional[int] = 500,
) -> MaintenanceReport:
    """Deletes every user's logs whose `date` equals `date` exactly."""
    report = MaintenanceReport(dry_run=dry_run)
    with store.batch_writer(batch_size) as writer:
        for log in store.scan_exercise_logs():
            report.scanned += 1
            if log.data.get("date") == date:
                report.queued += 1
                if not dry_run:
                    writer.delete(log.user_id, FITNESS_LOGS_COLLECTION, log.log_id)
            if progress_every and report.scanned % progress_every == 0:
                logger.info(
                    "Scanned %d docs so far. Matched %d so far.",
                    report.scanned,
                    report.queued,
                )
    report.commits = writer.commits
    logger.info(
        "Done. Scanned %d. Deleted %d logs dated %s%s.",
        report.scanned,
        report.queued,
        date,
        " (dry run)" if dry_run else "",
    )
    return report
