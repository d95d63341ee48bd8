"""
Day assignments: which label is shown on which calendar date.

Each user has at most one DayAssignment per date, and a label's `dates`
list contains exactly the dates whose assignment points at it. Every
mutation below keeps both true, inside a single store transaction.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from backend.errors import NotFoundError
from backend.store import DocumentStore, UserStore
from shared.dates import month_bounds
from shared.types import DayAssignment, Label

logger = logging.getLogger(__name__)

LABEL_NOT_FOUND = "Label not found."
ASSIGNMENT_NOT_FOUND = "No label assignment found for this date."


@dataclass
class AssignmentResult:
    id: str
    date: str
    label_id: str
    created: bool

    @property
    def message(self) -> str:
        if self.created:
            return "Label assigned to day successfully!"
        return "Label assignment updated successfully!"


@dataclass
class MonthEntry:
    date: str
    label: str


def assign_label_to_day(
    store: DocumentStore, user_id: str, date: str, label_id: str
) -> AssignmentResult:
    """
    Points `date` at `label_id`, creating the assignment or updating it in place.

    Raises:
        NotFoundError: the label does not exist.
    """

    def _assign(txn: UserStore) -> AssignmentResult:
        # All reads happen before the first write (Firestore transaction rule).
        label = txn.get_label(label_id)
        if label is None:
            raise NotFoundError(LABEL_NOT_FOUND)

        existing = txn.find_assignment(date)
        previous_label: Optional[Label] = None
        if existing is not None and existing.label_id != label_id:
            previous_label = txn.get_label(existing.label_id)

        if existing is not None:
            txn.update_assignment_label(existing.id, label_id)
            assignment_id = existing.id
        else:
            assignment_id = txn.create_assignment(date, label_id).id

        if date not in label.dates:
            txn.add_label_date(label_id, date)

        # The previous label may have been deleted out of band.
        if previous_label is not None:
            txn.remove_label_date(previous_label.id, date)

        return AssignmentResult(
            id=assignment_id,
            date=date,
            label_id=label_id,
            created=existing is None,
        )

    result = store.run_transaction(user_id, _assign)
    logger.info(
        "%s assignment %s (%s -> %s) for user %s",
        "Created" if result.created else "Updated",
        result.id,
        date,
        label_id,
        user_id,
    )
    return result


def get_assignment_by_date(
    store: DocumentStore, user_id: str, date: str
) -> Optional[Tuple[DayAssignment, Label]]:
    """
    Returns the assignment for `date` with its label, or None.

    An assignment whose label no longer exists is deleted and None is returned.
    """

    def _lookup(txn: UserStore) -> Optional[Tuple[DayAssignment, Label]]:
        assignment = txn.find_assignment(date)
        if assignment is None:
            return None
        label = txn.get_label(assignment.label_id)
        if label is None:
            txn.delete_assignment(assignment.id)
            logger.info(
                "Removed orphaned assignment %s on %s (label %s is gone)",
                assignment.id,
                date,
                assignment.label_id,
            )
            return None
        return assignment, label

    return store.run_transaction(user_id, _lookup)


def delete_assignment(store: DocumentStore, user_id: str, date: str) -> DayAssignment:
    """
    Deletes the assignment for `date` and drops `date` from its label.

    Raises:
        NotFoundError: there is no assignment for `date`.
    """

    def _delete(txn: UserStore) -> DayAssignment:
        assignment = txn.find_assignment(date)
        if assignment is None:
            raise NotFoundError(ASSIGNMENT_NOT_FOUND)
        label = txn.get_label(assignment.label_id)

        txn.delete_assignment(assignment.id)
        if label is not None and date in label.dates:
            txn.remove_label_date(label.id, date)
        return assignment

    return store.run_transaction(user_id, _delete)


def get_assignments_in_month(
    store: DocumentStore, user_id: str, year_month: str
) -> List[MonthEntry]:
    """
    Returns (date, label text) pairs for every assignment in a YYYY-MM month.

    Each distinct label is read once. Assignments pointing at missing labels
    are deleted and left out of the result.
    """
    start, end = month_bounds(year_month)
    user_store = store.for_user(user_id)
    assignments = user_store.list_assignments_between(start, end)
    if not assignments:
        return []

    labels = {
        label_id: user_store.get_label(label_id)
        for label_id in dict.fromkeys(a.label_id for a in assignments)
    }

    entries = []
    orphaned = 0
    for assignment in assignments:
        label = labels[assignment.label_id]
        if label is None:
            user_store.delete_assignment(assignment.id)
            orphaned += 1
            continue
        entries.append(MonthEntry(date=assignment.date, label=label.label))

    if orphaned:
        logger.info(
            "Removed %d orphaned assignments in %s for user %s",
            orphaned,
            year_month,
            user_id,
        )
    return entries
