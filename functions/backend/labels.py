"""
Label CRUD, scoped per user.
"""

from __future__ import annotations

import logging
from typing import List

from backend.day_assignments import LABEL_NOT_FOUND
from backend.errors import NotFoundError
from backend.schemas import LabelCreateRequest, LabelEditRequest
from backend.store import DocumentStore, UserStore
from shared.types import Label

logger = logging.getLogger(__name__)


def add_label(store: DocumentStore, user_id: str, payload: LabelCreateRequest) -> str:
    fields = payload.model_dump(exclude={"dates"})
    label_id = store.for_user(user_id).create_label(fields)
    logger.info("Created label %s for user %s", label_id, user_id)
    return label_id


def get_label(store: DocumentStore, user_id: str, label_id: str) -> Label:
    label = store.for_user(user_id).get_label(label_id)
    if label is None:
        raise NotFoundError(LABEL_NOT_FOUND)
    return label


def list_labels(store: DocumentStore, user_id: str) -> List[Label]:
    """Newest first."""
    return store.for_user(user_id).list_labels()


def edit_label(store: DocumentStore, user_id: str, payload: LabelEditRequest) -> Label:
    """Writes only the fields the caller sent, then returns the stored label."""
    user_store = store.for_user(user_id)
    if user_store.get_label(payload.id) is None:
        raise NotFoundError(LABEL_NOT_FOUND)

    fields = payload.model_dump(exclude_unset=True, exclude_none=True, exclude={"id"})
    user_store.update_label(payload.id, fields)
    return get_label(store, user_id, payload.id)


def delete_label(store: DocumentStore, user_id: str, label_id: str) -> int:
    """
    Deletes a label together with every day assignment that points at it.

    Returns the number of assignments removed.
    """

    def _delete(txn: UserStore) -> int:
        if txn.get_label(label_id) is None:
            raise NotFoundError(LABEL_NOT_FOUND)
        assignments = txn.list_assignments_for_label(label_id)
        for assignment in assignments:
            txn.delete_assignment(assignment.id)
        txn.delete_label(label_id)
        return len(assignments)

    removed = store.run_transaction(user_id, _delete)
    logger.info(
        "Deleted label %s for user %s (%d assignments removed)",
        label_id,
        user_id,
        removed,
    )
    return removed
