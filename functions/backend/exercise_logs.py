"""
Exercise logs and the per-user index of exercise names.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from backend.errors import NotFoundError
from backend.schemas import ExerciseLogPayload
from backend.store import DocumentStore
from shared.dates import month_bounds
from shared.types import ExerciseLog, ExerciseName

logger = logging.getLogger(__name__)

LOG_NOT_FOUND = "Exercise log not found."
EXERCISE_NAME_NOT_FOUND = "Exercise name not found."


def _log_fields(payload: ExerciseLogPayload) -> dict:
    return payload.model_dump(mode="json", exclude_unset=True)


def add_exercise_log(
    store: DocumentStore, user_id: str, payload: ExerciseLogPayload
) -> str:
    """Stores the log and indexes its activity name if it is new."""
    user_store = store.for_user(user_id)
    log_id = user_store.create_log(_log_fields(payload))

    if user_store.find_exercise_name(payload.activity) is None:
        user_store.create_exercise_name(payload.activity)
        logger.info("Indexed exercise name %r for user %s", payload.activity, user_id)
    else:
        logger.debug("Exercise name %r already indexed", payload.activity)
    return log_id


def get_logs_by_date(store: DocumentStore, user_id: str, date: str) -> List[ExerciseLog]:
    return store.for_user(user_id).list_logs_on(date)


def get_logs_by_month(
    store: DocumentStore, user_id: str, year_month: str
) -> Tuple[List[ExerciseLog], List[str]]:
    """Returns the month's logs and the sorted distinct dates they fall on."""
    start, end = month_bounds(year_month)
    logs = store.for_user(user_id).list_logs_between(start, end)
    unique_dates = sorted({log.date for log in logs if log.date})
    return logs, unique_dates


def get_log(store: DocumentStore, user_id: str, log_id: str) -> ExerciseLog:
    log = store.for_user(user_id).get_log(log_id)
    if log is None:
        raise NotFoundError(LOG_NOT_FOUND)
    return log


def delete_log(store: DocumentStore, user_id: str, log_id: str) -> None:
    user_store = store.for_user(user_id)
    if user_store.get_log(log_id) is None:
        raise NotFoundError(LOG_NOT_FOUND)
    user_store.delete_log(log_id)


def edit_log(
    store: DocumentStore, user_id: str, log_id: str, payload: ExerciseLogPayload
) -> None:
    """Overwrites the log's fields with `payload`; createdAt is kept."""
    user_store = store.for_user(user_id)
    if user_store.get_log(log_id) is None:
        raise NotFoundError(LOG_NOT_FOUND)
    user_store.update_log(log_id, _log_fields(payload))


def list_exercise_names(store: DocumentStore, user_id: str) -> List[ExerciseName]:
    return store.for_user(user_id).list_exercise_names()


def get_latest_log_by_name(
    store: DocumentStore, user_id: str, name: str
) -> Optional[ExerciseLog]:
    return store.for_user(user_id).latest_log_for_activity(name)


def delete_exercise_name(store: DocumentStore, user_id: str, name: str) -> List[str]:
    """Removes every index entry called `name`; returns the deleted ids."""
    deleted_ids = store.for_user(user_id).delete_exercise_names(name)
    if not deleted_ids:
        raise NotFoundError(EXERCISE_NAME_NOT_FOUND)
    return deleted_ids
