"""
Procedure table shared by the HTTP routes and the callable functions.

Each procedure takes a store, the caller's uid and (optionally) a validated
request model, and returns a response model, a list of them, or None.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Type

from pydantic import BaseModel

from backend import day_assignments, exercise_logs, labels
from backend.schemas import (
    AssignLabelRequest,
    AssignmentResponse,
    AssignmentWithLabelResponse,
    DateRequest,
    DeleteAssignmentResponse,
    DeleteExerciseNameResponse,
    DeleteLabelResponse,
    EditExerciseLogRequest,
    ExerciseLogPayload,
    ExerciseLogResponse,
    ExerciseLogsByMonthResponse,
    ExerciseNameResponse,
    ExerciseNamesResponse,
    IdRequest,
    LabelCreateRequest,
    LabelEditRequest,
    LabelMonthRequest,
    LabelResponse,
    LogIdRequest,
    MonthLabelEntry,
    MonthRequest,
    MutationResponse,
    NameRequest,
)
from backend.store import DocumentStore


# fitness.*


def add_exercise_log(
    store: DocumentStore, user_id: str, payload: ExerciseLogPayload
) -> MutationResponse:
    log_id = exercise_logs.add_exercise_log(store, user_id, payload)
    return MutationResponse(id=log_id, message="Exercise log added successfully!")


def get_exercise_log_by_date(
    store: DocumentStore, user_id: str, payload: DateRequest
) -> List[ExerciseLogResponse]:
    logs = exercise_logs.get_logs_by_date(store, user_id, payload.date)
    return [ExerciseLogResponse.from_record(log) for log in logs]


def get_exercise_logs_by_month(
    store: DocumentStore, user_id: str, payload: MonthRequest
) -> ExerciseLogsByMonthResponse:
    logs, unique_dates = exercise_logs.get_logs_by_month(store, user_id, payload.month)
    return ExerciseLogsByMonthResponse(
        logs=[ExerciseLogResponse.from_record(log) for log in logs],
        unique_dates=unique_dates,
    )


def get_exercise_log_by_id(
    store: DocumentStore, user_id: str, payload: LogIdRequest
) -> ExerciseLogResponse:
    log = exercise_logs.get_log(store, user_id, payload.log_id)
    return ExerciseLogResponse.from_record(log)


def delete_exercise_log(
    store: DocumentStore, user_id: str, payload: IdRequest
) -> MutationResponse:
    exercise_logs.delete_log(store, user_id, payload.id)
    return MutationResponse(id=payload.id, message="Exercise log deleted successfully!")


def edit_exercise_log(
    store: DocumentStore, user_id: str, payload: EditExerciseLogRequest
) -> MutationResponse:
    exercise_logs.edit_log(store, user_id, payload.log_id, payload.data)
    return MutationResponse(
        id=payload.log_id, message="Exercise log updated successfully!"
    )


def get_all_exercise_names(store: DocumentStore, user_id: str) -> ExerciseNamesResponse:
    names = exercise_logs.list_exercise_names(store, user_id)
    return ExerciseNamesResponse(
        names=[ExerciseNameResponse.from_record(name) for name in names]
    )


def get_latest_exercise_by_name(
    store: DocumentStore, user_id: str, payload: NameRequest
) -> Optional[ExerciseLogResponse]:
    log = exercise_logs.get_latest_log_by_name(store, user_id, payload.name)
    if log is None:
        return None
    return ExerciseLogResponse.from_record(log)


def delete_exercise_name(
    store: DocumentStore, user_id: str, payload: NameRequest
) -> DeleteExerciseNameResponse:
    deleted_ids = exercise_logs.delete_exercise_name(store, user_id, payload.name)
    return DeleteExerciseNameResponse(
        deleted_ids=deleted_ids, message="Exercise name deleted successfully!"
    )


# label.* (also served as emoji.*)


def add_label(
    store: DocumentStore, user_id: str, payload: LabelCreateRequest
) -> MutationResponse:
    label_id = labels.add_label(store, user_id, payload)
    return MutationResponse(id=label_id, message="Label added successfully!")


def get_label_by_id(
    store: DocumentStore, user_id: str, payload: IdRequest
) -> LabelResponse:
    return LabelResponse.from_record(labels.get_label(store, user_id, payload.id))


def get_all_labels(store: DocumentStore, user_id: str) -> List[LabelResponse]:
    return [LabelResponse.from_record(label) for label in labels.list_labels(store, user_id)]


def get_all_labels_from_month(
    store: DocumentStore, user_id: str, payload: LabelMonthRequest
) -> List[MonthLabelEntry]:
    entries = day_assignments.get_assignments_in_month(store, user_id, payload.date)
    return [MonthLabelEntry(date=entry.date, label=entry.label) for entry in entries]


def delete_label(
    store: DocumentStore, user_id: str, payload: IdRequest
) -> DeleteLabelResponse:
    removed = labels.delete_label(store, user_id, payload.id)
    return DeleteLabelResponse(
        id=payload.id,
        removed_assignments=removed,
        message="Label deleted successfully!",
    )


def edit_label(
    store: DocumentStore, user_id: str, payload: LabelEditRequest
) -> LabelResponse:
    return LabelResponse.from_record(labels.edit_label(store, user_id, payload))


def assign_label_to_day(
    store: DocumentStore, user_id: str, payload: AssignLabelRequest
) -> AssignmentResponse:
    result = day_assignments.assign_label_to_day(
        store, user_id, payload.date, payload.label_id
    )
    return AssignmentResponse(
        id=result.id,
        date=result.date,
        label_id=result.label_id,
        created=result.created,
        message=result.message,
    )


def get_label_assignment_by_date(
    store: DocumentStore, user_id: str, payload: DateRequest
) -> Optional[AssignmentWithLabelResponse]:
    found = day_assignments.get_assignment_by_date(store, user_id, payload.date)
    if found is None:
        return None
    assignment, label = found
    return AssignmentWithLabelResponse(
        id=assignment.id,
        date=assignment.date,
        label_id=assignment.label_id,
        label=LabelResponse.from_record(label),
    )


def delete_assignment(
    store: DocumentStore, user_id: str, payload: DateRequest
) -> DeleteAssignmentResponse:
    assignment = day_assignments.delete_assignment(store, user_id, payload.date)
    return DeleteAssignmentResponse(
        id=assignment.id,
        date=payload.date,
        message="Label assignment deleted successfully!",
    )


@dataclass(frozen=True)
class Procedure:
    handler: Callable[..., Any]
    request_model: Optional[Type[BaseModel]] = None

    def call(self, store: DocumentStore, user_id: str, payload: Optional[BaseModel]):
        if self.request_model is None:
            return self.handler(store, user_id)
        return self.handler(store, user_id, payload)


PROCEDURES: Dict[str, Procedure] = {
    "fitness.addExerciseLog": Procedure(add_exercise_log, ExerciseLogPayload),
    "fitness.getExerciseLogByDate": Procedure(get_exercise_log_by_date, DateRequest),
    "fitness.getExerciseLogsByMonth": Procedure(get_exercise_logs_by_month, MonthRequest),
    "fitness.getExerciseLogById": Procedure(get_exercise_log_by_id, LogIdRequest),
    "fitness.deleteExerciseLog": Procedure(delete_exercise_log, IdRequest),
    "fitness.editExerciseLog": Procedure(edit_exercise_log, EditExerciseLogRequest),
    "fitness.getAllExerciseNames": Procedure(get_all_exercise_names),
    "fitness.getLatestExerciseByName": Procedure(get_latest_exercise_by_name, NameRequest),
    "fitness.deleteExerciseName": Procedure(delete_exercise_name, NameRequest),
    "label.addLabel": Procedure(add_label, LabelCreateRequest),
    "label.getLabelById": Procedure(get_label_by_id, IdRequest),
    "label.getAllLabels": Procedure(get_all_labels),
    "label.getAllLabelsFromMonth": Procedure(get_all_labels_from_month, LabelMonthRequest),
    "label.deleteLabel": Procedure(delete_label, IdRequest),
    "label.editLabel": Procedure(edit_label, LabelEditRequest),
    "label.assignLabelToDay": Procedure(assign_label_to_day, AssignLabelRequest),
    "label.getLabelAssignmentByDate": Procedure(get_label_assignment_by_date, DateRequest),
    "label.deleteAssignment": Procedure(delete_assignment, DateRequest),
}


def to_json(result: Any) -> Any:
    """Serializes a procedure result with camelCase keys."""
    if isinstance(result, BaseModel):
        return result.model_dump(mode="json", by_alias=True)
    if isinstance(result, list):
        return [to_json(item) for item in result]
    return result
