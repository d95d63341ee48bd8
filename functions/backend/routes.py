"""
HTTP routes for the backend API.

Every procedure is a POST taking a JSON body (or none), grouped under
`fitness` and `label`; the label router is also mounted as `emoji` for
clients built against the older schema.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends

from backend import procedures
from backend.dependencies import get_current_user_id, get_store
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

fitness_router = APIRouter(tags=["fitness"])
label_router = APIRouter(tags=["label"])


@fitness_router.post("/add_exercise_log", response_model=MutationResponse)
def add_exercise_log(
    payload: ExerciseLogPayload,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    return procedures.add_exercise_log(store, user_id, payload)


@fitness_router.post(
    "/get_exercise_log_by_date", response_model=List[ExerciseLogResponse]
)
def get_exercise_log_by_date(
    payload: DateRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    return procedures.get_exercise_log_by_date(store, user_id, payload)


@fitness_router.post(
    "/get_exercise_logs_by_month", response_model=ExerciseLogsByMonthResponse
)
def get_exercise_logs_by_month(
    payload: MonthRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    return procedures.get_exercise_logs_by_month(store, user_id, payload)


@fitness_router.post("/get_exercise_log_by_id", response_model=ExerciseLogResponse)
def get_exercise_log_by_id(
    payload: LogIdRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    return procedures.get_exercise_log_by_id(store, user_id, payload)


@fitness_router.post("/delete_exercise_log", response_model=MutationResponse)
def delete_exercise_log(
    payload: IdRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    return procedures.delete_exercise_log(store, user_id, payload)


@fitness_router.post("/edit_exercise_log", response_model=MutationResponse)
def edit_exercise_log(
    payload: EditExerciseLogRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    return procedures.edit_exercise_log(store, user_id, payload)


@fitness_router.post("/get_all_exercise_names", response_model=ExerciseNamesResponse)
def get_all_exercise_names(
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    return procedures.get_all_exercise_names(store, user_id)


@fitness_router.post(
    "/get_latest_exercise_by_name", response_model=Optional[ExerciseLogResponse]
)
def get_latest_exercise_by_name(
    payload: NameRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    return procedures.get_latest_exercise_by_name(store, user_id, payload)


@fitness_router.post("/delete_exercise_name", response_model=DeleteExerciseNameResponse)
def delete_exercise_name(
    payload: NameRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    return procedures.delete_exercise_name(store, user_id, payload)


@label_router.post("/add_label", response_model=MutationResponse)
def add_label(
    payload: LabelCreateRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    return procedures.add_label(store, user_id, payload)


@label_router.post("/get_label_by_id", response_model=LabelResponse)
def get_label_by_id(
    payload: IdRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    return procedures.get_label_by_id(store, user_id, payload)


@label_router.post("/get_all_labels", response_model=List[LabelResponse])
def get_all_labels(
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    return procedures.get_all_labels(store, user_id)


@label_router.post(
    "/get_all_labels_from_month", response_model=List[MonthLabelEntry]
)
def get_all_labels_from_month(
    payload: LabelMonthRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    return procedures.get_all_labels_from_month(store, user_id, payload)


@label_router.post("/delete_label", response_model=DeleteLabelResponse)
def delete_label(
    payload: IdRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    return procedures.delete_label(store, user_id, payload)


@label_router.post("/edit_label", response_model=LabelResponse)
def edit_label(
    payload: LabelEditRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    return procedures.edit_label(store, user_id, payload)


@label_router.post("/assign_label_to_day", response_model=AssignmentResponse)
def assign_label_to_day(
    payload: AssignLabelRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    return procedures.assign_label_to_day(store, user_id, payload)


@label_router.post(
    "/get_label_assignment_by_date",
    response_model=Optional[AssignmentWithLabelResponse],
)
def get_label_assignment_by_date(
    payload: DateRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    return procedures.get_label_assignment_by_date(store, user_id, payload)


@label_router.post("/delete_assignment", response_model=DeleteAssignmentResponse)
def delete_assignment(
    payload: DateRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    return procedures.delete_assignment(store, user_id, payload)
