# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

# Cloud functions for the Fitness Chronicle backend - callable versions of the
# fitness and label procedures served by the FastAPI app.
#
# This file containing Python cloud functions must be named main.py.
# See https://cloud.google.com/run/docs/write-functions#python for more info.

# Standard library imports
from typing import Optional

# Third-party library imports
from firebase_admin import initialize_app, firestore
from firebase_functions import https_fn, logger, options
from google.api_core import exceptions

# Local application imports
from backend.errors import NotFoundError
from backend.procedures import PROCEDURES, to_json
from backend.schemas import validate_payload
from backend.store import DocumentStore, FirestoreDocumentStore

initialize_app()

_store: Optional[DocumentStore] = None


def _get_store() -> DocumentStore:
    """Returns the Firestore-backed store, creating the client on first use."""
    global _store
    if _store is None:
        _store = FirestoreDocumentStore(firestore.client())
    return _store


def _invoke(req: https_fn.CallableRequest, name: str):
    """
    Runs the named procedure for the signed-in caller.

    Args:
        req (https_fn.CallableRequest): The request; `data` holds the procedure input.
        name (str): Key into PROCEDURES, e.g. "label.assignLabelToDay".

    Returns:
        The procedure result serialized with camelCase keys, or None.
    """
    if req.auth is None or not req.auth.uid:
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.UNAUTHENTICATED,
            "You must be logged in to access this resource.",
        )
    user_id = req.auth.uid
    procedure = PROCEDURES[name]

    payload = None
    if procedure.request_model is not None:
        validated = validate_payload(procedure.request_model, req.data)
        if not validated.ok:
            raise https_fn.HttpsError(
                https_fn.FunctionsErrorCode.INVALID_ARGUMENT,
                "Invalid input.",
                validated.errors,
            )
        payload = validated.value

    try:
        result = procedure.call(_get_store(), user_id, payload)
    except NotFoundError as e:
        raise https_fn.HttpsError(https_fn.FunctionsErrorCode.NOT_FOUND, e.message)
    except exceptions.TooManyRequests as e:
        logger.error(f"Firestore quota exceeded in {name}: {e}")
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.RESOURCE_EXHAUSTED,
            f"Firestore quota exceeded: {e}",
        )
    except exceptions.Aborted as e:
        logger.warn(f"Transaction aborted in {name}: {e}")
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.ABORTED,
            "The request conflicted with a concurrent update.",
        )

    logger.info(f"{name} completed for {user_id}")
    return to_json(result)


# fitness.*


@https_fn.on_call(memory=options.MemoryOption.MB_256)
def fitness_add_exercise_log(req: https_fn.CallableRequest) -> dict:
    return _invoke(req, "fitness.addExerciseLog")


@https_fn.on_call(memory=options.MemoryOption.MB_256)
def fitness_get_exercise_log_by_date(req: https_fn.CallableRequest) -> list:
    return _invoke(req, "fitness.getExerciseLogByDate")


@https_fn.on_call(memory=options.MemoryOption.MB_256)
def fitness_get_exercise_logs_by_month(req: https_fn.CallableRequest) -> dict:
    return _invoke(req, "fitness.getExerciseLogsByMonth")


@https_fn.on_call(memory=options.MemoryOption.MB_256)
def fitness_get_exercise_log_by_id(req: https_fn.CallableRequest) -> dict:
    return _invoke(req, "fitness.getExerciseLogById")


@https_fn.on_call(memory=options.MemoryOption.MB_256)
def fitness_delete_exercise_log(req: https_fn.CallableRequest) -> dict:
    return _invoke(req, "fitness.deleteExerciseLog")


@https_fn.on_call(memory=options.MemoryOption.MB_256)
def fitness_edit_exercise_log(req: https_fn.CallableRequest) -> dict:
    return _invoke(req, "fitness.editExerciseLog")


@https_fn.on_call(memory=options.MemoryOption.MB_256)
def fitness_get_all_exercise_names(req: https_fn.CallableRequest) -> dict:
    return _invoke(req, "fitness.getAllExerciseNames")


@https_fn.on_call(memory=options.MemoryOption.MB_256)
def fitness_get_latest_exercise_by_name(req: https_fn.CallableRequest) -> Optional[dict]:
    return _invoke(req, "fitness.getLatestExerciseByName")


@https_fn.on_call(memory=options.MemoryOption.MB_256)
def fitness_delete_exercise_name(req: https_fn.CallableRequest) -> dict:
    return _invoke(req, "fitness.deleteExerciseName")


# label.*


@https_fn.on_call(memory=options.MemoryOption.MB_256)
def label_add_label(req: https_fn.CallableRequest) -> dict:
    return _invoke(req, "label.addLabel")


@https_fn.on_call(memory=options.MemoryOption.MB_256)
def label_get_label_by_id(req: https_fn.CallableRequest) -> dict:
    return _invoke(req, "label.getLabelById")


@https_fn.on_call(memory=options.MemoryOption.MB_256)
def label_get_all_labels(req: https_fn.CallableRequest) -> list:
    return _invoke(req, "label.getAllLabels")


@https_fn.on_call(memory=options.MemoryOption.MB_256)
def label_get_all_labels_from_month(req: https_fn.CallableRequest) -> list:
    return _invoke(req, "label.getAllLabelsFromMonth")


@https_fn.on_call(memory=options.MemoryOption.MB_256)
def label_delete_label(req: https_fn.CallableRequest) -> dict:
    return _invoke(req, "label.deleteLabel")


@https_fn.on_call(memory=options.MemoryOption.MB_256)
def label_edit_label(req: https_fn.CallableRequest) -> dict:
    return _invoke(req, "label.editLabel")


@https_fn.on_call(memory=options.MemoryOption.MB_256)
def label_assign_label_to_day(req: https_fn.CallableRequest) -> dict:
    """
    Assigns a label to a date, replacing any label the date already had.

    Args:
        req (https_fn.CallableRequest): The request, containing `date` and `labelId`.

    Returns:
        A dictionary with the assignment id, date, label id and whether it was created.
    """
    return _invoke(req, "label.assignLabelToDay")


@https_fn.on_call(memory=options.MemoryOption.MB_256)
def label_get_label_assignment_by_date(req: https_fn.CallableRequest) -> Optional[dict]:
    return _invoke(req, "label.getLabelAssignmentByDate")


@https_fn.on_call(memory=options.MemoryOption.MB_256)
def label_delete_assignment(req: https_fn.CallableRequest) -> dict:
    return _invoke(req, "label.deleteAssignment")
