"""
Pydantic request and response schemas.

Field names are snake_case in Python and camelCase on the wire
(`labelId`, `caloriesBurned`, `setType`), matching the stored documents.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Annotated, Any, Generic, List, Optional, Type, TypeVar

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from shared.dates import parse_iso_date, parse_year_month
from shared.types import Measure, SetType


def _check_iso_date(value: str) -> str:
    parse_iso_date(value)
    return value


def _check_year_month(value: str) -> str:
    parse_year_month(value)
    return value


IsoDate = Annotated[str, AfterValidator(_check_iso_date)]
YearMonth = Annotated[str, AfterValidator(_check_year_month)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RecordModel(CamelModel):
    """Response model that can be built straight from a shared.types record."""

    @classmethod
    def from_record(cls, record: Any):
        return cls.model_validate(asdict(record))


# Requests


class IdRequest(CamelModel):
    id: str = Field(..., min_length=1)


class LogIdRequest(CamelModel):
    log_id: str = Field(..., min_length=1)


class DateRequest(CamelModel):
    date: IsoDate


class MonthRequest(CamelModel):
    month: YearMonth


class LabelMonthRequest(CamelModel):
    date: YearMonth


class NameRequest(CamelModel):
    name: str = Field(..., min_length=1)


class ExerciseSetPayload(CamelModel):
    set_type: SetType
    measure: Measure
    value: Optional[str] = None
    reps: Optional[str] = None


class ExerciseLogPayload(CamelModel):
    date: IsoDate
    activity: str = Field(..., min_length=3, max_length=100)
    calories_burned: Optional[int] = None
    notes: Optional[str] = Field(default=None, max_length=500)
    sets: List[ExerciseSetPayload]


class EditExerciseLogRequest(CamelModel):
    log_id: str = Field(..., min_length=1)
    data: ExerciseLogPayload


class LabelCreateRequest(CamelModel):
    label: str = Field(..., min_length=1, max_length=10)
    description: str = Field(..., min_length=1, max_length=100)
    # Accepted for compatibility with older clients, never stored: the
    # date list is owned by the day assignment code.
    dates: Optional[List[IsoDate]] = None
    muscle_groups: List[str] = Field(default_factory=list)


class LabelEditRequest(CamelModel):
    id: str = Field(..., min_length=1)
    label: Optional[str] = Field(default=None, min_length=1, max_length=10)
    description: Optional[str] = Field(default=None, min_length=1, max_length=100)
    muscle_groups: Optional[List[str]] = None


class AssignLabelRequest(CamelModel):
    date: IsoDate
    label_id: str = Field(..., min_length=1)


# Responses


class ExerciseSetResponse(CamelModel):
    set_type: str
    measure: str
    value: Optional[str] = None
    reps: Optional[str] = None


class ExerciseLogResponse(RecordModel):
    id: str
    date: str
    activity: str
    sets: List[ExerciseSetResponse] = Field(default_factory=list)
    calories_burned: Optional[int] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


class ExerciseNameResponse(RecordModel):
    id: str
    name: str
    created_at: Optional[datetime] = None


class LabelResponse(RecordModel):
    id: str
    label: str
    description: str
    dates: List[str] = Field(default_factory=list)
    muscle_groups: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class MutationResponse(CamelModel):
    id: str
    message: str


class ExerciseLogsByMonthResponse(CamelModel):
    logs: List[ExerciseLogResponse]
    unique_dates: List[str]


class ExerciseNamesResponse(CamelModel):
    names: List[ExerciseNameResponse]


class DeleteExerciseNameResponse(CamelModel):
    deleted_ids: List[str]
    message: str


class DeleteLabelResponse(CamelModel):
    id: str
    removed_assignments: int
    message: str


class AssignmentResponse(CamelModel):
    id: str
    date: str
    label_id: str
    created: bool
    message: str


class AssignmentWithLabelResponse(CamelModel):
    id: str
    date: str
    label_id: str
    label: LabelResponse


class DeleteAssignmentResponse(CamelModel):
    id: str
    date: str
    message: str


class MonthLabelEntry(CamelModel):
    date: str
    label: str


# Explicit validation pass for transports that hand us raw dicts.

M = TypeVar("M", bound=BaseModel)


@dataclass
class Validated(Generic[M]):
    """Outcome of validate_payload: either a parsed model or error details."""

    value: Optional[M] = None
    errors: List[dict] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def validate_payload(model: Type[M], data: Any) -> Validated[M]:
    try:
        return Validated(value=model.model_validate(data if data is not None else {}))
    except ValidationError as e:
        # Round-trip through JSON so the details are serializable.
        return Validated(errors=json.loads(e.json(include_url=False)))
