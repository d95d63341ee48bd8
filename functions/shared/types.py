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

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, List, Optional, Type, TypeVar

from dacite import Config, from_dict

from shared.json_utils import convert_keys

T = TypeVar("T")


class SetType(str, Enum):
    NORMAL = "normal"
    WARMUP = "warmup"
    DROP = "drop"
    FAILURE = "failure"


class Measure(str, Enum):
    KG = "kg"
    LBS = "lbs"
    SEC = "sec"
    DISTANCE = "distance"
    STEP = "step"


@dataclass
class ExerciseSet:
    """One set inside an exercise log."""

    set_type: str
    measure: str
    value: Optional[str] = None
    reps: Optional[str] = None


@dataclass
class ExerciseLog:
    """One activity performed on one date."""

    id: str
    date: str
    activity: str
    sets: List[ExerciseSet] = field(default_factory=list)
    calories_burned: Optional[int] = None
    notes: Optional[str] = None
    created_at: Any = None  # Firestore timestamp


@dataclass
class ExerciseName:
    """Entry in the per-user index of activity names."""

    id: str
    name: str
    created_at: Any = None


@dataclass
class Label:
    """
    A short display token (often an emoji) that can be assigned to days.

    `dates` is denormalized: it lists every date whose DayAssignment points
    at this label and is only written by the day assignment code.
    """

    id: str
    label: str
    description: str
    dates: List[str] = field(default_factory=list)
    muscle_groups: List[str] = field(default_factory=list)
    created_at: Any = None
    updated_at: Any = None


@dataclass
class DayAssignment:
    """Links one calendar date to one label."""

    id: str
    date: str
    label_id: str
    created_at: Any = None
    updated_at: Any = None


# Older clients stored some fields under other names.
LEGACY_FIELDS = {
    "DayAssignment": {"emoji_id": "label_id"},
}


def from_document(data_class: Type[T], doc_id: str, data: Optional[dict]) -> T:
    """Builds a record from a camelCase store document and its id."""
    payload = convert_keys(dict(data or {}), "camel_to_snake")
    for old, new in LEGACY_FIELDS.get(data_class.__name__, {}).items():
        if old in payload:
            value = payload.pop(old)
            payload.setdefault(new, value)
    payload["id"] = doc_id
    return from_dict(
        data_class=data_class,
        data=payload,
        config=Config(check_types=False),
    )


def to_document(record: Any) -> dict:
    """Returns the camelCase document body for a record (without its id)."""
    body = asdict(record)
    body.pop("id", None)
    return convert_keys(body, "snake_to_camel")
