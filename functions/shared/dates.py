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
"""Calendar helpers for ISO-8601 date strings (YYYY-MM-DD) and months (YYYY-MM)."""

import calendar
import re
from datetime import date
from typing import Optional, Tuple

MONTH_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_iso_date(value: str) -> date:
    """Parses a strict YYYY-MM-DD string, raising ValueError otherwise."""
    if not isinstance(value, str) or not DATE_PATTERN.match(value):
        raise ValueError("Date must be in YYYY-MM-DD format")
    return date.fromisoformat(value)


def parse_year_month(value: str) -> Tuple[int, int]:
    """Parses a YYYY-MM string into (year, month)."""
    match = MONTH_PATTERN.match(value or "")
    if not match:
        raise ValueError("Date must be in YYYY-MM format")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValueError("Month must be between 01 and 12")
    return year, month


def month_bounds(year_month: str) -> Tuple[str, str]:
    """
    Returns the inclusive (first, last) ISO dates of a YYYY-MM month.

    The last day follows Gregorian rules, e.g. "2024-02" ends on the 29th
    and "2023-02" on the 28th.
    """
    year, month = parse_year_month(year_month)
    last_day = calendar.monthrange(year, month)[1]
    return f"{year:04d}-{month:02d}-01", f"{year:04d}-{month:02d}-{last_day:02d}"


def today_iso(today: Optional[date] = None) -> str:
    return (today or date.today()).isoformat()
