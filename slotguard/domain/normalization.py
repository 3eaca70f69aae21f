"""
Date and time normalization helpers.

Storage rows, API payloads and chatbot requests hand us dates as native
objects, ISO timestamps or plain ``YYYY-MM-DD`` strings, and times with or
without seconds. Everything that compares dates or times goes through these
functions first.

Malformed input is passed through unchanged instead of raising: records come
from storage and are trusted to be well formed.
"""

import re
from datetime import date, datetime, time
from typing import Any, Optional

import pendulum
from pendulum import Date

_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)(?::([0-5]\d))?$")
_DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")


def normalize_date(value: Any) -> Any:
    """
    Normalize a date-like value to a ``YYYY-MM-DD`` string.

    - ``datetime``: its UTC calendar date (naive values are taken as UTC)
    - ``date``: ISO format
    - string with an ISO ``T`` marker: the part before the first ``T``
    - anything else: returned unchanged
    """
    if isinstance(value, datetime):
        return pendulum.instance(value).in_timezone("UTC").to_date_string()

    if isinstance(value, date):
        return value.isoformat()

    if isinstance(value, str) and "T" in value:
        return value.split("T", 1)[0]

    return value


def normalize_time(value: Any) -> Optional[str]:
    """
    Normalize a time of day to ``HH:MM:SS``.

    ``HH:MM`` gets ``:00`` appended, ``HH:MM:SS`` is kept, falsy values
    become ``None`` and anything else is returned unchanged.
    """
    if not value:
        return None

    if isinstance(value, time):
        return value.strftime("%H:%M:%S")

    if not isinstance(value, str):
        return value

    if len(value) == 8 and len(value.split(":")) == 3:
        return value

    if len(value) == 5 and len(value.split(":")) == 2:
        return f"{value}:00"

    return value


def is_valid_time_format(value: Any) -> bool:
    """Check for ``HH:MM`` or ``HH:MM:SS`` with hour 00-23 and minute/second 00-59."""
    if not value or not isinstance(value, str):
        return False
    return _TIME_PATTERN.fullmatch(value) is not None


def parse_calendar_date(value: Any) -> Date | None:
    """
    Build a date-only value from any accepted date input.

    Returns None when the normalized value is not a valid ``YYYY-MM-DD`` date.
    """
    normalized = normalize_date(value)
    if not isinstance(normalized, str) or not _DATE_PATTERN.fullmatch(normalized):
        return None

    try:
        return pendulum.from_format(normalized, "YYYY-MM-DD").date()
    except ValueError:
        return None


def add_minutes(time_of_day: str, minutes: int) -> str:
    """
    Add minutes to a time of day and return it as ``HH:MM:SS``.

    The result wraps around midnight, callers decide whether that is allowed.
    """
    base = pendulum.from_format(normalize_time(time_of_day), "HH:mm:ss")
    return base.add(minutes=minutes).format("HH:mm:ss")
