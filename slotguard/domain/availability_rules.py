"""
Shared availability rules.

Both the booking (write) path and the availability lookup (read) path decide
whether a slot is free with these functions, so a rule change here changes
both verdicts at once. They are pure: no I/O, no exceptions, no state.
"""

import logging
from typing import Any, Optional

from .models import Appointment, BlackoutPeriod, CandidateSlot
from .normalization import is_valid_time_format, normalize_date, normalize_time, parse_calendar_date

logger = logging.getLogger(__name__)


def _comparable_time(value: Any) -> Optional[str]:
    """``HH:MM:SS`` for a time of day, zero-padding a single digit hour; None if unreadable."""
    normalized = normalize_time(value)
    if not isinstance(normalized, str):
        return None
    if is_valid_time_format(normalized):
        return normalized

    padded = normalize_time(f"0{normalized}")
    if is_valid_time_format(padded):
        return padded
    return None


def ranges_overlap(start1, end1, start2, end2) -> bool:
    """
    Check whether two time-of-day ranges overlap.

    Ranges are half-open, so ranges that only touch do not overlap:
    09:00-10:00 and 10:00-11:00 can be booked back to back. A range with a
    missing or unreadable bound overlaps nothing.
    """
    start1, end1 = _comparable_time(start1), _comparable_time(end1)
    start2, end2 = _comparable_time(start2), _comparable_time(end2)

    if None in (start1, end1, start2, end2):
        return False

    return start1 < end2 and end1 > start2


def slot_problem(slot: CandidateSlot) -> Optional[str]:
    """
    Describe why a candidate slot cannot be booked at all, or None if it is well formed.

    The date must be a real ``YYYY-MM-DD`` date, both times ``HH:MM`` or
    ``HH:MM:SS``, and the end after the start on the same day.
    """
    if parse_calendar_date(slot.date) is None:
        return f"Invalid date: {slot.date!r}. Use YYYY-MM-DD."

    start = slot.time_range.start_time
    end = slot.time_range.end_time

    if not is_valid_time_format(start) or not is_valid_time_format(end):
        return f"Invalid time format: {start!r}-{end!r}. Use HH:MM or HH:MM:SS."

    if end <= start:
        return (
            f"Invalid time range: {start}-{end}. "
            f"The appointment cannot cross midnight; the end must be after the start."
        )

    return None


def blackout_affects_slot(blackout: BlackoutPeriod, slot: CandidateSlot) -> bool:
    """
    Check whether a blackout period blocks a candidate slot.

    Order of checks:
    1. Scope: organization-wide blackouts apply to everyone, others only
       to their professional
    2. The slot date must fall inside the blackout's inclusive date span
    3. Full-day blackouts block the whole day
    4. Partial blackouts block when their hours overlap the slot
    """
    if blackout.professional_id is not None and blackout.professional_id != slot.professional_id:
        return False

    slot_day = parse_calendar_date(slot.date)
    if slot_day is None:
        # Callers reject such slots through slot_problem before asking
        logger.debug("Cannot match blackout %s against unreadable slot date %r", blackout.id, slot.date)
        return False

    span_start = parse_calendar_date(blackout.date_start)
    span_end = parse_calendar_date(blackout.date_end)

    if span_start is None or span_end is None:
        logger.warning(
            "Ignoring blackout %s with unreadable dates (%r to %r)",
            blackout.id, blackout.date_start, blackout.date_end,
        )
        return False

    if slot_day < span_start or slot_day > span_end:
        return False

    if blackout.hours_start is None and blackout.hours_end is None:
        return True

    if blackout.hours_start is not None and blackout.hours_end is not None:
        return ranges_overlap(
            slot.time_range.start_time,
            slot.time_range.end_time,
            blackout.hours_start,
            blackout.hours_end,
        )

    # Only one of the hours is set: the record does not block
    logger.debug(
        "Blackout %s has only one of hours_start/hours_end set, not blocking",
        blackout.id,
    )
    return False


def appointment_blocks_slot(appointment: Appointment, slot: CandidateSlot) -> bool:
    """
    Check whether an existing appointment blocks a candidate slot.

    Cancelled and no-show appointments never block. Appointments without a
    status are treated as active.
    """
    if appointment.professional_id != slot.professional_id:
        return False

    if normalize_date(appointment.appointment_date) != normalize_date(slot.date):
        return False

    if not appointment.is_blocking_status:
        return False

    return ranges_overlap(
        slot.time_range.start_time,
        slot.time_range.end_time,
        appointment.time_range.start_time,
        appointment.time_range.end_time,
    )
