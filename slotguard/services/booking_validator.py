"""
Single-slot availability check for the booking (write) path.

Creating, editing or rescheduling an appointment validates exactly one slot
against freshly fetched records and raises when the slot is taken, so the
surrounding request handler aborts the write.

Reads happen per call and are not locked: two concurrent bookings can both
pass validation. The backing store must enforce an exclusion constraint on
(professional, date, overlapping time range) to close that race.

The read path counterpart is ``AvailabilityQueryService``; both use the same
rules from ``slotguard.domain.availability_rules``.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol

from ..domain.availability_rules import appointment_blocks_slot, blackout_affects_slot, slot_problem
from ..domain.exceptions import InvalidSlotError, SlotUnavailableError
from ..domain.messages import (
    describe_appointment_conflict,
    format_appointment_message,
    format_blackout_message,
)
from ..domain.models import Appointment, BlackoutPeriod, CandidateSlot, DisclosureLevel, WorkingHours
from ..domain.normalization import parse_calendar_date

logger = logging.getLogger(__name__)


class BookingRecordSource(Protocol):
    """Protocol describing the targeted reads needed to validate one slot."""

    async def get_blackouts(self, professional_id: int, date: str) -> List[BlackoutPeriod]:
        """Return organization-wide and professional blackouts active on the date."""

    async def get_appointments(
        self,
        professional_id: int,
        date: str,
        exclude_appointment_id: Optional[int] = None,
    ) -> List[Appointment]:
        """Return the professional's active appointments on the date."""


class BookingValidator:
    """
    Validates a single candidate slot before an appointment is written.

    Error messages use the admin disclosure level: this path only runs in
    authenticated staff and booking flows. When ``working_hours`` is given,
    slots on days off or outside the daily window are rejected too.
    """

    def __init__(
        self,
        record_source: BookingRecordSource,
        working_hours: Optional[WorkingHours] = None,
    ) -> None:
        self._record_source = record_source
        self._working_hours = working_hours

    async def validate_slot(
        self,
        slot: CandidateSlot,
        *,
        exclude_appointment_id: Optional[int] = None,
        allow_outside_hours: bool = False,
    ) -> CandidateSlot:
        """
        Ensure the slot can be booked.

        Args:
            slot: Slot requested for the appointment
            exclude_appointment_id: Appointment being rescheduled, ignored
                when looking for conflicts
            allow_outside_hours: Accept a slot outside the daily working
                window. Days off are still rejected.

        Returns:
            The normalized slot

        Raises:
            InvalidSlotError: If the date or times are malformed, the range
                crosses midnight, or the slot is outside working hours
            SlotUnavailableError: If a blackout or an appointment occupies the slot
        """
        self.validate_time_range(slot)
        self.validate_working_hours(slot, allow_outside_hours=allow_outside_hours)

        logger.debug(
            "Validating slot %s %s for professional %s",
            slot.date, slot.time_range, slot.professional_id,
        )

        blackouts = await self._record_source.get_blackouts(slot.professional_id, slot.date)
        for blackout in blackouts:
            if blackout_affects_slot(blackout, slot):
                message = format_blackout_message(blackout, DisclosureLevel.ADMIN)
                logger.warning(
                    "Slot %s %s blocked by blackout %s (%s)",
                    slot.date, slot.time_range, blackout.id, blackout.title,
                )
                raise SlotUnavailableError(message, reason="blackout", slot=slot)

        appointments = await self._record_source.get_appointments(
            slot.professional_id,
            slot.date,
            exclude_appointment_id=exclude_appointment_id,
        )
        for appointment in appointments:
            if exclude_appointment_id is not None and appointment.id == exclude_appointment_id:
                continue
            if appointment_blocks_slot(appointment, slot):
                logger.warning(
                    "Slot %s %s conflicts with appointment %s",
                    slot.date, slot.time_range, appointment.code or appointment.id,
                )
                raise SlotUnavailableError(
                    format_appointment_message(appointment, DisclosureLevel.ADMIN),
                    reason="appointment",
                    slot=slot,
                    detail=describe_appointment_conflict(appointment),
                )

        logger.info(
            "Slot %s %s is available for professional %s",
            slot.date, slot.time_range, slot.professional_id,
        )
        return slot

    @staticmethod
    def validate_time_range(slot: CandidateSlot) -> None:
        """
        Reject unreadable dates, malformed times and ranges crossing midnight.

        Stored appointments require the end to be after the start on the
        same day.
        """
        problem = slot_problem(slot)
        if problem is not None:
            logger.error("Rejected slot for professional %s: %s", slot.professional_id, problem)
            raise InvalidSlotError(problem)

    def validate_working_hours(self, slot: CandidateSlot, *, allow_outside_hours: bool = False) -> None:
        """Reject slots on days off, and outside the daily window unless explicitly allowed."""
        if self._working_hours is None:
            return

        day = parse_calendar_date(slot.date)
        window = self._working_hours.get_window_for_day(day)
        if window is None:
            raise InvalidSlotError(
                f"The professional does not work on {day.format('dddd')}s ({slot.date})."
            )

        inside = (
            slot.time_range.start_time >= window.start_time
            and slot.time_range.end_time <= window.end_time
        )
        if inside:
            return

        if not allow_outside_hours:
            raise InvalidSlotError(
                f"The time {slot.time_range} is outside working hours ({window})."
            )

        logger.warning(
            "Slot %s %s is outside working hours %s (explicitly allowed)",
            slot.date, slot.time_range, window,
        )
