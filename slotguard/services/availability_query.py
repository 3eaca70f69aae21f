"""
Batch availability lookups for the read path.

Calendar views and the booking assistant ask about many slots at once. The
service fetches blackouts and appointments for the whole date range with two
aggregate reads, then checks every slot in memory with the same rules the
booking path uses. Unavailability is data here: nothing is raised, each slot
is tagged available or not with a reason at the requested disclosure level.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol, Sequence

import pendulum

from ..domain.availability_rules import appointment_blocks_slot, blackout_affects_slot, slot_problem
from ..domain.messages import format_appointment_message, format_blackout_message
from ..domain.models import (
    Appointment,
    BlackoutPeriod,
    CandidateSlot,
    DayAvailability,
    DisclosureLevel,
    ProfessionalAvailability,
    SlotAvailability,
    TimeRange,
    WorkingHours,
)
from ..domain.normalization import add_minutes, is_valid_time_format, normalize_time, parse_calendar_date

logger = logging.getLogger(__name__)


class RangeRecordSource(Protocol):
    """Protocol describing the aggregate reads needed for batch lookups."""

    async def get_blackouts_in_range(
        self,
        professional_ids: Sequence[int],
        start_date: str,
        end_date: str,
    ) -> List[BlackoutPeriod]:
        """Return organization-wide and professional blackouts intersecting the range."""

    async def get_appointments_in_range(
        self,
        professional_ids: Sequence[int],
        start_date: str,
        end_date: str,
    ) -> List[Appointment]:
        """Return active appointments of the professionals within the range."""


class AvailabilityQueryService:
    """
    Classifies many candidate slots against pre-fetched records.

    ``working_hours`` is only needed by ``find_availability``, which
    generates the candidate slots itself.
    """

    def __init__(
        self,
        record_source: RangeRecordSource,
        working_hours: Optional[WorkingHours] = None,
    ) -> None:
        self._record_source = record_source
        self._working_hours = working_hours

    def check_slots(
        self,
        slots: Sequence[CandidateSlot],
        blackouts: Sequence[BlackoutPeriod],
        appointments: Sequence[Appointment],
        *,
        level: DisclosureLevel | str = DisclosureLevel.FULL,
        exclude_appointment_id: Optional[int] = None,
    ) -> List[SlotAvailability]:
        """
        Tag each slot as available or not, in memory.

        Slots the booking path would reject as malformed (unreadable date,
        bad time format, end not after start) are unavailable with that
        reason. Otherwise appointments are checked before blackouts. The
        appointment being rescheduled (``exclude_appointment_id``) never blocks.
        """
        level = DisclosureLevel(level)

        if exclude_appointment_id is not None:
            appointments = [a for a in appointments if a.id != exclude_appointment_id]

        results: List[SlotAvailability] = []

        for slot in slots:
            results.append(self._check_slot(slot, blackouts, appointments, level))

        logger.debug(
            "Checked %d slots: %d available, %d unavailable",
            len(results),
            sum(1 for r in results if r.available),
            sum(1 for r in results if not r.available),
        )
        return results

    async def check_candidate_slots(
        self,
        slots: Sequence[CandidateSlot],
        *,
        level: DisclosureLevel | str = DisclosureLevel.FULL,
        exclude_appointment_id: Optional[int] = None,
    ) -> List[SlotAvailability]:
        """Fetch the records covering all slots once, then check them in memory."""
        if not slots:
            return []

        professional_ids = sorted({slot.professional_id for slot in slots})
        days = sorted(
            day for day in (parse_calendar_date(slot.date) for slot in slots) if day is not None
        )
        if not days:
            # Every slot is malformed, nothing to read
            return self.check_slots(slots, [], [], level=level)

        blackouts, appointments = await self.fetch_records(
            professional_ids=professional_ids,
            start_date=days[0].to_date_string(),
            end_date=days[-1].to_date_string(),
        )

        return self.check_slots(
            slots,
            blackouts,
            appointments,
            level=level,
            exclude_appointment_id=exclude_appointment_id,
        )

    async def fetch_records(
        self,
        *,
        professional_ids: Sequence[int],
        start_date: str,
        end_date: str,
    ) -> tuple[List[BlackoutPeriod], List[Appointment]]:
        """Run the two aggregate reads for the whole range."""
        professional_list = list(professional_ids)

        blackouts = await self._record_source.get_blackouts_in_range(
            professional_list, start_date, end_date
        )
        appointments = await self._record_source.get_appointments_in_range(
            professional_list, start_date, end_date
        )

        logger.debug(
            "Loaded %d blackouts and %d appointments for %d professionals (%s to %s)",
            len(blackouts), len(appointments), len(professional_list), start_date, end_date,
        )
        return list(blackouts), list(appointments)

    async def find_availability(
        self,
        *,
        professional_ids: Sequence[int],
        start_date,
        range_days: int = 1,
        duration_minutes: int = 30,
        interval_minutes: int = 30,
        specific_time: Optional[str] = None,
        only_available: bool = True,
        level: DisclosureLevel | str = DisclosureLevel.FULL,
        exclude_appointment_id: Optional[int] = None,
    ) -> List[DayAvailability]:
        """
        Generate slots inside working hours and report availability per day.

        Args:
            professional_ids: Professionals to look up
            start_date: First day (date, datetime or ISO string)
            range_days: Number of consecutive days
            duration_minutes: Length of the appointment being looked for
            interval_minutes: Step between consecutive slot starts
            specific_time: Only consider the slot starting at this time
            only_available: Drop unavailable slots from the result
            level: Disclosure level of the reasons
            exclude_appointment_id: Appointment being rescheduled

        Returns:
            One DayAvailability per day in the range
        """
        if self._working_hours is None:
            raise ValueError("find_availability requires working hours")
        if range_days < 1:
            raise ValueError("range_days must be at least 1")
        if duration_minutes <= 0 or interval_minutes <= 0:
            raise ValueError("duration_minutes and interval_minutes must be greater than zero")

        first_day = parse_calendar_date(start_date)
        if first_day is None:
            raise ValueError(f"Invalid start date: {start_date!r}")

        days = [first_day.add(days=offset) for offset in range(range_days)]
        professional_list = list(professional_ids)

        blackouts, appointments = await self.fetch_records(
            professional_ids=professional_list,
            start_date=days[0].to_date_string(),
            end_date=days[-1].to_date_string(),
        )

        results: List[DayAvailability] = []

        for day in days:
            day_result = DayAvailability(
                date=day.to_date_string(),
                weekday=day.format("dddd").lower(),
            )

            window = self._working_hours.get_window_for_day(day)
            if window is None:
                results.append(day_result)
                continue

            start_times = self.generate_start_times(
                window,
                duration_minutes=duration_minutes,
                interval_minutes=interval_minutes,
                specific_time=specific_time,
            )

            for professional_id in professional_list:
                slots = [
                    CandidateSlot(
                        professional_id=professional_id,
                        date=day_result.date,
                        time_range=TimeRange(
                            start_time=start,
                            end_time=add_minutes(start, duration_minutes),
                        ),
                    )
                    for start in start_times
                ]
                if not slots:
                    continue

                checked = self.check_slots(
                    slots,
                    blackouts,
                    appointments,
                    level=level,
                    exclude_appointment_id=exclude_appointment_id,
                )
                if only_available:
                    checked = [c for c in checked if c.available]
                    if not checked:
                        continue

                day_result.professionals.append(
                    ProfessionalAvailability(
                        professional_id=professional_id,
                        slots=checked,
                        working_window=window,
                    )
                )

            results.append(day_result)

        logger.info(
            "Availability lookup for %d days: %d available slots",
            len(results), sum(d.total_available for d in results),
        )
        return results

    @staticmethod
    def generate_start_times(
        window: TimeRange,
        *,
        duration_minutes: int,
        interval_minutes: int,
        specific_time: Optional[str] = None,
    ) -> List[str]:
        """
        Slot start times every ``interval_minutes`` within a working window.

        A slot is only generated when it ends inside the window.
        """
        if interval_minutes <= 0:
            raise ValueError("interval_minutes must be greater than zero")

        wanted = normalize_time(specific_time)
        day = pendulum.datetime(2000, 1, 1)
        window_start = day.set(
            hour=int(window.start_time[:2]),
            minute=int(window.start_time[3:5]),
        )
        window_end = day.set(
            hour=int(window.end_time[:2]),
            minute=int(window.end_time[3:5]),
        )

        start_times: List[str] = []
        current = window_start

        while current.add(minutes=duration_minutes) <= window_end:
            formatted = current.format("HH:mm:ss")
            if wanted is None:
                start_times.append(formatted)
            elif formatted == wanted:
                return [formatted]
            current = current.add(minutes=interval_minutes)

        return start_times

    @staticmethod
    def _check_slot(
        slot: CandidateSlot,
        blackouts: Sequence[BlackoutPeriod],
        appointments: Sequence[Appointment],
        level: DisclosureLevel,
    ) -> SlotAvailability:
        problem = slot_problem(slot)
        if problem is not None:
            return SlotAvailability(slot=slot, available=False, reason=problem)

        duration = _duration_minutes(slot.time_range)

        conflict = next(
            (a for a in appointments if appointment_blocks_slot(a, slot)),
            None,
        )
        if conflict is not None:
            is_admin = level is DisclosureLevel.ADMIN
            return SlotAvailability(
                slot=slot,
                available=False,
                reason=format_appointment_message(conflict, level),
                appointment_id=conflict.id if is_admin else None,
                customer_name=conflict.customer_name if is_admin else None,
            )

        blackout = next(
            (b for b in blackouts if blackout_affects_slot(b, slot)),
            None,
        )
        if blackout is not None:
            return SlotAvailability(
                slot=slot,
                available=False,
                reason=format_blackout_message(blackout, level),
            )

        return SlotAvailability(slot=slot, available=True, available_minutes=duration)


def _duration_minutes(time_range: TimeRange) -> int:
    start, end = time_range.start_time, time_range.end_time
    if not (is_valid_time_format(start) and is_valid_time_format(end)):
        return 0
    if not time_range.is_well_formed():
        return 0
    try:
        start_dt = pendulum.from_format(start, "HH:mm:ss")
        end_dt = pendulum.from_format(end, "HH:mm:ss")
    except ValueError:
        return 0
    return int((end_dt - start_dt).total_seconds() / 60)
