"""
Domain models for slot availability checks.
"""

from dataclasses import dataclass, field
from datetime import time
from enum import Enum
from typing import Any, FrozenSet, List, Mapping, Optional

from pendulum import Date, DateTime

from .normalization import normalize_date, normalize_time


class AppointmentStatus(str, Enum):
    """Lifecycle states of an appointment as stored."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


# Appointments in these states never occupy their time range
NON_BLOCKING_STATUSES: FrozenSet[str] = frozenset(
    {AppointmentStatus.CANCELLED.value, AppointmentStatus.NO_SHOW.value}
)


class DisclosureLevel(str, Enum):
    """
    How much detail a rejection reason may reveal.

    basic: customers, full: the booking assistant, admin: staff.
    """
    BASIC = "basic"
    FULL = "full"
    ADMIN = "admin"


@dataclass(frozen=True)
class TimeRange:
    """
    Half-open time-of-day range ``[start_time, end_time)`` within one day.

    Both ends are normalized to ``HH:MM:SS``. Unlike a calendar event, a
    range whose start is not before its end is representable here; it simply
    never overlaps anything.
    """
    start_time: str
    end_time: str

    def __post_init__(self):
        object.__setattr__(self, "start_time", normalize_time(self.start_time))
        object.__setattr__(self, "end_time", normalize_time(self.end_time))

    def is_well_formed(self) -> bool:
        """Return True when start is strictly before end."""
        if not self.start_time or not self.end_time:
            return False
        return self.start_time < self.end_time

    def __str__(self) -> str:
        return f"{self.start_time} - {self.end_time}"


@dataclass(frozen=True)
class CandidateSlot:
    """A professional's slot being tested for availability."""
    professional_id: int
    date: str
    time_range: TimeRange

    def __post_init__(self):
        object.__setattr__(self, "date", normalize_date(self.date))

    @classmethod
    def build(cls, professional_id: int, date: Any, start_time: Any, end_time: Any) -> "CandidateSlot":
        return cls(
            professional_id=professional_id,
            date=date,
            time_range=TimeRange(start_time=start_time, end_time=end_time),
        )


@dataclass(frozen=True)
class BlackoutPeriod:
    """
    A period during which bookings are blocked.

    ``professional_id`` None means organization-wide. Both hours None
    means the whole day of every date in the span.
    """
    professional_id: Optional[int]
    date_start: Any
    date_end: Any
    hours_start: Optional[str] = None
    hours_end: Optional[str] = None
    title: str = ""
    id: Optional[int] = None
    blackout_type: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "hours_start", normalize_time(self.hours_start))
        object.__setattr__(self, "hours_end", normalize_time(self.hours_end))

    @property
    def is_organizational(self) -> bool:
        return self.professional_id is None

    @property
    def is_full_day(self) -> bool:
        return self.hours_start is None and self.hours_end is None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "BlackoutPeriod":
        """Build a blackout from a storage row."""
        return cls(
            professional_id=record.get("professional_id"),
            date_start=record["date_start"],
            date_end=record["date_end"],
            hours_start=record.get("hours_start"),
            hours_end=record.get("hours_end"),
            title=record.get("title") or "",
            id=record.get("id"),
            blackout_type=record.get("blackout_type"),
        )


@dataclass(frozen=True)
class Appointment:
    """An existing appointment occupying a professional's time."""
    professional_id: int
    appointment_date: Any
    time_range: TimeRange
    status: Optional[str] = AppointmentStatus.CONFIRMED.value
    code: Optional[str] = None
    customer_name: Optional[str] = None
    id: Optional[int] = None

    def __post_init__(self):
        if isinstance(self.status, AppointmentStatus):
            object.__setattr__(self, "status", self.status.value)

    @property
    def is_blocking_status(self) -> bool:
        return self.status not in NON_BLOCKING_STATUSES

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Appointment":
        """Build an appointment from a storage row."""
        return cls(
            professional_id=record["professional_id"],
            appointment_date=record["appointment_date"],
            time_range=TimeRange(
                start_time=record["start_time"],
                end_time=record["end_time"],
            ),
            status=record.get("status"),
            code=record.get("code"),
            customer_name=record.get("customer_name"),
            id=record.get("id"),
        )


@dataclass(frozen=True)
class SlotAvailability:
    """
    Availability verdict for one candidate slot.

    ``appointment_id`` and ``customer_name`` are only filled in at the
    admin disclosure level.
    """
    slot: CandidateSlot
    available: bool
    reason: Optional[str] = None
    available_minutes: int = 0
    appointment_id: Optional[int] = None
    customer_name: Optional[str] = None


@dataclass
class ProfessionalAvailability:
    """All checked slots of one professional on one day."""
    professional_id: int
    slots: List[SlotAvailability]
    working_window: TimeRange

    @property
    def total_available(self) -> int:
        return sum(1 for s in self.slots if s.available)


@dataclass
class DayAvailability:
    """Availability of every requested professional on one day."""
    date: str
    weekday: str
    professionals: List[ProfessionalAvailability] = field(default_factory=list)

    @property
    def total_available(self) -> int:
        return sum(p.total_available for p in self.professionals)


@dataclass
class WorkingHours:
    """
    Configuration for working hours.
    """
    start_time: time
    end_time: time
    exclude_weekdays: List[int]  # 0=Monday, 6=Sunday
    timezone: str = "Europe/Madrid"

    def is_working_day(self, day: Date | DateTime) -> bool:
        """Check if a given date falls on a working day."""
        return day.weekday() not in self.exclude_weekdays

    def get_window_for_day(self, day: Date | DateTime) -> TimeRange | None:
        """
        Get the working window for a specific day.
        Returns None if it's not a working day.
        """
        if not self.is_working_day(day):
            return None

        return TimeRange(start_time=self.start_time, end_time=self.end_time)
