"""
Domain layer - Pure availability rules without external dependencies.
"""

from .availability_rules import appointment_blocks_slot, blackout_affects_slot, ranges_overlap, slot_problem
from .messages import describe_appointment_conflict, format_appointment_message, format_blackout_message
from .models import (
    Appointment,
    AppointmentStatus,
    BlackoutPeriod,
    CandidateSlot,
    DayAvailability,
    DisclosureLevel,
    ProfessionalAvailability,
    SlotAvailability,
    TimeRange,
    WorkingHours,
)
from .normalization import is_valid_time_format, normalize_date, normalize_time

__all__ = [
    "Appointment",
    "AppointmentStatus",
    "BlackoutPeriod",
    "CandidateSlot",
    "DayAvailability",
    "DisclosureLevel",
    "ProfessionalAvailability",
    "SlotAvailability",
    "TimeRange",
    "WorkingHours",
    "appointment_blocks_slot",
    "blackout_affects_slot",
    "describe_appointment_conflict",
    "format_appointment_message",
    "format_blackout_message",
    "is_valid_time_format",
    "normalize_date",
    "normalize_time",
    "ranges_overlap",
    "slot_problem",
]
