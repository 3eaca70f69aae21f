"""
Human-facing reasons for unavailable slots.

The disclosure level is an information boundary: customers only learn that a
slot is taken, the booking assistant may see blackout titles, and only staff
see appointment codes and customer names.
"""

from .models import Appointment, BlackoutPeriod, DisclosureLevel
from .normalization import normalize_date

DEFAULT_BLACKOUT_TITLE = "Blocked schedule"
DEFAULT_CUSTOMER_NAME = "Customer"


def _coerce_level(level: DisclosureLevel | str) -> DisclosureLevel:
    return DisclosureLevel(level)


def format_blackout_message(
    blackout: BlackoutPeriod,
    level: DisclosureLevel | str = DisclosureLevel.FULL,
) -> str:
    """Render why a blackout makes a slot unavailable."""
    level = _coerce_level(level)
    title = blackout.title or DEFAULT_BLACKOUT_TITLE

    if level is DisclosureLevel.BASIC:
        return "Not available"

    if level is DisclosureLevel.FULL:
        return title

    kind = "Organizational block" if blackout.is_organizational else "Professional's block"
    return f"{kind}: {title}"


def format_appointment_message(
    appointment: Appointment,
    level: DisclosureLevel | str = DisclosureLevel.FULL,
) -> str:
    """Render why an existing appointment makes a slot unavailable."""
    level = _coerce_level(level)

    if level is DisclosureLevel.BASIC:
        return "Busy"

    if level is DisclosureLevel.FULL:
        return "Existing appointment"

    reference = appointment.code or appointment.id
    customer = appointment.customer_name or DEFAULT_CUSTOMER_NAME
    return f"Appointment {reference} - {customer}"


def describe_appointment_conflict(appointment: Appointment) -> str:
    """
    Staff-facing explanation of a double booking.

    Format: Schedule conflict: ... on DD/MM/YYYY from HH:MM - HH:MM.
    """
    raw_date = str(normalize_date(appointment.appointment_date))
    parts = raw_date.split("-")
    display_date = "/".join(reversed(parts)) if len(parts) == 3 else raw_date
    hours = (
        f"{appointment.time_range.start_time[:5]} - "
        f"{appointment.time_range.end_time[:5]}"
    )
    reference = appointment.code or appointment.id

    return (
        f"Schedule conflict: the professional already has appointment {reference} "
        f"on {display_date} from {hours}. "
        f"Please choose another available time."
    )
