"""
Tests for domain models.
"""

from datetime import date, time

import pendulum

from slotguard.domain.models import (
    Appointment,
    AppointmentStatus,
    BlackoutPeriod,
    CandidateSlot,
    DayAvailability,
    ProfessionalAvailability,
    SlotAvailability,
    TimeRange,
    WorkingHours,
)


class TestTimeRange:
    """Tests for TimeRange model."""

    def test_times_are_normalized(self):
        """Both ends are stored as HH:MM:SS."""
        tr = TimeRange(start_time="09:00", end_time=time(17, 30))

        assert tr.start_time == "09:00:00"
        assert tr.end_time == "17:30:00"
        assert str(tr) == "09:00:00 - 17:30:00"

    def test_inverted_range_is_representable(self):
        """Inverted ranges are allowed but reported as malformed."""
        tr = TimeRange(start_time="17:00", end_time="09:00")

        assert not tr.is_well_formed()
        assert TimeRange(start_time="09:00", end_time="09:30").is_well_formed()


class TestCandidateSlot:
    """Tests for CandidateSlot model."""

    def test_date_is_normalized(self):
        """Slot dates are stored as YYYY-MM-DD."""
        slot = CandidateSlot.build(1, "2025-10-25T09:00:00Z", "09:00", "10:00")

        assert slot.date == "2025-10-25"
        assert slot.time_range == TimeRange(start_time="09:00:00", end_time="10:00:00")


class TestBlackoutPeriod:
    """Tests for BlackoutPeriod model."""

    def test_scope_and_full_day(self):
        """Scope and full-day flags derive from the stored fields."""
        org = BlackoutPeriod(professional_id=None, date_start="2025-10-25", date_end="2025-10-25")
        own = BlackoutPeriod(
            professional_id=4,
            date_start="2025-10-25",
            date_end="2025-10-25",
            hours_start="13:00",
            hours_end="14:00",
        )

        assert org.is_organizational and org.is_full_day
        assert not own.is_organizational and not own.is_full_day
        assert own.hours_start == "13:00:00"

    def test_from_record(self):
        """Storage rows map onto the model."""
        blackout = BlackoutPeriod.from_record(
            {
                "id": 3,
                "professional_id": 2,
                "date_start": date(2025, 10, 20),
                "date_end": "2025-10-24",
                "hours_start": time(13, 0),
                "hours_end": "14:00:00",
                "title": None,
                "blackout_type": "vacation",
            }
        )

        assert blackout.id == 3
        assert blackout.title == ""
        assert blackout.hours_start == "13:00:00"
        assert blackout.blackout_type == "vacation"


class TestAppointment:
    """Tests for Appointment model."""

    def test_from_record(self):
        """Storage rows map onto the model."""
        appointment = Appointment.from_record(
            {
                "id": 9,
                "professional_id": 1,
                "appointment_date": "2025-10-27",
                "start_time": "09:00",
                "end_time": "10:00",
                "status": "pending",
                "code": "ORG-9",
                "customer_name": "Ana",
            }
        )

        assert appointment.time_range.start_time == "09:00:00"
        assert appointment.is_blocking_status

    def test_enum_status_is_stored_as_value(self):
        """Enum statuses are stored as their string value."""
        appointment = Appointment(
            professional_id=1,
            appointment_date="2025-10-27",
            time_range=TimeRange(start_time="09:00", end_time="10:00"),
            status=AppointmentStatus.NO_SHOW,
        )

        assert appointment.status == "no_show"
        assert not appointment.is_blocking_status


class TestAvailabilityResults:
    """Tests for availability result containers."""

    def test_totals(self):
        """Totals count available slots only."""
        window = TimeRange(start_time="09:00", end_time="17:00")
        slot = CandidateSlot.build(1, "2025-10-27", "09:00", "09:30")
        professional = ProfessionalAvailability(
            professional_id=1,
            slots=[
                SlotAvailability(slot=slot, available=True, available_minutes=30),
                SlotAvailability(slot=slot, available=False, reason="Busy"),
            ],
            working_window=window,
        )
        day = DayAvailability(date="2025-10-27", weekday="monday", professionals=[professional, professional])

        assert professional.total_available == 1
        assert day.total_available == 2


class TestWorkingHours:
    """Tests for WorkingHours model."""

    def test_is_working_day(self):
        """Test working day detection."""
        working_hours = WorkingHours(
            start_time=time(9, 30),
            end_time=time(17, 0),
            exclude_weekdays=[5, 6]  # Saturday, Sunday
        )

        # Monday
        monday = pendulum.parse("2025-10-27", tz="Europe/Madrid")
        assert working_hours.is_working_day(monday)

        # Saturday
        saturday = pendulum.parse("2025-10-25", tz="Europe/Madrid")
        assert not working_hours.is_working_day(saturday)

        # Sunday
        sunday = pendulum.date(2025, 10, 26)
        assert not working_hours.is_working_day(sunday)

    def test_get_window_for_day(self):
        """Test getting the working window for a specific day."""
        working_hours = WorkingHours(
            start_time=time(9, 30),
            end_time=time(17, 0),
            exclude_weekdays=[5, 6]
        )

        window = working_hours.get_window_for_day(pendulum.date(2025, 10, 27))

        assert window == TimeRange(start_time="09:30:00", end_time="17:00:00")

    def test_get_window_for_weekend(self):
        """Test getting the working window for weekend returns None."""
        working_hours = WorkingHours(
            start_time=time(9, 30),
            end_time=time(17, 0),
            exclude_weekdays=[5, 6]
        )

        assert working_hours.get_window_for_day(pendulum.date(2025, 10, 25)) is None
