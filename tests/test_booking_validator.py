"""
Tests for the single-slot booking validator.
"""

import asyncio
from datetime import time

import pytest

from recording_store import RecordingRecordStore
from slotguard.domain.exceptions import InvalidSlotError, SlotUnavailableError, SlotValidationError
from slotguard.domain.models import Appointment, BlackoutPeriod, CandidateSlot, TimeRange, WorkingHours
from slotguard.services.booking_validator import BookingValidator


def _appointment(id=10, professional_id=1, start="09:00", end="10:00", status="confirmed"):
    return Appointment(
        professional_id=professional_id,
        appointment_date="2025-10-27",
        time_range=TimeRange(start_time=start, end_time=end),
        status=status,
        code=f"ORG001-{id:04d}",
        customer_name="Ana Torres",
        id=id,
    )


def _validate(store, slot, working_hours=None, **kwargs):
    validator = BookingValidator(record_source=store, working_hours=working_hours)
    return asyncio.run(validator.validate_slot(slot, **kwargs))


class TestBookingValidator:
    """Tests for BookingValidator."""

    def test_free_slot_is_returned_normalized(self):
        """A slot with no conflicts passes and comes back normalized."""
        store = RecordingRecordStore(appointments=[_appointment()])
        slot = CandidateSlot.build(1, "2025-10-27T00:00:00Z", "10:00", "11:00")

        result = _validate(store, slot)

        assert result.date == "2025-10-27"
        assert result.time_range.start_time == "10:00:00"

    def test_blackout_raises_with_admin_message(self):
        """An organization-wide holiday rejects the booking."""
        store = RecordingRecordStore(
            blackouts=[
                BlackoutPeriod(
                    professional_id=None,
                    date_start="2025-10-27",
                    date_end="2025-10-27",
                    title="Holiday",
                    id=1,
                )
            ]
        )
        slot = CandidateSlot.build(1, "2025-10-27", "10:00", "11:00")

        with pytest.raises(SlotUnavailableError) as exc_info:
            _validate(store, slot)

        error = exc_info.value
        assert error.message == "Organizational block: Holiday"
        assert error.reason == "blackout"
        assert error.status_code == 409
        assert error.slot == slot

    def test_appointment_conflict_raises(self):
        """An overlapping appointment rejects the booking."""
        store = RecordingRecordStore(appointments=[_appointment()])
        slot = CandidateSlot.build(1, "2025-10-27", "09:30", "10:30")

        with pytest.raises(SlotUnavailableError) as exc_info:
            _validate(store, slot)

        error = exc_info.value
        assert error.reason == "appointment"
        assert error.message == "Appointment ORG001-0010 - Ana Torres"
        assert "27/10/2025 from 09:00 - 10:00" in error.detail

    def test_unavailable_is_a_client_error(self):
        """Rejections are validation errors with a 4xx status."""
        assert issubclass(SlotUnavailableError, SlotValidationError)
        assert 400 <= SlotUnavailableError.status_code < 500
        assert 400 <= InvalidSlotError.status_code < 500

    def test_rescheduled_appointment_is_ignored(self):
        """Moving an appointment within its own time does not conflict with itself."""
        store = RecordingRecordStore(appointments=[_appointment()])
        slot = CandidateSlot.build(1, "2025-10-27", "09:30", "10:30")

        assert _validate(store, slot, exclude_appointment_id=10) == slot

    def test_cancelled_appointment_does_not_block(self):
        """A cancelled appointment frees its exact time range."""
        store = RecordingRecordStore(appointments=[_appointment(status="cancelled")])
        slot = CandidateSlot.build(1, "2025-10-27", "09:00", "10:00")

        assert _validate(store, slot) == slot

    def test_colleague_appointment_does_not_block(self):
        """Another professional's appointment does not block."""
        store = RecordingRecordStore(appointments=[_appointment(professional_id=2)])
        slot = CandidateSlot.build(1, "2025-10-27", "09:00", "10:00")

        assert _validate(store, slot) == slot

    @pytest.mark.parametrize("start, end", [("9:00", "10:00"), ("09:00", "25:00"), ("", "10:00"), ("09:00\n", "10:00")])
    def test_malformed_times_rejected(self, start, end):
        """Malformed times are rejected before any read."""
        store = RecordingRecordStore()
        slot = CandidateSlot.build(1, "2025-10-27", start, end)

        with pytest.raises(InvalidSlotError):
            _validate(store, slot)
        assert store.calls == []

    def test_midnight_crossing_rejected(self):
        """The end must be after the start on the same day."""
        slot = CandidateSlot.build(1, "2025-10-27", "23:30", "00:30")

        with pytest.raises(InvalidSlotError, match="cannot cross midnight"):
            _validate(RecordingRecordStore(), slot)

    def test_blackouts_checked_before_appointments(self):
        """A blocking blackout stops validation before appointments are read."""
        store = RecordingRecordStore(
            blackouts=[BlackoutPeriod(professional_id=1, date_start="2025-10-27", date_end="2025-10-27")],
            appointments=[_appointment()],
        )
        slot = CandidateSlot.build(1, "2025-10-27", "09:00", "10:00")

        with pytest.raises(SlotUnavailableError) as exc_info:
            _validate(store, slot)

        assert exc_info.value.reason == "blackout"
        assert store.calls == ["get_blackouts"]

    def test_reads_are_targeted(self):
        """A successful validation reads blackouts, then appointments."""
        store = RecordingRecordStore()

        _validate(store, CandidateSlot.build(1, "2025-10-27", "09:00", "10:00"))

        assert store.calls == ["get_blackouts", "get_appointments"]

    @pytest.mark.parametrize("day", ["2025-02-30", "27/10/2025", "2025-10-27 00:00"])
    def test_unreadable_date_rejected(self, day):
        """A date that cannot be placed on the calendar never slips past a blackout."""
        store = RecordingRecordStore(
            blackouts=[
                BlackoutPeriod(
                    professional_id=None,
                    date_start="2025-01-01",
                    date_end="2025-12-31",
                    title="Closed for renovation",
                )
            ]
        )
        slot = CandidateSlot.build(1, day, "10:00", "11:00")

        with pytest.raises(InvalidSlotError, match="Invalid date"):
            _validate(store, slot)
        assert store.calls == []


WORKING_HOURS = WorkingHours(
    start_time=time(9, 0),
    end_time=time(17, 0),
    exclude_weekdays=[6],
    timezone="Europe/Madrid",
)


class TestWorkingHours:
    """Tests for the working hours check of BookingValidator."""

    def test_inside_window(self):
        """A slot ending exactly at closing time is accepted."""
        slot = CandidateSlot.build(1, "2025-10-27", "16:00", "17:00")

        assert _validate(RecordingRecordStore(), slot, WORKING_HOURS) == slot

    def test_day_off_rejected(self):
        """Excluded weekdays are rejected, even when outside hours are allowed."""
        store = RecordingRecordStore()
        slot = CandidateSlot.build(1, "2025-10-26", "10:00", "11:00")

        with pytest.raises(InvalidSlotError, match="does not work on Sundays"):
            _validate(store, slot, WORKING_HOURS)
        with pytest.raises(InvalidSlotError):
            _validate(store, slot, WORKING_HOURS, allow_outside_hours=True)
        assert store.calls == []

    @pytest.mark.parametrize("start, end", [("03:00", "04:00"), ("08:30", "09:30"), ("16:30", "17:30")])
    def test_outside_window_rejected(self, start, end):
        """Slots starting before opening or ending after closing are rejected."""
        slot = CandidateSlot.build(1, "2025-10-27", start, end)

        with pytest.raises(InvalidSlotError, match="outside working hours"):
            _validate(RecordingRecordStore(), slot, WORKING_HOURS)

    def test_outside_window_explicitly_allowed(self):
        """The override accepts a slot outside the window but still checks conflicts."""
        store = RecordingRecordStore(appointments=[_appointment(start="18:00", end="19:00")])
        free = CandidateSlot.build(1, "2025-10-27", "17:00", "18:00")
        taken = CandidateSlot.build(1, "2025-10-27", "18:30", "19:30")

        assert _validate(store, free, WORKING_HOURS, allow_outside_hours=True) == free
        with pytest.raises(SlotUnavailableError):
            _validate(store, taken, WORKING_HOURS, allow_outside_hours=True)

    def test_without_working_hours_any_time_is_accepted(self):
        """Validators built without working hours only check conflicts."""
        slot = CandidateSlot.build(1, "2025-10-26", "03:00", "04:00")

        assert _validate(RecordingRecordStore(), slot) == slot
