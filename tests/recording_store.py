"""
Record store that remembers which reads were made.
"""

from slotguard.adapters.record_store import InMemoryRecordStore


class RecordingRecordStore(InMemoryRecordStore):
    """InMemoryRecordStore that logs the name of every read in ``calls``."""

    def __init__(self, blackouts=(), appointments=()):
        super().__init__(blackouts=blackouts, appointments=appointments)
        self.calls = []

    async def get_blackouts(self, professional_id, date):
        self.calls.append("get_blackouts")
        return await super().get_blackouts(professional_id, date)

    async def get_appointments(self, professional_id, date, exclude_appointment_id=None):
        self.calls.append("get_appointments")
        return await super().get_appointments(
            professional_id, date, exclude_appointment_id=exclude_appointment_id
        )

    async def get_blackouts_in_range(self, professional_ids, start_date, end_date):
        self.calls.append("get_blackouts_in_range")
        return await super().get_blackouts_in_range(professional_ids, start_date, end_date)

    async def get_appointments_in_range(self, professional_ids, start_date, end_date):
        self.calls.append("get_appointments_in_range")
        return await super().get_appointments_in_range(professional_ids, start_date, end_date)
