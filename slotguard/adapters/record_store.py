"""
In-memory blackout and appointment store.

Serves both record-source protocols from lists held in memory, optionally
loaded from a JSON or YAML data file. It answers the same questions the
database queries answer:

- blackouts active for a professional (or organization-wide) on a date or
  intersecting a date range
- a professional's non-cancelled, non-no-show appointments on a date or
  within a date range
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

import yaml

from ..domain.exceptions import RecordSourceError
from ..domain.models import NON_BLOCKING_STATUSES, Appointment, BlackoutPeriod
from ..domain.normalization import normalize_date

logger = logging.getLogger(__name__)


class InMemoryRecordStore:
    """
    Record source backed by in-memory lists.

    Implements ``BookingRecordSource`` and ``RangeRecordSource``.
    """

    def __init__(
        self,
        blackouts: Iterable[BlackoutPeriod] = (),
        appointments: Iterable[Appointment] = (),
    ):
        self.blackouts: List[BlackoutPeriod] = list(blackouts)
        self.appointments: List[Appointment] = list(appointments)

    @classmethod
    def load_from_file(cls, data_path: Path) -> "InMemoryRecordStore":
        """
        Load records from a JSON or YAML file.

        The document must be a mapping with optional ``blackouts`` and
        ``appointments`` lists of storage-shaped records.

        Raises:
            FileNotFoundError: If the data file doesn't exist
            RecordSourceError: If the file cannot be parsed
        """
        if not data_path.exists():
            raise FileNotFoundError(f"Data file not found: {data_path}")

        try:
            with open(data_path, "r", encoding="utf-8") as f:
                if data_path.suffix.lower() == ".json":
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f) or {}
        except (json.JSONDecodeError, yaml.YAMLError) as exc:
            raise RecordSourceError(f"Invalid data file {data_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise RecordSourceError("Data file must contain a mapping at the root level.")

        return cls.from_records(
            blackouts=data.get("blackouts") or [],
            appointments=data.get("appointments") or [],
        )

    @classmethod
    def from_records(
        cls,
        *,
        blackouts: Sequence[Dict[str, Any]],
        appointments: Sequence[Dict[str, Any]],
    ) -> "InMemoryRecordStore":
        """Build a store from storage rows, skipping rows with missing fields."""
        parsed_blackouts: List[BlackoutPeriod] = []
        parsed_appointments: List[Appointment] = []

        for record in blackouts:
            try:
                parsed_blackouts.append(BlackoutPeriod.from_record(record))
            except (KeyError, TypeError, AttributeError) as exc:
                logger.warning("Skipping invalid blackout record %r: %s", record, exc)

        for record in appointments:
            try:
                parsed_appointments.append(Appointment.from_record(record))
            except (KeyError, TypeError, AttributeError) as exc:
                logger.warning("Skipping invalid appointment record %r: %s", record, exc)

        return cls(blackouts=parsed_blackouts, appointments=parsed_appointments)

    async def get_blackouts(self, professional_id: int, date: str) -> List[BlackoutPeriod]:
        return self._blackouts_between([professional_id], date, date)

    async def get_appointments(
        self,
        professional_id: int,
        date: str,
        exclude_appointment_id: Optional[int] = None,
    ) -> List[Appointment]:
        appointments = self._appointments_between([professional_id], date, date)
        if exclude_appointment_id is not None:
            appointments = [a for a in appointments if a.id != exclude_appointment_id]
        return appointments

    async def get_blackouts_in_range(
        self,
        professional_ids: Sequence[int],
        start_date: str,
        end_date: str,
    ) -> List[BlackoutPeriod]:
        return self._blackouts_between(professional_ids, start_date, end_date)

    async def get_appointments_in_range(
        self,
        professional_ids: Sequence[int],
        start_date: str,
        end_date: str,
    ) -> List[Appointment]:
        return self._appointments_between(professional_ids, start_date, end_date)

    def _blackouts_between(
        self,
        professional_ids: Sequence[int],
        start_date: Any,
        end_date: Any,
    ) -> List[BlackoutPeriod]:
        start = normalize_date(start_date)
        end = normalize_date(end_date)

        return [
            b for b in self.blackouts
            if (b.professional_id is None or b.professional_id in professional_ids)
            and normalize_date(b.date_start) <= end
            and normalize_date(b.date_end) >= start
        ]

    def _appointments_between(
        self,
        professional_ids: Sequence[int],
        start_date: Any,
        end_date: Any,
    ) -> List[Appointment]:
        start = normalize_date(start_date)
        end = normalize_date(end_date)

        appointments = [
            a for a in self.appointments
            if a.professional_id in professional_ids
            and a.status not in NON_BLOCKING_STATUSES
            and start <= normalize_date(a.appointment_date) <= end
        ]
        return sorted(
            appointments,
            key=lambda a: (normalize_date(a.appointment_date), a.time_range.start_time or ""),
        )
