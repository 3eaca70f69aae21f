"""
Service layer: the booking (command) and lookup (query) availability checks.
"""

from .availability_query import AvailabilityQueryService, RangeRecordSource
from .booking_validator import BookingRecordSource, BookingValidator

__all__ = [
    "AvailabilityQueryService",
    "BookingRecordSource",
    "BookingValidator",
    "RangeRecordSource",
]
