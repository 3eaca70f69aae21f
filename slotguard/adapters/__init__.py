"""
Adapters layer - Record sources feeding the availability checks.
"""

from .record_store import InMemoryRecordStore

__all__ = ["InMemoryRecordStore"]
