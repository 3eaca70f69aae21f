"""
slotguard - appointment slot availability checks.

Shared rules decide whether a professional's slot is blocked by a blackout
period or an existing appointment, for both single-slot booking validation
and batch availability lookups.
"""

__version__ = "1.0.0"
