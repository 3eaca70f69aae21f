"""
Domain-specific exception hierarchy for slot availability checks.
"""


class SlotGuardError(Exception):
    """Base class for all application-level errors."""


class SlotValidationError(SlotGuardError):
    """
    A booking cannot proceed because of the requested slot.

    These are client errors: request handlers map ``status_code`` to the
    response and use ``message`` as its body.
    """

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidSlotError(SlotValidationError):
    """Raised when the requested times are malformed or cross midnight."""


class SlotUnavailableError(SlotValidationError):
    """Raised when a blackout period or an appointment occupies the slot."""

    status_code = 409

    def __init__(self, message: str, *, reason: str, slot=None, detail: str | None = None):
        super().__init__(message)
        self.reason = reason
        self.slot = slot
        self.detail = detail or message


class RecordSourceError(SlotGuardError):
    """Raised when blackout or appointment records cannot be loaded."""
