"""
Error taxonomy shared by the services and the HTTP layer.

Every error carries a short machine readable ``kind`` and the HTTP
status it maps to, so request handlers never need to inspect messages.
"""


class CirculationError(Exception):
    """Base exception for library circulation errors."""

    kind = "error"
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"detail": self.message, "error": self.kind}


class ValidationError(CirculationError):
    """Required input is missing or malformed."""

    kind = "validation_error"
    status_code = 400


class NotFoundError(CirculationError):
    """Referenced book, member, loan or transaction does not exist."""

    kind = "not_found"
    status_code = 404


class ConflictError(CirculationError):
    """Requested transition is not allowed from the book's current status."""

    kind = "conflict"
    status_code = 409


class InconsistentStateError(CirculationError):
    """A dependent write failed after the book status change was committed."""

    kind = "inconsistent_state"
    status_code = 500


class StoreError(CirculationError):
    """The underlying SQLite store failed."""

    kind = "store_error"
    status_code = 500
