class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InvalidTimeRange(ValidationError):
    """Raised when a start time is not strictly before its end time."""


class AlreadyMarked(DomainError):
    """Raised when attendance for a lecture occurrence was already recorded."""


class SubjectNotFound(DomainError):
    """Raised when the referenced subject does not exist."""


class NotFound(DomainError):
    """Raised when an edit/delete targets a record that does not exist."""


class OverlappingSlot(DomainError):
    """Raised when a timetable slot intersects another slot on the same day."""


class TransactionConflict(DomainError):
    """Raised when the store could not commit a unit of work within its retry budget."""


class AuthenticationError(DomainError):
    """Raised when no user identity accompanies a request."""
