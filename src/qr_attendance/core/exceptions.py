class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InputError(ValidationError):
    """Raised when a scan request carries a malformed payload."""


class InvalidTransitionError(DomainError):
    """Raised when a scan state machine is driven out of order or reused."""


class BusyError(DomainError):
    """Raised when a device already has a scan in flight."""


class DuplicateRecordError(DomainError):
    """Raised by a store when (student_id, attendance_date) already exists."""


class RecordError(DomainError):
    """Base for failures while reading or writing attendance."""


class AlreadyRecordedError(RecordError):
    """The target field was already written by someone else."""


class StorageUnavailableError(RecordError):
    """The student or attendance store could not be reached."""


class StorageTimeoutError(RecordError):
    """A lookup or write did not finish within the allotted time."""
