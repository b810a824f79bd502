class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InvalidIntervalError(ValidationError):
    """Raised when an interval ends before it starts."""


class StateError(DomainError):
    """Raised when an action is illegal for the entry's current status."""


class DuplicateClockInError(StateError):
    pass


class NoActiveShiftError(StateError):
    pass


class NoOpenBreakError(StateError):
    pass


class BreakAlreadyOpenError(StateError):
    pass


class InvalidStateError(StateError):
    pass


class AuthorizationError(DomainError):
    """Raised when an actor lacks permission for an action."""


class ConcurrentModificationError(DomainError):
    """Raised when an entry changed between read and write."""


class NotFoundError(DomainError):
    """Raised when a time entry or employee reference does not exist."""


class ExportError(DomainError):
    """Raised when an export cannot be produced."""


class ExportCancelledError(ExportError):
    pass
