from __future__ import annotations


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class StateViolationError(DomainError):
    """Raised when an action is not allowed from the current tracking state."""


class AlreadyPunchedInError(StateViolationError):
    """Raised when today's record already has a punch-in."""


class NotPunchedInError(StateViolationError):
    """Raised when punching out (or taking a break) without an open record."""


class AlreadyPunchedOutError(StateViolationError):
    """Raised when today's record is already closed."""


class NotWorkingDayError(StateViolationError):
    """Raised when punching in on a day outside the employee's working days."""


class BreakStateError(StateViolationError):
    """Base for break nesting violations."""


class AlreadyOnBreakError(BreakStateError):
    pass


class NotOnBreakError(BreakStateError):
    pass


class IdleStateError(StateViolationError):
    """Raised for manual idle requests that do not fit the current idle state."""


class PunchInProgressError(DomainError):
    """Raised when another request for the same employee is still in flight."""


class DataAccessError(Exception):
    """Raised when the clinic server cannot be reached or rejects a request.

    Transient by nature: the caller may simply try again.
    """

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
