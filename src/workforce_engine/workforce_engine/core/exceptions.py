from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced employee, shift, configuration or slip does not exist."""


class ConflictError(DomainError):
    """Raised when a write collides with an existing record.

    The colliding record is attached so the caller can resolve it.
    """

    def __init__(self, message: str, *, existing: Optional[Any] = None):
        super().__init__(message)
        self.existing = existing


class OverlapConflictError(ConflictError):
    """A calendar configuration range intersects another one of the same tenant."""


class OpenRecordExistsError(ConflictError):
    """An open-ended calendar configuration must be closed first."""


class BusinessRuleViolation(DomainError):
    """Raised when an operation is not allowed in the current state."""


class AlreadyClockedInError(BusinessRuleViolation):
    def __init__(self, message: str = "Already clocked in for today"):
        super().__init__(message)


class NoActiveClockInError(BusinessRuleViolation):
    def __init__(self, message: str = "No active clock-in found for today"):
        super().__init__(message)


class ConcurrentWriteError(ConflictError):
    """Another transaction wrote the same unique row first."""
