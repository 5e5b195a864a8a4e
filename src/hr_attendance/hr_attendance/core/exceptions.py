from __future__ import annotations

from typing import Any


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""

    def __init__(self, entity: str, key: Any):
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} not found: {key}")


class DuplicateCheckInError(DomainError):
    """Raised when the employee has already checked in today."""


class NoCheckInError(DomainError):
    """Raised on check-out when there is no check-in record for today."""


class AlreadyCheckedOutError(DomainError):
    """Raised on check-out when today's record already has a check-out time."""


class NoActiveScheduleError(DomainError):
    """Raised when no schedule assignment covers the requested date."""


class AlreadyProcessedError(DomainError):
    """Raised when a correction request has already been approved or rejected."""


class StorageError(Exception):
    """Raised when the persistence layer fails (connection loss, timeout, ...).

    Not a DomainError: callers may retry these with backoff.
    """
