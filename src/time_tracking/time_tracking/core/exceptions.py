from __future__ import annotations

from typing import Any, Optional, Sequence


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid.

    ``issues`` carries field-level details, one dict per problem:
    ``{"path": [...], "message": str, "code": str}``.
    """

    def __init__(self, message: str = "Validation failed", issues: Optional[Sequence[dict[str, Any]]] = None):
        super().__init__(message)
        self.issues = list(issues or [])


class NotFoundError(DomainError):
    """Raised when a referenced employee or time entry does not exist."""


class InvalidSequenceError(DomainError):
    """Raised when a new entry type may not follow the employee's last entry."""

    def __init__(self, attempted, previous=None):
        self.attempted = attempted
        self.previous = previous
        if previous is None:
            message = "First time entry must be CLOCK_IN"
        else:
            attempted_name = getattr(attempted, "value", attempted)
            previous_name = getattr(previous, "value", previous)
            message = f"Invalid time entry sequence. Cannot {attempted_name} after {previous_name}"
        super().__init__(message)
