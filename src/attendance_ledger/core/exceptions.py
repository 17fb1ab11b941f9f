from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    def __init__(self, message: str, *, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class NotFoundError(DomainError):
    """Raised when a referenced user, request or aggregate does not exist."""

    def __init__(self, entity: str, key: object):
        super().__init__(f"{entity} not found: {key}")
        self.entity = entity
        self.key = key


class AlreadyProcessedError(DomainError):
    """Raised when a transition is attempted on a request in a terminal state."""

    def __init__(self, status):
        label = getattr(status, "value", status)
        super().__init__(f"Request already {label}")
        self.status = status


class InvariantViolation(DomainError):
    """Raised when stored derived data disagrees with a recompute."""
