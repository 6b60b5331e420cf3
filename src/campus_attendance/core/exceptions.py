from __future__ import annotations

from typing import Optional, Sequence


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    def __init__(self, message: str, details: Optional[Sequence[str]] = None):
        super().__init__(message)
        self.details = list(details or [])


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""


class ConflictError(DomainError):
    """Raised when a session's time windows collide with existing sessions."""

    def __init__(self, message: str, conflicting_sessions: Sequence[str] = ()):
        super().__init__(message)
        self.conflicting_sessions = list(conflicting_sessions)


class ScanSequenceError(DomainError):
    """Raised for out-of-order or repeated scans.

    `duplicate` separates "already scanned" (409) from "wrong order" (400).
    """

    def __init__(self, message: str, *, duplicate: bool = False):
        super().__init__(message)
        self.duplicate = duplicate
