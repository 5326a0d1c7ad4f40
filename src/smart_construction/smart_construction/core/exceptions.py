from __future__ import annotations

from typing import Any, Optional, Sequence


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules.

    `issues` keeps every violated rule in order; the message is the first one.
    """

    def __init__(self, message: str, issues: Optional[Sequence[str]] = None):
        super().__init__(message)
        self.issues = list(issues) if issues else [message]


class NotFoundError(DomainError):
    """Raised when a referenced master record does not exist."""


class WriteVerificationError(DomainError):
    """Raised when a read-back after a write does not match what was written."""

    def __init__(self, message: str, stored: Any = None):
        super().__init__(message)
        self.stored = stored


class PartialWriteError(DomainError):
    """Raised when a multi-record write stopped half way.

    Nothing is rolled back; `written_id` names what was already committed.
    """

    def __init__(self, message: str, written_id: Optional[str] = None):
        super().__init__(message)
        self.written_id = written_id


class ExternalServiceError(DomainError):
    """Raised when the invoice gateway (or another remote API) fails."""

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.code = code
