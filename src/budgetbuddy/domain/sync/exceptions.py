"""Sync domain exceptions.

Raised by the session manager and by review actions when a pipeline step
is attempted against the wrong session, in the wrong stage, or with input
that would produce an invalid export.
"""

from budgetbuddy.domain.shared.exceptions import (
    DomainException,
    EntityNotFoundError,
    ErrorCode,
    ValidationError,
)


class SyncDomainError(DomainException):
    """Base exception for sync session errors."""


class NoActiveSessionError(SyncDomainError):
    """Raised when an operation needs a session but none was started."""

    def __init__(self, message: str = "No active sync session. Start a new sync first.") -> None:
        super().__init__(message=message, code=ErrorCode.NO_ACTIVE_SESSION)


class SessionNotFoundError(EntityNotFoundError):
    """Raised when the caller's session ID is not the active session."""

    def __init__(self, session_id: str) -> None:
        super().__init__(
            message=f"Sync session {session_id} not found",
            code=ErrorCode.SESSION_NOT_FOUND,
            details={"session_id": session_id},
        )
        self.session_id = session_id


class InvalidSessionStateError(SyncDomainError):
    """Raised when a step is triggered in the wrong pipeline stage."""

    def __init__(self, expected: str, actual: str) -> None:
        super().__init__(
            message=f"Sync session is in state '{actual}', expected '{expected}'",
            code=ErrorCode.INVALID_SESSION_STATE,
            details={"expected": expected, "actual": actual},
        )
        self.expected = expected
        self.actual = actual


class TransactionNotFoundError(EntityNotFoundError):
    """Raised when a transaction ID is not part of the active session."""

    def __init__(self, transaction_id: str) -> None:
        super().__init__(
            message=f"Transaction {transaction_id} not found in sync session",
            code=ErrorCode.TRANSACTION_NOT_FOUND,
            details={"transaction_id": transaction_id},
        )
        self.transaction_id = transaction_id


class InvalidSplitError(ValidationError):
    """Raised when splits do not form a valid breakdown of the amount."""

    def __init__(self, reason: str, transaction_id: str | None = None) -> None:
        super().__init__(
            message=f"Invalid split: {reason}",
            code=ErrorCode.INVALID_SPLIT,
            details={"reason": reason, "transaction_id": transaction_id},
        )
        self.reason = reason


class RuleCompilationError(ValidationError):
    """Raised when one or more categorization rules fail to compile."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__(
            message=f"{len(errors)} rule(s) failed to compile: " + "; ".join(errors),
            code=ErrorCode.RULE_COMPILATION_FAILED,
            details={"errors": list(errors)},
        )
        self.errors = list(errors)
