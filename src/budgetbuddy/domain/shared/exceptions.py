"""Shared domain exceptions and error codes.

This module defines the base exception hierarchy and error codes for the
entire domain layer. All domain exceptions inherit from DomainException so
the pipeline boundary can turn them into structured results.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Stable error codes for callers of the sync pipeline.

    These codes are part of the public contract. Should not be changed.
    """

    # Validation Errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    INVALID_SPLIT = "INVALID_SPLIT"
    RULE_COMPILATION_FAILED = "RULE_COMPILATION_FAILED"

    # Not Found Errors
    ENTITY_NOT_FOUND = "ENTITY_NOT_FOUND"
    TRANSACTION_NOT_FOUND = "TRANSACTION_NOT_FOUND"
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    BUDGET_NOT_FOUND = "BUDGET_NOT_FOUND"
    ACCOUNT_NOT_FOUND = "ACCOUNT_NOT_FOUND"

    # Session State Errors
    NO_ACTIVE_SESSION = "NO_ACTIVE_SESSION"
    INVALID_SESSION_STATE = "INVALID_SESSION_STATE"

    # Banking Errors
    BANK_AUTHENTICATION_FAILED = "BANK_AUTHENTICATION_FAILED"
    BANK_INVALID_CREDENTIALS = "BANK_INVALID_CREDENTIALS"
    BANK_SESSION_EXPIRED = "BANK_SESSION_EXPIRED"
    BANK_NETWORK_ERROR = "BANK_NETWORK_ERROR"
    BANK_INVALID_RESPONSE = "BANK_INVALID_RESPONSE"
    UNSUPPORTED_CHALLENGE = "UNSUPPORTED_CHALLENGE"
    TAN_REJECTED = "TAN_REJECTED"
    TAN_CHALLENGE_EXPIRED = "TAN_CHALLENGE_EXPIRED"

    # Ledger Errors
    LEDGER_UNAUTHORIZED = "LEDGER_UNAUTHORIZED"
    LEDGER_RATE_LIMITED = "LEDGER_RATE_LIMITED"
    LEDGER_NETWORK_ERROR = "LEDGER_NETWORK_ERROR"
    LEDGER_INVALID_RESPONSE = "LEDGER_INVALID_RESPONSE"

    # General Errors
    OPERATION_TIMED_OUT = "OPERATION_TIMED_OUT"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class DomainException(Exception):  # NOQA: N818
    """Base exception for all domain-related errors.

    Attributes
    ----------
    message
        Human-readable error message (safe for end users)
    code
        Stable error code for programmatic handling
    details
        Additional context such as the endpoint, field or transaction
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code.value!r}, "
            f"details={self.details!r})"
        )


class ValidationError(DomainException):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.VALIDATION_ERROR,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message=message, code=code, details=details)


class EntityNotFoundError(DomainException):
    """Raised when a requested entity does not exist."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.ENTITY_NOT_FOUND,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message=message, code=code, details=details)
