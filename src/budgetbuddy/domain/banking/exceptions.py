"""Banking domain exceptions.

This module defines the failure taxonomy of the bank protocol client:
authentication and credential failures, TAN challenge outcomes, session
expiry, and transport or decoding errors. Each carries enough context
(endpoint, status, bank message) for the caller to render an actionable
message instead of a raw protocol dump.
"""

from budgetbuddy.domain.shared.exceptions import DomainException, ErrorCode

# =============================================================================
# Base Banking Exception
# =============================================================================


class BankingDomainError(DomainException):
    """Base exception for banking domain errors."""


# =============================================================================
# Authentication Exceptions
# =============================================================================


class AuthenticationFailedError(BankingDomainError):
    """Raised when the bank rejects the access token or login attempt."""

    def __init__(self, detail: str = "Bank authentication failed") -> None:
        super().__init__(
            message=f"Bank authentication failed: {detail}",
            code=ErrorCode.BANK_AUTHENTICATION_FAILED,
            details={"detail": detail},
        )
        self.detail = detail


class InvalidCredentialsError(BankingDomainError):
    """Raised when the password grant is refused (wrong user or PIN)."""

    def __init__(
        self,
        message: str = "Bank rejected the credentials. Please check username and PIN.",
    ) -> None:
        super().__init__(message=message, code=ErrorCode.BANK_INVALID_CREDENTIALS)


class SessionExpiredError(BankingDomainError):
    """Raised when the bank session or token pair is no longer valid."""

    def __init__(
        self,
        message: str = "Bank session expired. Please start a new sync.",
        endpoint: str | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCode.BANK_SESSION_EXPIRED,
            details={"endpoint": endpoint} if endpoint else None,
        )


# =============================================================================
# TAN Exceptions
# =============================================================================


class TanError(BankingDomainError):
    """Base exception for TAN-related errors."""


class UnsupportedChallengeError(TanError):
    """Raised when the bank issues a challenge kind other than push-TAN."""

    def __init__(self, challenge_type: str) -> None:
        super().__init__(
            message=(
                f"Unsupported TAN challenge type '{challenge_type}'. "
                "Only push-TAN approval in the banking app is supported."
            ),
            code=ErrorCode.UNSUPPORTED_CHALLENGE,
            details={"challenge_type": challenge_type},
        )
        self.challenge_type = challenge_type


class TanRejectedError(TanError):
    """Raised when the bank refuses the TAN confirmation.

    The token pair usually stays valid, so the caller may request a new
    challenge without re-entering credentials.
    """

    def __init__(
        self,
        message: str = "TAN was rejected. Request a new challenge and approve it in the app.",
        challenge_id: str | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCode.TAN_REJECTED,
            details={"challenge_id": challenge_id} if challenge_id else None,
        )


class TanChallengeExpiredError(TanError):
    """Raised when the TAN challenge was not approved in time."""

    def __init__(
        self,
        message: str = "TAN challenge expired. Request a new challenge.",
        challenge_id: str | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCode.TAN_CHALLENGE_EXPIRED,
            details={"challenge_id": challenge_id} if challenge_id else None,
        )


# =============================================================================
# Transport Exceptions
# =============================================================================


class BankNetworkError(BankingDomainError):
    """Raised for any non-2xx response that has no more specific meaning."""

    def __init__(
        self,
        status_code: int,
        body: str,
        endpoint: str | None = None,
        bank_message: str | None = None,
    ) -> None:
        summary = bank_message or f"HTTP {status_code}"
        where = f" ({endpoint})" if endpoint else ""
        super().__init__(
            message=f"Bank request failed{where}: {summary}",
            code=ErrorCode.BANK_NETWORK_ERROR,
            details={
                "status_code": status_code,
                "endpoint": endpoint,
                "bank_message": bank_message,
            },
        )
        self.status_code = status_code
        self.body = body
        self.endpoint = endpoint


class BankInvalidResponseError(BankingDomainError):
    """Raised when a bank response fails structural decoding."""

    def __init__(self, detail: str, endpoint: str | None = None) -> None:
        where = f" from {endpoint}" if endpoint else ""
        super().__init__(
            message=f"Unexpected bank response{where}: {detail}",
            code=ErrorCode.BANK_INVALID_RESPONSE,
            details={"detail": detail, "endpoint": endpoint},
        )
        self.detail = detail
        self.endpoint = endpoint
