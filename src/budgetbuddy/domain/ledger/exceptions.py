"""Ledger domain exceptions.

Failures of the budgeting ledger API. Rate limiting carries the retry-after
duration so the caller decides when to try again.
"""

from budgetbuddy.domain.shared.exceptions import (
    DomainException,
    EntityNotFoundError,
    ErrorCode,
)

DEFAULT_RETRY_AFTER_SECONDS = 60

# =============================================================================
# Base Ledger Exception
# =============================================================================


class LedgerDomainError(DomainException):
    """Base exception for ledger integration errors."""


# =============================================================================
# Access Exceptions
# =============================================================================


class LedgerUnauthorizedError(LedgerDomainError):
    """Raised when the ledger rejects the access token."""

    def __init__(
        self,
        message: str = "Ledger access token is invalid or revoked.",
    ) -> None:
        super().__init__(message=message, code=ErrorCode.LEDGER_UNAUTHORIZED)


class RateLimitExceededError(LedgerDomainError):
    """Raised when the ledger API rate limit is hit."""

    def __init__(self, retry_after_seconds: int = DEFAULT_RETRY_AFTER_SECONDS) -> None:
        super().__init__(
            message=(
                "Ledger API rate limit exceeded. "
                f"Retry after {retry_after_seconds} seconds."
            ),
            code=ErrorCode.LEDGER_RATE_LIMITED,
            details={"retry_after_seconds": retry_after_seconds},
        )
        self.retry_after_seconds = retry_after_seconds


# =============================================================================
# Not Found Exceptions
# =============================================================================


class BudgetNotFoundError(EntityNotFoundError):
    """Raised when the ledger does not know the budget ID."""

    def __init__(self, budget_id: str) -> None:
        super().__init__(
            message=f"Budget {budget_id} not found in ledger",
            code=ErrorCode.BUDGET_NOT_FOUND,
            details={"budget_id": budget_id},
        )
        self.budget_id = budget_id


class LedgerAccountNotFoundError(EntityNotFoundError):
    """Raised when the ledger does not know the account ID."""

    def __init__(self, account_id: str) -> None:
        super().__init__(
            message=f"Account {account_id} not found in ledger",
            code=ErrorCode.ACCOUNT_NOT_FOUND,
            details={"account_id": account_id},
        )
        self.account_id = account_id


# =============================================================================
# Transport Exceptions
# =============================================================================


class LedgerNetworkError(LedgerDomainError):
    """Raised for non-2xx ledger responses without a more specific meaning."""

    def __init__(
        self,
        status_code: int,
        body: str,
        endpoint: str | None = None,
        ledger_message: str | None = None,
    ) -> None:
        summary = ledger_message or f"HTTP {status_code}"
        where = f" ({endpoint})" if endpoint else ""
        super().__init__(
            message=f"Ledger request failed{where}: {summary}",
            code=ErrorCode.LEDGER_NETWORK_ERROR,
            details={
                "status_code": status_code,
                "endpoint": endpoint,
                "ledger_message": ledger_message,
            },
        )
        self.status_code = status_code
        self.body = body
        self.endpoint = endpoint


class LedgerInvalidResponseError(LedgerDomainError):
    """Raised when a ledger response fails decoding or a request is refused as invalid."""

    def __init__(self, detail: str, endpoint: str | None = None) -> None:
        where = f" from {endpoint}" if endpoint else ""
        super().__init__(
            message=f"Unexpected ledger response{where}: {detail}",
            code=ErrorCode.LEDGER_INVALID_RESPONSE,
            details={"detail": detail, "endpoint": endpoint},
        )
        self.detail = detail
        self.endpoint = endpoint
