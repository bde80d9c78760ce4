"""Ledger port (interface).

Contract for the external budgeting ledger the pipeline exports to.
"""

from abc import ABC, abstractmethod
from datetime import date

from budgetbuddy.domain.ledger.value_objects import (
    BulkCreateResult,
    LedgerBudget,
    LedgerBudgetDetail,
    LedgerCategory,
    LedgerTransaction,
)
from budgetbuddy.domain.sync.entities import SyncTransaction


class LedgerPort(ABC):
    """Abstract interface for the budgeting ledger API."""

    @abstractmethod
    async def validate_token(self) -> bool:
        """Return True if the access token is accepted."""

    @abstractmethod
    async def get_budgets(self) -> list[LedgerBudget]:
        """List budgets visible to the token."""

    @abstractmethod
    async def get_budget_detail(self, budget_id: str) -> LedgerBudgetDetail:
        """
        Get a budget with its accounts and categories.

        Raises
        ------
        BudgetNotFoundError
            If the budget does not exist
        """

    @abstractmethod
    async def get_categories(self, budget_id: str) -> list[LedgerCategory]:
        """List the budget's usable categories."""

    @abstractmethod
    async def get_account_transactions(
        self,
        budget_id: str,
        account_id: str,
        since: date,
    ) -> list[LedgerTransaction]:
        """
        List ledger transactions of one account booked on or after ``since``.

        Raises
        ------
        LedgerAccountNotFoundError
            If the account does not exist
        """

    @abstractmethod
    async def create_transactions(
        self,
        budget_id: str,
        account_id: str,
        transactions: list[SyncTransaction],
    ) -> BulkCreateResult:
        """
        Export the exportable subset of ``transactions`` in one bulk call.

        Skipped transactions and transactions with neither a category nor
        at least two splits are excluded before any request is made.

        Returns
        -------
        Result built from the transactions the ledger actually returned,
        with refused import IDs listed separately

        Raises
        ------
        RateLimitExceededError
            If the ledger throttles the request
        """

    @abstractmethod
    async def close(self) -> None:
        """Release transport resources."""
