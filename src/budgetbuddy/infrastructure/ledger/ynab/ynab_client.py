"""YNAB adapter - implements the LedgerPort against the YNAB REST API v1."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Callable, TypeVar

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from budgetbuddy.domain.ledger.exceptions import (
    DEFAULT_RETRY_AFTER_SECONDS,
    BudgetNotFoundError,
    LedgerAccountNotFoundError,
    LedgerInvalidResponseError,
    LedgerNetworkError,
    LedgerUnauthorizedError,
    RateLimitExceededError,
)
from budgetbuddy.domain.ledger.ports import LedgerPort
from budgetbuddy.domain.ledger.services import compute_import_id, format_export_memo
from budgetbuddy.domain.ledger.value_objects import (
    BulkCreateResult,
    LedgerAccount,
    LedgerBudget,
    LedgerBudgetDetail,
    LedgerCategory,
    LedgerTransaction,
)
from budgetbuddy.domain.shared.value_objects import SecureString
from budgetbuddy.domain.sync.entities import SyncTransaction
from budgetbuddy.infrastructure.ledger.ynab.milliunits import (
    from_milliunits,
    to_milliunits,
)
from budgetbuddy.infrastructure.ledger.ynab.wire_models import (
    BudgetDetailResponse,
    BudgetsResponse,
    CategoriesResponse,
    CategoryGroup,
    ErrorResponse,
    SaveSubTransaction,
    SaveTransaction,
    SaveTransactionsRequest,
    SaveTransactionsResponse,
    TransactionsResponse,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

DEFAULT_BASE_URL = "https://api.ynab.com/v1"
DEFAULT_MEMO_MAX_LENGTH = 200
PAYEE_NAME_MAX_LENGTH = 200


class YnabLedgerClient(LedgerPort):
    """HTTP client wrapper for the YNAB API.

    Responsibilities:
    1. Convert sync transactions to YNAB's wire format (milliunits,
       import IDs, memo with reference trailer, split subtransactions)
    2. Report what YNAB actually created, never what was sent
    3. Translate status codes to ledger domain exceptions
    """

    def __init__(
        self,
        token: SecureString,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        memo_max_length: int = DEFAULT_MEMO_MAX_LENGTH,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._token = token
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._memo_max_length = memo_max_length
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                headers={
                    "Authorization": f"Bearer {self._token.get_value()}",
                    "Accept": "application/json",
                },
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def validate_token(self) -> bool:
        try:
            await self.get_budgets()
        except LedgerUnauthorizedError:
            return False
        return True

    async def get_budgets(self) -> list[LedgerBudget]:
        body = await self._request("GET", "/budgets", BudgetsResponse)
        return [LedgerBudget(id=b.id, name=b.name) for b in body.data.budgets]

    async def get_budget_detail(self, budget_id: str) -> LedgerBudgetDetail:
        body = await self._request(
            "GET",
            f"/budgets/{budget_id}",
            BudgetDetailResponse,
            not_found=lambda: BudgetNotFoundError(budget_id),
        )
        budget = body.data.budget
        return LedgerBudgetDetail(
            id=budget.id,
            name=budget.name,
            accounts=tuple(
                LedgerAccount(
                    id=a.id,
                    name=a.name,
                    balance=from_milliunits(a.balance),
                )
                for a in budget.accounts
                if not a.deleted
            ),
            categories=tuple(_flatten_categories(budget.category_groups)),
        )

    async def get_categories(self, budget_id: str) -> list[LedgerCategory]:
        body = await self._request(
            "GET",
            f"/budgets/{budget_id}/categories",
            CategoriesResponse,
            not_found=lambda: BudgetNotFoundError(budget_id),
        )
        return _flatten_categories(body.data.category_groups)

    async def get_account_transactions(
        self,
        budget_id: str,
        account_id: str,
        since: date,
    ) -> list[LedgerTransaction]:
        body = await self._request(
            "GET",
            f"/budgets/{budget_id}/accounts/{account_id}/transactions",
            TransactionsResponse,
            params={"since_date": since.isoformat()},
            not_found=lambda: LedgerAccountNotFoundError(account_id),
        )
        transactions = [
            LedgerTransaction(
                id=t.id,
                booking_date=t.date,
                amount=from_milliunits(t.amount),
                payee_name=t.payee_name,
                memo=t.memo,
                import_id=t.import_id,
            )
            for t in body.data.transactions
            if not t.deleted
        ]
        logger.info(
            "Loaded %d ledger transactions for account %s since %s",
            len(transactions),
            account_id,
            since,
        )
        return transactions

    # -------------------------------------------------------------------------
    # Export
    # -------------------------------------------------------------------------

    async def create_transactions(
        self,
        budget_id: str,
        account_id: str,
        transactions: list[SyncTransaction],
    ) -> BulkCreateResult:
        exportable = [tx for tx in transactions if tx.is_exportable]
        excluded = tuple(tx.transaction_id for tx in transactions if not tx.is_exportable)
        if excluded:
            logger.info("Excluding %d transactions without category or splits", len(excluded))
        if not exportable:
            return BulkCreateResult(excluded_transaction_ids=excluded)

        wire_transactions = [self.to_wire_transaction(tx, account_id) for tx in exportable]
        sent = {
            wire.import_id: tx.transaction_id
            for wire, tx in zip(wire_transactions, exportable)
        }
        request = SaveTransactionsRequest(transactions=wire_transactions)

        body = await self._request(
            "POST",
            f"/budgets/{budget_id}/transactions",
            SaveTransactionsResponse,
            json=request.model_dump(mode="json", exclude_none=True),
            not_found=lambda: BudgetNotFoundError(budget_id),
        )

        created: dict[str, str] = {}
        for saved in body.data.transactions:
            if saved.import_id is not None and saved.import_id in sent:
                created[saved.import_id] = saved.id
            else:
                logger.warning(
                    "Ledger created transaction %s with unknown import ID %s",
                    saved.id,
                    saved.import_id,
                )
        result = BulkCreateResult(
            created=created,
            duplicate_import_ids=tuple(body.data.duplicate_import_ids),
            sent=sent,
            excluded_transaction_ids=excluded,
        )
        logger.info(
            "Ledger export: sent %d, created %d, duplicates %d",
            len(sent),
            result.created_count,
            result.duplicate_count,
        )
        return result

    def to_wire_transaction(self, transaction: SyncTransaction, account_id: str) -> SaveTransaction:
        bank_tx = transaction.transaction
        memo = format_export_memo(bank_tx.memo, bank_tx.reference, self._memo_max_length)

        subtransactions = None
        category_id = transaction.category_id
        if transaction.has_splits and transaction.splits is not None:
            category_id = None
            subtransactions = [
                SaveSubTransaction(
                    amount=to_milliunits(split.amount.amount),
                    category_id=split.category_id,
                    memo=split.memo[: self._memo_max_length] if split.memo else None,
                )
                for split in transaction.splits
            ]

        return SaveTransaction(
            account_id=account_id,
            date=bank_tx.booking_date,
            amount=to_milliunits(bank_tx.amount.amount),
            payee_name=transaction.effective_payee[:PAYEE_NAME_MAX_LENGTH],
            memo=memo,
            import_id=compute_import_id(bank_tx.transaction_id, bank_tx.booking_date),
            category_id=category_id,
            subtransactions=subtransactions,
        )

    # -------------------------------------------------------------------------
    # Transport helpers
    # -------------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        path: str,
        model: type[M],
        not_found: Callable[[], Exception] | None = None,
        **kwargs: Any,
    ) -> M:
        client = await self._get_client()
        response = await client.request(method, path, **kwargs)
        logger.debug("%s %s -> %d", method, path, response.status_code)
        self._raise_for_status(response, path, not_found)
        try:
            return model.model_validate_json(response.content)
        except PydanticValidationError as e:
            first = e.errors()[0]
            location = ".".join(str(part) for part in first["loc"]) or "body"
            raise LedgerInvalidResponseError(f"{location}: {first['msg']}", path) from e

    @staticmethod
    def _raise_for_status(
        response: httpx.Response,
        endpoint: str,
        not_found: Callable[[], Exception] | None,
    ) -> None:
        if response.is_success:
            return

        status = response.status_code
        ledger_message = _ledger_message(response)
        logger.warning(
            "YNAB %s returned %d: %s",
            endpoint,
            status,
            ledger_message or "no message",
        )

        if status == httpx.codes.UNAUTHORIZED:
            raise LedgerUnauthorizedError()
        if status == httpx.codes.NOT_FOUND and not_found is not None:
            raise not_found()
        if status == httpx.codes.TOO_MANY_REQUESTS:
            raise RateLimitExceededError(_retry_after_seconds(response))
        if status == httpx.codes.BAD_REQUEST:
            raise LedgerInvalidResponseError(
                ledger_message or "request rejected as invalid",
                endpoint,
            )
        raise LedgerNetworkError(
            status_code=status,
            body=response.text,
            endpoint=endpoint,
            ledger_message=ledger_message,
        )


def _flatten_categories(groups: list[CategoryGroup]) -> list[LedgerCategory]:
    return [
        LedgerCategory(id=c.id, name=c.name, group_name=group.name)
        for group in groups
        if not group.deleted and not group.hidden
        for c in group.categories
        if not c.deleted and not c.hidden
    ]


def _ledger_message(response: httpx.Response) -> str | None:
    try:
        return ErrorResponse.model_validate_json(response.content).error.detail
    except PydanticValidationError:
        return None


def _retry_after_seconds(response: httpx.Response) -> int:
    value = response.headers.get("Retry-After")
    if value is None:
        return DEFAULT_RETRY_AFTER_SECONDS
    try:
        seconds = int(value.strip())
    except ValueError:
        return DEFAULT_RETRY_AFTER_SECONDS
    return max(seconds, 0)
