"""Sync pipeline orchestration.

Drives one sync session through its stages:

1. start_sync: credentials -> push-TAN challenge (AwaitingTan)
2. confirm_tan: user approved in the banking app (FetchingTransactions)
3. fetch_transactions: fetch, classify, mark duplicates (ReviewingTransactions)
4. review actions: categorize, skip, split, notes, payee override
5. run_export: bulk-create in the ledger, then complete the session

Every operation validates the caller's session ID and the session's stage
first and returns a StepResult. Expected failures (bad credentials,
rejected TAN, malformed responses, rate limiting, timeouts) come back as
structured errors; unexpected transport errors propagate.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from datetime import timedelta
from typing import TypeVar

import httpx

from budgetbuddy.application.dtos import (
    ErrorInfo,
    ExportResult,
    SessionSummary,
    StepResult,
)
from budgetbuddy.application.services.sync_session_manager import SyncSessionManager
from budgetbuddy.domain.banking.exceptions import SessionExpiredError
from budgetbuddy.domain.banking.ports import BankAuthPort
from budgetbuddy.domain.banking.value_objects import (
    AuthHandshake,
    BankCredentials,
    BankSession,
    DateRange,
)
from budgetbuddy.domain.ledger.ports import LedgerPort
from budgetbuddy.domain.ledger.value_objects import BulkCreateResult
from budgetbuddy.domain.rules.repositories import RuleRepository
from budgetbuddy.domain.rules.services import RulesEngine
from budgetbuddy.domain.shared.exceptions import (
    DomainException,
    ErrorCode,
    ValidationError,
)
from budgetbuddy.domain.shared.time import today_utc
from budgetbuddy.domain.sync.entities import SyncSession, SyncTransaction
from budgetbuddy.domain.sync.exceptions import (
    RuleCompilationError,
    TransactionNotFoundError,
)
from budgetbuddy.domain.sync.repositories import (
    SettingsRepository,
    SyncSessionRepository,
)
from budgetbuddy.domain.sync.services import DuplicateDetectionService
from budgetbuddy.domain.sync.value_objects import (
    AppSettings,
    Imported,
    Rejected,
    SessionStatus,
    TransactionSplit,
    TransactionStatus,
    YnabSettings,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT_SECONDS = 60.0


class _AuthState:
    """Bank handshake state belonging to one sync session."""

    def __init__(self, session_id: str, handshake: AuthHandshake):
        self.session_id = session_id
        self.handshake = handshake
        self.bank_session: BankSession | None = None


class SyncPipelineService:
    """Application service exposing the sync pipeline to the CLI or an API."""

    def __init__(  # NOQA: PLR0913
        self,
        session_manager: SyncSessionManager,
        bank: BankAuthPort,
        ledger: LedgerPort,
        rule_repository: RuleRepository,
        settings_repository: SettingsRepository,
        session_repository: SyncSessionRepository | None = None,
        rules_engine: RulesEngine | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self._sessions = session_manager
        self._bank = bank
        self._ledger = ledger
        self._rule_repository = rule_repository
        self._settings_repository = settings_repository
        self._session_repository = session_repository
        self._rules_engine = rules_engine or RulesEngine()
        self._timeout_seconds = timeout_seconds
        self._auth: _AuthState | None = None

    # -------------------------------------------------------------------------
    # Session lifecycle
    # -------------------------------------------------------------------------

    async def start_sync(self) -> StepResult[SyncSession]:
        """Start a new session and begin the bank handshake."""
        return await self._run_step("start_sync", self._start_sync)

    async def _start_sync(self) -> SyncSession:
        settings = await self._settings_repository.load_settings()
        comdirect = settings.comdirect
        if comdirect is None:
            msg = "Bank credentials are not configured"
            raise ValidationError(msg, details={"field": "comdirect"})

        session = self._sessions.start_new_session()
        self._auth = None
        await self._persist_session()

        credentials = BankCredentials(
            client_id=comdirect.client_id,
            client_secret=comdirect.client_secret,
            username=comdirect.username,
            password=comdirect.password,
        )
        try:
            handshake = await self._with_timeout(self._bank.begin_handshake(credentials))
        except (DomainException, asyncio.TimeoutError, httpx.TimeoutException) as e:
            await self._fail(f"Bank authentication failed: {_describe(e)}")
            raise

        self._auth = _AuthState(session.id, handshake)
        session = self._sessions.transition(
            session.id,
            SessionStatus.AWAITING_BANK_AUTH,
            SessionStatus.AWAITING_TAN,
        )
        await self._persist_session()
        return session

    async def confirm_tan(self, session_id: str) -> StepResult[SyncSession]:
        """Confirm the push-TAN the user approved in the banking app.

        A rejected or expired TAN leaves the session in AwaitingTan; call
        retry_challenge to get a fresh challenge.
        """

        async def action() -> SyncSession:
            self._sessions.validate_session_status(session_id, SessionStatus.AWAITING_TAN)
            auth = self._require_auth(session_id)
            bank_session = await self._bank_call(
                self._bank.confirm_challenge(auth.handshake),
            )
            auth.bank_session = bank_session
            session = self._sessions.transition(
                session_id,
                SessionStatus.AWAITING_TAN,
                SessionStatus.FETCHING_TRANSACTIONS,
            )
            await self._persist_session()
            return session

        return await self._run_step("confirm_tan", action)

    async def retry_challenge(self, session_id: str) -> StepResult[SyncSession]:
        """Request a new push-TAN without re-entering credentials."""

        async def action() -> SyncSession:
            session = self._sessions.validate_session_status(
                session_id,
                SessionStatus.AWAITING_TAN,
            )
            auth = self._require_auth(session_id)
            auth.handshake = await self._bank_call(
                self._bank.request_challenge(auth.handshake),
            )
            return session

        return await self._run_step("retry_challenge", action)

    async def complete(self, session_id: str) -> StepResult[SyncSession]:
        async def action() -> SyncSession:
            self._sessions.validate_session(session_id)
            session = self._sessions.complete_session()
            await self._persist_all()
            return session

        return await self._run_step("complete", action)

    async def fail(self, session_id: str, reason: str) -> StepResult[SyncSession]:
        async def action() -> SyncSession:
            self._sessions.validate_session(session_id)
            session = self._sessions.fail_session(reason)
            await self._persist_all()
            return session

        return await self._run_step("fail", action)

    def get_summary(self) -> StepResult[SessionSummary]:
        session = self._sessions.get_session()
        if session is None:
            return StepResult.failure(
                ErrorInfo(
                    code=ErrorCode.NO_ACTIVE_SESSION,
                    message="No active sync session",
                ),
            )
        transactions = self._sessions.get_transactions()
        return StepResult.ok(
            SessionSummary(
                session=session,
                status_counts=self._sessions.get_status_counts(),
                duplicate_counts=DuplicateDetectionService.count_duplicates(transactions),
            ),
        )

    def get_transactions(self, session_id: str) -> StepResult[list[SyncTransaction]]:
        try:
            self._sessions.validate_session(session_id)
            return StepResult.ok(self._sessions.get_transactions())
        except DomainException as e:
            return StepResult.failure(ErrorInfo.from_exception(e))

    # -------------------------------------------------------------------------
    # Fetch, classify, detect duplicates
    # -------------------------------------------------------------------------

    async def fetch_transactions(self, session_id: str) -> StepResult[list[SyncTransaction]]:
        """Fetch bank transactions, classify them and mark duplicates.

        Broken rules or ledger failures leave the session in
        FetchingTransactions so the step can be retried.
        """

        async def action() -> list[SyncTransaction]:
            self._sessions.validate_session_status(
                session_id,
                SessionStatus.FETCHING_TRANSACTIONS,
            )
            auth = self._require_auth(session_id)
            if auth.bank_session is None:
                msg = "TAN has not been confirmed for this session"
                raise ValidationError(msg, details={"session_id": session_id})

            settings = await self._settings_repository.load_settings()
            account_id = settings.comdirect.account_id if settings.comdirect else None
            if not account_id:
                msg = "No bank account configured for sync"
                raise ValidationError(msg, details={"field": "comdirect.account_id"})

            date_range = DateRange.last_days(settings.sync.days_to_fetch, today_utc())
            bank_transactions = await self._bank_call(
                self._bank.fetch_transactions(auth.bank_session, account_id, date_range),
            )

            rules = await self._rule_repository.load_rules()
            classified, errors = self._rules_engine.classify_transactions(
                rules,
                bank_transactions,
            )
            if errors:
                raise RuleCompilationError(errors)

            marked = await self._mark_duplicates(settings, classified, date_range)

            self._sessions.add_transactions(marked)
            self._sessions.transition(
                session_id,
                SessionStatus.FETCHING_TRANSACTIONS,
                SessionStatus.REVIEWING_TRANSACTIONS,
            )
            await self._persist_all()
            return self._sessions.get_transactions()

        return await self._run_step("fetch_transactions", action)

    async def refresh_duplicates(self, session_id: str) -> StepResult[list[SyncTransaction]]:
        """Re-run duplicate detection after the ledger changed."""

        async def action() -> list[SyncTransaction]:
            self._sessions.validate_session_status(
                session_id,
                SessionStatus.REVIEWING_TRANSACTIONS,
            )
            settings = await self._settings_repository.load_settings()
            transactions = self._sessions.get_transactions()
            if not transactions:
                return []
            earliest = min(tx.transaction.booking_date for tx in transactions)
            date_range = DateRange(
                start=earliest,
                end=max(tx.transaction.booking_date for tx in transactions),
            )
            marked = await self._mark_duplicates(settings, transactions, date_range)
            self._sessions.update_transactions(marked)
            return self._sessions.get_transactions()

        return await self._run_step("refresh_duplicates", action)

    async def _mark_duplicates(
        self,
        settings: AppSettings,
        transactions: Sequence[SyncTransaction],
        date_range: DateRange,
    ) -> list[SyncTransaction]:
        ynab = settings.ynab
        if ynab is None or not ynab.default_budget_id or not ynab.default_account_id:
            logger.info("No ledger target configured, skipping duplicate detection")
            return list(transactions)

        detector = DuplicateDetectionService(settings.sync.duplicate_matching)
        since = date_range.start - timedelta(days=detector.config.date_tolerance_days)
        ledger_transactions = await self._with_timeout(
            self._ledger.get_account_transactions(
                ynab.default_budget_id,
                ynab.default_account_id,
                since,
            ),
        )
        return detector.mark_duplicates(ledger_transactions, transactions)

    # -------------------------------------------------------------------------
    # Review actions
    # -------------------------------------------------------------------------

    async def categorize(
        self,
        session_id: str,
        transaction_id: str,
        category_id: str,
        category_name: str,
    ) -> StepResult[SyncTransaction]:
        return await self._review(
            session_id,
            transaction_id,
            lambda tx: tx.with_category(category_id, category_name),
        )

    async def uncategorize(self, session_id: str, transaction_id: str) -> StepResult[SyncTransaction]:
        return await self._review(session_id, transaction_id, lambda tx: tx.without_category())

    async def skip(self, session_id: str, transaction_id: str) -> StepResult[SyncTransaction]:
        return await self._review(session_id, transaction_id, lambda tx: tx.skipped())

    async def unskip(self, session_id: str, transaction_id: str) -> StepResult[SyncTransaction]:
        return await self._review(session_id, transaction_id, lambda tx: tx.unskipped())

    async def set_payee_override(
        self,
        session_id: str,
        transaction_id: str,
        payee: str | None,
    ) -> StepResult[SyncTransaction]:
        return await self._review(
            session_id,
            transaction_id,
            lambda tx: tx.with_payee_override(payee),
        )

    async def set_notes(
        self,
        session_id: str,
        transaction_id: str,
        notes: str | None,
    ) -> StepResult[SyncTransaction]:
        return await self._review(session_id, transaction_id, lambda tx: tx.with_notes(notes))

    async def set_splits(
        self,
        session_id: str,
        transaction_id: str,
        splits: list[TransactionSplit],
    ) -> StepResult[SyncTransaction]:
        return await self._review(session_id, transaction_id, lambda tx: tx.with_splits(splits))

    async def clear_splits(self, session_id: str, transaction_id: str) -> StepResult[SyncTransaction]:
        return await self._review(session_id, transaction_id, lambda tx: tx.without_splits())

    async def bulk_categorize(
        self,
        session_id: str,
        transaction_ids: Sequence[str],
        category_id: str,
        category_name: str,
    ) -> StepResult[list[SyncTransaction]]:
        return await self._review_many(
            session_id,
            transaction_ids,
            lambda tx: tx.with_category(category_id, category_name),
        )

    async def bulk_skip(
        self,
        session_id: str,
        transaction_ids: Sequence[str],
    ) -> StepResult[list[SyncTransaction]]:
        return await self._review_many(session_id, transaction_ids, lambda tx: tx.skipped())

    async def _review(
        self,
        session_id: str,
        transaction_id: str,
        change: Callable[[SyncTransaction], SyncTransaction],
    ) -> StepResult[SyncTransaction]:
        async def action() -> SyncTransaction:
            updated = await self._review_many_action(session_id, [transaction_id], change)
            return updated[0]

        return await self._run_step("review", action)

    async def _review_many(
        self,
        session_id: str,
        transaction_ids: Sequence[str],
        change: Callable[[SyncTransaction], SyncTransaction],
    ) -> StepResult[list[SyncTransaction]]:
        async def action() -> list[SyncTransaction]:
            return await self._review_many_action(session_id, transaction_ids, change)

        return await self._run_step("review", action)

    async def _review_many_action(
        self,
        session_id: str,
        transaction_ids: Sequence[str],
        change: Callable[[SyncTransaction], SyncTransaction],
    ) -> list[SyncTransaction]:
        self._sessions.validate_session_status(
            session_id,
            SessionStatus.REVIEWING_TRANSACTIONS,
        )
        updated: list[SyncTransaction] = []
        for transaction_id in transaction_ids:
            current = self._sessions.get_transaction(transaction_id)
            if current is None:
                raise TransactionNotFoundError(transaction_id)
            updated.append(change(current))
        self._sessions.update_transactions(updated)
        return updated

    # -------------------------------------------------------------------------
    # Export
    # -------------------------------------------------------------------------

    async def run_export(self, session_id: str) -> StepResult[ExportResult]:
        """Export reviewed transactions and complete the session.

        If the ledger call fails the session returns to review; re-running
        the export is safe because the ledger refuses known import IDs.
        """

        async def action() -> ExportResult:
            settings = await self._settings_repository.load_settings()
            ynab = _require_ledger_target(settings.ynab)

            self._sessions.transition(
                session_id,
                SessionStatus.REVIEWING_TRANSACTIONS,
                SessionStatus.IMPORTING_TO_YNAB,
            )
            candidates = [
                tx
                for tx in self._sessions.get_transactions()
                if tx.status != TransactionStatus.IMPORTED
            ]
            try:
                result = await self._with_timeout(
                    self._ledger.create_transactions(
                        ynab.default_budget_id or "",
                        ynab.default_account_id or "",
                        candidates,
                    ),
                )
            except BaseException:
                self._sessions.transition(
                    session_id,
                    SessionStatus.IMPORTING_TO_YNAB,
                    SessionStatus.REVIEWING_TRANSACTIONS,
                )
                raise

            self._sessions.update_transactions(_apply_export_result(candidates, result))
            session = self._sessions.complete_session()
            await self._persist_all()

            return ExportResult(
                imported_count=result.created_count,
                duplicate_count=result.duplicate_count,
                failed_count=len(result.failed_import_ids),
                excluded_count=len(result.excluded_transaction_ids),
                duplicate_import_ids=result.duplicate_import_ids,
                session=session,
            )

        return await self._run_step("run_export", action)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    async def _run_step(
        self,
        step: str,
        action: Callable[[], Awaitable[T]],
    ) -> StepResult[T]:
        try:
            return StepResult.ok(await action())
        except DomainException as e:
            logger.warning("Sync step %s failed: %s", step, e.message)
            return StepResult.failure(ErrorInfo.from_exception(e))
        except (asyncio.TimeoutError, httpx.TimeoutException):
            logger.warning("Sync step %s timed out", step)
            return StepResult.failure(
                ErrorInfo(
                    code=ErrorCode.OPERATION_TIMED_OUT,
                    message=f"Step '{step}' timed out. Please try again.",
                    details={"step": step},
                ),
            )

    async def _with_timeout(self, awaitable: Awaitable[T]) -> T:
        return await asyncio.wait_for(awaitable, timeout=self._timeout_seconds)

    async def _bank_call(self, awaitable: Awaitable[T]) -> T:
        """Run a bank call; an expired bank session fails the sync session."""
        try:
            return await self._with_timeout(awaitable)
        except SessionExpiredError as e:
            await self._fail(e.message)
            raise

    async def _fail(self, reason: str) -> None:
        session = self._sessions.get_session()
        if session is not None and not session.is_terminal():
            self._sessions.fail_session(reason)
            await self._persist_session()

    def _require_auth(self, session_id: str) -> _AuthState:
        if self._auth is None or self._auth.session_id != session_id:
            msg = "Bank handshake has not been started for this session"
            raise ValidationError(msg, details={"session_id": session_id})
        return self._auth

    async def _persist_session(self) -> None:
        if self._session_repository is None:
            return
        session = self._sessions.get_session()
        if session is not None:
            await self._session_repository.persist_session(session)

    async def _persist_all(self) -> None:
        if self._session_repository is None:
            return
        session = self._sessions.get_session()
        if session is None:
            return
        await self._session_repository.persist_session(session)
        await self._session_repository.persist_transactions(
            session.id,
            self._sessions.get_transactions(),
        )


def _require_ledger_target(ynab: YnabSettings | None) -> YnabSettings:
    if ynab is None or not ynab.default_budget_id or not ynab.default_account_id:
        msg = "Ledger budget and account must be configured before export"
        raise ValidationError(msg, details={"field": "ynab"})
    return ynab


def _apply_export_result(
    candidates: Sequence[SyncTransaction],
    result: BulkCreateResult,
) -> list[SyncTransaction]:
    by_transaction_id = {tx.transaction_id: tx for tx in candidates}
    duplicates = set(result.duplicate_import_ids)
    updated: list[SyncTransaction] = []

    for import_id, transaction_id in result.sent.items():
        tx = by_transaction_id.get(transaction_id)
        if tx is None:
            continue
        if import_id in result.created:
            updated.append(
                tx.with_import_status(
                    Imported(ledger_transaction_id=result.created[import_id]),
                ),
            )
        elif import_id in duplicates:
            updated.append(tx.with_import_status(Rejected(duplicate_import_id=import_id)))
        else:
            updated.append(
                tx.with_import_status(
                    Rejected(message="Ledger did not create the transaction"),
                ),
            )
    return updated


def _describe(error: BaseException) -> str:
    if isinstance(error, DomainException):
        return error.message
    return "timed out"
