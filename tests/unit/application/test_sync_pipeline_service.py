"""Tests for SyncPipelineService with mocked bank and ledger ports."""

import asyncio
from datetime import date, timedelta
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from budgetbuddy.application.services import SyncPipelineService, SyncSessionManager
from budgetbuddy.domain.banking.exceptions import (
    InvalidCredentialsError,
    SessionExpiredError,
    TanRejectedError,
)
from budgetbuddy.domain.banking.ports import BankAuthPort
from budgetbuddy.domain.banking.value_objects import (
    AuthHandshake,
    BankSession,
    BankTransaction,
    ChallengeKind,
    RequestInfo,
    TanChallenge,
    TokenPair,
)
from budgetbuddy.domain.ledger.exceptions import LedgerNetworkError
from budgetbuddy.domain.ledger.ports import LedgerPort
from budgetbuddy.domain.ledger.services import compute_import_id
from budgetbuddy.domain.ledger.value_objects import BulkCreateResult, LedgerTransaction
from budgetbuddy.domain.rules.value_objects import PatternKind, Rule
from budgetbuddy.domain.shared.exceptions import ErrorCode
from budgetbuddy.domain.shared.value_objects import Money, SecureString
from budgetbuddy.domain.sync.value_objects import (
    AppSettings,
    ComdirectSettings,
    SessionStatus,
    SyncSettings,
    TransactionSplit,
    TransactionStatus,
    YnabSettings,
)
from budgetbuddy.infrastructure.persistence import (
    InMemoryRuleRepository,
    InMemorySettingsRepository,
    InMemorySyncSessionRepository,
)


def create_settings(ynab: YnabSettings | None = None) -> AppSettings:
    return AppSettings(
        comdirect=ComdirectSettings(
            client_id="client",
            client_secret=SecureString("secret"),
            username="user",
            password=SecureString("pin"),
            account_id="acc-1",
        ),
        ynab=ynab
        or YnabSettings(
            token=SecureString("token"),
            default_budget_id="budget-1",
            default_account_id="account-1",
        ),
        sync=SyncSettings(days_to_fetch=30),
    )


def create_tokens(suffix: str) -> TokenPair:
    return TokenPair(
        access_token=SecureString(f"at-{suffix}"),
        refresh_token=SecureString(f"rt-{suffix}"),
    )


def create_handshake(challenge_id: str = "ch-1") -> AuthHandshake:
    return AuthHandshake(
        request_info=RequestInfo(session_id="s-1", request_id="123456789"),
        tokens=create_tokens("1"),
        session_identifier="sess-1",
        challenge=TanChallenge(
            challenge_id=challenge_id,
            kind=ChallengeKind.PUSH_TAN,
            raw_kind="P_TAN_PUSH",
        ),
        client_id="client",
        client_secret=SecureString("secret"),
    )


def create_bank_session() -> BankSession:
    return BankSession(
        request_info=RequestInfo(session_id="s-1", request_id="123456789"),
        tokens=create_tokens("2"),
        session_identifier="sess-1",
    )


def create_bank_transaction(reference: str, payee: str, amount: str) -> BankTransaction:
    return BankTransaction(
        transaction_id=reference,
        booking_date=date(2025, 1, 15),
        amount=Money(Decimal(amount)),
        payee=payee,
        memo=f"Kartenzahlung {payee}",
        reference=reference,
    )


BANK_TRANSACTIONS = [
    create_bank_transaction("REF1", "REWE Markt", "-50.00"),
    create_bank_transaction("REF2", "Stadtwerke", "-80.00"),
    create_bank_transaction("REF3", "Kiosk", "-3.50"),
]

RULES = [
    Rule(
        id="r-rewe",
        name="Groceries",
        pattern="REWE",
        category_id="cat-food",
        category_name="Groceries",
    ),
    Rule(
        id="r-power",
        name="Utilities",
        pattern="Stadtwerke",
        category_id="cat-power",
        category_name="Utilities",
    ),
]


def create_bank() -> AsyncMock:
    bank = AsyncMock(spec=BankAuthPort)
    bank.begin_handshake.return_value = create_handshake()
    bank.request_challenge.return_value = create_handshake("ch-2")
    bank.confirm_challenge.return_value = create_bank_session()
    bank.fetch_transactions.return_value = list(BANK_TRANSACTIONS)
    return bank


def create_ledger(existing: list[LedgerTransaction] | None = None) -> AsyncMock:
    ledger = AsyncMock(spec=LedgerPort)
    ledger.get_account_transactions.return_value = list(existing or [])

    async def create_transactions(budget_id, account_id, transactions):
        exportable = [tx for tx in transactions if tx.is_exportable]
        sent = {
            compute_import_id(tx.transaction_id, tx.transaction.booking_date): tx.transaction_id
            for tx in exportable
        }
        return BulkCreateResult(
            created={import_id: f"y-{tx_id}" for import_id, tx_id in sent.items()},
            sent=sent,
            excluded_transaction_ids=tuple(
                tx.transaction_id for tx in transactions if not tx.is_exportable
            ),
        )

    ledger.create_transactions.side_effect = create_transactions
    return ledger


def create_pipeline(
    bank: AsyncMock | None = None,
    ledger: AsyncMock | None = None,
    rules: list[Rule] | None = None,
    settings: AppSettings | None = None,
    repository: InMemorySyncSessionRepository | None = None,
    timeout_seconds: float = 5.0,
) -> SyncPipelineService:
    return SyncPipelineService(
        session_manager=SyncSessionManager(),
        bank=bank or create_bank(),
        ledger=ledger or create_ledger(),
        rule_repository=InMemoryRuleRepository(RULES if rules is None else rules),
        settings_repository=InMemorySettingsRepository(settings or create_settings()),
        session_repository=repository,
        timeout_seconds=timeout_seconds,
    )


async def start_and_fetch(pipeline: SyncPipelineService) -> str:
    session_id = (await pipeline.start_sync()).unwrap().id
    (await pipeline.confirm_tan(session_id)).unwrap()
    (await pipeline.fetch_transactions(session_id)).unwrap()
    return session_id


class TestHappyPath:
    @pytest.mark.asyncio
    async def test_full_sync(self):
        repository = InMemorySyncSessionRepository()
        ledger = create_ledger()
        pipeline = create_pipeline(ledger=ledger, repository=repository)

        started = await pipeline.start_sync()
        assert started.success
        session_id = started.value.id
        assert started.value.status == SessionStatus.AWAITING_TAN

        confirmed = await pipeline.confirm_tan(session_id)
        assert confirmed.value.status == SessionStatus.FETCHING_TRANSACTIONS

        fetched = await pipeline.fetch_transactions(session_id)
        transactions = {tx.transaction_id: tx for tx in fetched.unwrap()}
        assert transactions["REF1"].status == TransactionStatus.AUTO_CATEGORIZED
        assert transactions["REF1"].category_id == "cat-food"
        assert transactions["REF3"].status == TransactionStatus.PENDING

        await pipeline.categorize(session_id, "REF3", "cat-misc", "Misc")
        await pipeline.skip(session_id, "REF2")

        exported = await pipeline.run_export(session_id)

        export = exported.unwrap()
        assert export.imported_count == 2
        assert export.excluded_count == 1
        assert export.failed_count == 0
        assert export.session.status == SessionStatus.COMPLETED
        assert export.session.imported_count == 2
        assert export.session.skipped_count == 1

        sent = ledger.create_transactions.await_args.args[2]
        assert [tx.transaction_id for tx in sent] == ["REF1", "REF2", "REF3"]

        stored = repository.transactions[session_id]
        assert {tx.transaction_id: tx.import_status.kind for tx in stored} == {
            "REF1": "imported",
            "REF2": "not_attempted",
            "REF3": "imported",
        }
        assert repository.sessions[session_id].status == SessionStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_fetch_uses_configured_account_and_range(self):
        bank = create_bank()
        pipeline = create_pipeline(bank=bank)

        await start_and_fetch(pipeline)

        session, account_id, date_range = bank.fetch_transactions.await_args.args
        assert session.session_identifier == "sess-1"
        assert account_id == "acc-1"
        assert (date_range.end - date_range.start).days == 30

    @pytest.mark.asyncio
    async def test_duplicates_marked_from_ledger(self):
        ledger = create_ledger(
            [
                LedgerTransaction(
                    id="y-old",
                    booking_date=date(2025, 1, 15),
                    amount=Decimal("-80.00"),
                    payee_name="Stadtwerke",
                    memo="Abschlag, Ref: REF2",
                ),
            ],
        )
        bank = create_bank()
        pipeline = create_pipeline(bank=bank, ledger=ledger)

        session_id = await start_and_fetch(pipeline)

        transactions = {
            tx.transaction_id: tx for tx in pipeline.get_transactions(session_id).unwrap()
        }
        assert transactions["REF2"].duplicate_status.kind == "confirmed_duplicate"
        assert transactions["REF1"].duplicate_status.kind == "not_duplicate"
        summary = pipeline.get_summary().unwrap()
        assert summary.duplicate_counts.confirmed == 1
        assert summary.session.status == SessionStatus.REVIEWING_TRANSACTIONS

        budget_id, account_id, since = ledger.get_account_transactions.await_args.args
        assert (budget_id, account_id) == ("budget-1", "account-1")
        date_range = bank.fetch_transactions.await_args.args[2]
        assert since == date_range.start - timedelta(days=1)

    @pytest.mark.asyncio
    async def test_no_ledger_target_skips_duplicate_detection(self):
        ledger = create_ledger()
        settings = create_settings(ynab=YnabSettings(token=SecureString("token")))
        pipeline = create_pipeline(ledger=ledger, settings=settings)

        session_id = await start_and_fetch(pipeline)

        ledger.get_account_transactions.assert_not_awaited()
        exported = await pipeline.run_export(session_id)
        assert exported.error.code == ErrorCode.VALIDATION_ERROR
        assert pipeline.get_summary().unwrap().session.status == (
            SessionStatus.REVIEWING_TRANSACTIONS
        )



class TestAuthentication:
    @pytest.mark.asyncio
    async def test_missing_bank_credentials(self):
        pipeline = create_pipeline(settings=AppSettings(comdirect=None, ynab=None))

        result = await pipeline.start_sync()

        assert not result.success
        assert result.error.code == ErrorCode.VALIDATION_ERROR
        assert pipeline.get_summary().error.code == ErrorCode.NO_ACTIVE_SESSION

    @pytest.mark.asyncio
    async def test_invalid_credentials_fail_session(self):
        bank = create_bank()
        bank.begin_handshake.side_effect = InvalidCredentialsError()
        pipeline = create_pipeline(bank=bank)

        result = await pipeline.start_sync()

        assert result.error.code == ErrorCode.BANK_INVALID_CREDENTIALS
        session = pipeline.get_summary().unwrap().session
        assert session.status == SessionStatus.FAILED
        assert "Bank authentication failed" in session.failure_reason

    @pytest.mark.asyncio
    async def test_rejected_tan_keeps_awaiting_tan(self):
        bank = create_bank()
        bank.confirm_challenge.side_effect = [TanRejectedError(), create_bank_session()]
        pipeline = create_pipeline(bank=bank)
        session_id = (await pipeline.start_sync()).unwrap().id

        rejected = await pipeline.confirm_tan(session_id)

        assert rejected.error.code == ErrorCode.TAN_REJECTED
        assert pipeline.get_summary().unwrap().session.status == SessionStatus.AWAITING_TAN

        retried = await pipeline.retry_challenge(session_id)
        assert retried.success
        confirmed = await pipeline.confirm_tan(session_id)
        assert confirmed.value.status == SessionStatus.FETCHING_TRANSACTIONS
        handshake = bank.confirm_challenge.await_args.args[0]
        assert handshake.challenge.challenge_id == "ch-2"

    @pytest.mark.asyncio
    async def test_expired_bank_session_fails_sync(self):
        bank = create_bank()
        bank.confirm_challenge.side_effect = SessionExpiredError()
        pipeline = create_pipeline(bank=bank)
        session_id = (await pipeline.start_sync()).unwrap().id

        result = await pipeline.confirm_tan(session_id)

        assert result.error.code == ErrorCode.BANK_SESSION_EXPIRED
        assert pipeline.get_summary().unwrap().session.status == SessionStatus.FAILED

    @pytest.mark.asyncio
    async def test_confirm_with_wrong_session_id(self):
        pipeline = create_pipeline()
        await pipeline.start_sync()

        result = await pipeline.confirm_tan("not-the-session")

        assert result.error.code == ErrorCode.SESSION_NOT_FOUND

    @pytest.mark.asyncio
    async def test_steps_out_of_order(self):
        pipeline = create_pipeline()
        session_id = (await pipeline.start_sync()).unwrap().id

        result = await pipeline.fetch_transactions(session_id)

        assert result.error.code == ErrorCode.INVALID_SESSION_STATE
        assert result.error.details["actual"] == "awaiting_tan"

    @pytest.mark.asyncio
    async def test_handshake_timeout(self):
        async def slow_handshake(credentials):
            await asyncio.sleep(1)

        bank = create_bank()
        bank.begin_handshake.side_effect = slow_handshake
        pipeline = create_pipeline(bank=bank, timeout_seconds=0.01)

        result = await pipeline.start_sync()

        assert result.error.code == ErrorCode.OPERATION_TIMED_OUT
        assert result.error.details == {"step": "start_sync"}
        assert pipeline.get_summary().unwrap().session.status == SessionStatus.FAILED


class TestFetch:
    @pytest.mark.asyncio
    async def test_broken_rule_is_reported(self):
        broken = Rule(
            id="r-broken",
            name="Broken",
            pattern="(unclosed",
            pattern_kind=PatternKind.REGEX,
            category_id="cat",
            category_name="Cat",
        )
        pipeline = create_pipeline(rules=[broken])
        session_id = (await pipeline.start_sync()).unwrap().id
        await pipeline.confirm_tan(session_id)

        result = await pipeline.fetch_transactions(session_id)

        assert result.error.code == ErrorCode.RULE_COMPILATION_FAILED
        assert len(result.error.details["errors"]) == 1
        assert pipeline.get_summary().unwrap().session.status == (
            SessionStatus.FETCHING_TRANSACTIONS
        )


class TestReview:
    @pytest.mark.asyncio
    async def test_unknown_transaction(self):
        pipeline = create_pipeline()
        session_id = await start_and_fetch(pipeline)

        result = await pipeline.skip(session_id, "REF404")

        assert result.error.code == ErrorCode.TRANSACTION_NOT_FOUND

    @pytest.mark.asyncio
    async def test_bulk_actions(self):
        pipeline = create_pipeline()
        session_id = await start_and_fetch(pipeline)

        categorized = await pipeline.bulk_categorize(session_id, ["REF2", "REF3"], "cat-x", "X")
        skipped = await pipeline.bulk_skip(session_id, ["REF1"])

        assert [tx.category_id for tx in categorized.unwrap()] == ["cat-x", "cat-x"]
        assert skipped.unwrap()[0].status == TransactionStatus.SKIPPED
        counts = pipeline.get_summary().unwrap().status_counts
        assert counts == {
            TransactionStatus.SKIPPED: 1,
            TransactionStatus.MANUAL_CATEGORIZED: 2,
        }

    @pytest.mark.asyncio
    async def test_invalid_split_is_reported(self):
        pipeline = create_pipeline()
        session_id = await start_and_fetch(pipeline)
        splits = [
            TransactionSplit(category_id="a", category_name="A", amount=Money(Decimal("-10.00"))),
            TransactionSplit(category_id="b", category_name="B", amount=Money(Decimal("-10.00"))),
        ]

        result = await pipeline.set_splits(session_id, "REF1", splits)

        assert result.error.code == ErrorCode.INVALID_SPLIT
        unchanged = pipeline.get_transactions(session_id).unwrap()[0]
        assert unchanged.splits is None

    @pytest.mark.asyncio
    async def test_payee_override_and_notes(self):
        pipeline = create_pipeline()
        session_id = await start_and_fetch(pipeline)

        await pipeline.set_payee_override(session_id, "REF1", "REWE")
        result = await pipeline.set_notes(session_id, "REF1", "weekly shop")

        tx = result.unwrap()
        assert tx.effective_payee == "REWE"
        assert tx.user_notes == "weekly shop"


class TestExport:
    @pytest.mark.asyncio
    async def test_ledger_failure_returns_to_review(self):
        ledger = create_ledger()
        ledger.create_transactions.side_effect = LedgerNetworkError(status_code=500, body="boom")
        pipeline = create_pipeline(ledger=ledger)
        session_id = await start_and_fetch(pipeline)

        result = await pipeline.run_export(session_id)

        assert result.error.code == ErrorCode.LEDGER_NETWORK_ERROR
        assert pipeline.get_summary().unwrap().session.status == (
            SessionStatus.REVIEWING_TRANSACTIONS
        )

    @pytest.mark.asyncio
    async def test_cancelled_export_returns_to_review(self):
        ledger = create_ledger()
        create_transactions = ledger.create_transactions.side_effect
        entered = asyncio.Event()

        async def blocked(budget_id, account_id, transactions):
            entered.set()
            await asyncio.Event().wait()

        ledger.create_transactions.side_effect = blocked
        pipeline = create_pipeline(ledger=ledger)
        session_id = await start_and_fetch(pipeline)

        task = asyncio.create_task(pipeline.run_export(session_id))
        await entered.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert pipeline.get_summary().unwrap().session.status == (
            SessionStatus.REVIEWING_TRANSACTIONS
        )

        ledger.create_transactions.side_effect = create_transactions
        retried = await pipeline.run_export(session_id)

        assert retried.value.session.status == SessionStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_duplicates_and_missing_are_rejected(self):
        ledger = create_ledger()
        ids = {
            tx.transaction_id: compute_import_id(tx.transaction_id, tx.booking_date)
            for tx in BANK_TRANSACTIONS
        }
        ledger.create_transactions.side_effect = None
        ledger.create_transactions.return_value = BulkCreateResult(
            created={ids["REF1"]: "y-1"},
            duplicate_import_ids=(ids["REF2"],),
            sent={ids["REF1"]: "REF1", ids["REF2"]: "REF2", ids["REF3"]: "REF3"},
        )
        pipeline = create_pipeline(ledger=ledger)
        session_id = await start_and_fetch(pipeline)
        await pipeline.categorize(session_id, "REF3", "cat-misc", "Misc")

        export = (await pipeline.run_export(session_id)).unwrap()

        assert (export.imported_count, export.duplicate_count, export.failed_count) == (1, 1, 1)
        transactions = {
            tx.transaction_id: tx for tx in pipeline.get_transactions(session_id).unwrap()
        }
        assert transactions["REF1"].status == TransactionStatus.IMPORTED
        assert transactions["REF2"].import_status.kind == "rejected"
        assert transactions["REF2"].import_status.duplicate_import_id == ids["REF2"]
        assert transactions["REF3"].import_status.kind == "rejected"
        assert export.session.imported_count == 1

    @pytest.mark.asyncio
    async def test_export_requires_review_stage(self):
        pipeline = create_pipeline()
        session_id = (await pipeline.start_sync()).unwrap().id

        result = await pipeline.run_export(session_id)

        assert result.error.code == ErrorCode.INVALID_SESSION_STATE

    @pytest.mark.asyncio
    async def test_complete_without_export(self):
        pipeline = create_pipeline()
        session_id = await start_and_fetch(pipeline)

        result = await pipeline.complete(session_id)

        assert result.value.status == SessionStatus.COMPLETED
        assert result.value.imported_count == 0
        assert result.value.transaction_count == 3


class TestReviewRoundTrips:
    @pytest.mark.asyncio
    async def test_uncategorize_and_unskip(self):
        pipeline = create_pipeline()
        session_id = await start_and_fetch(pipeline)

        uncategorized = (await pipeline.uncategorize(session_id, "REF1")).unwrap()
        assert uncategorized.status == TransactionStatus.PENDING
        assert uncategorized.matched_rule_id is None

        await pipeline.categorize(session_id, "REF1", "cat-food", "Groceries")
        await pipeline.skip(session_id, "REF1")
        unskipped = (await pipeline.unskip(session_id, "REF1")).unwrap()

        assert unskipped.status == TransactionStatus.MANUAL_CATEGORIZED
        assert unskipped.category_id == "cat-food"

    @pytest.mark.asyncio
    async def test_set_and_clear_splits(self):
        pipeline = create_pipeline()
        session_id = await start_and_fetch(pipeline)
        splits = [
            TransactionSplit(category_id="a", category_name="A", amount=Money(Decimal("-30.00"))),
            TransactionSplit(category_id="b", category_name="B", amount=Money(Decimal("-20.00"))),
        ]

        split = (await pipeline.set_splits(session_id, "REF1", splits)).unwrap()
        assert split.has_splits
        assert split.category_id is None

        cleared = (await pipeline.clear_splits(session_id, "REF1")).unwrap()
        assert cleared.splits is None
        assert cleared.status == TransactionStatus.PENDING

    @pytest.mark.asyncio
    async def test_refresh_duplicates(self):
        ledger = create_ledger()
        pipeline = create_pipeline(ledger=ledger)
        session_id = await start_and_fetch(pipeline)
        ledger.get_account_transactions.return_value = [
            LedgerTransaction(
                id="y-new",
                booking_date=date(2025, 1, 15),
                amount=Decimal("-50.00"),
                payee_name="REWE",
                import_id=compute_import_id("REF1", date(2025, 1, 15)),
            ),
        ]

        result = await pipeline.refresh_duplicates(session_id)

        transactions = {tx.transaction_id: tx for tx in result.unwrap()}
        assert transactions["REF1"].duplicate_status.kind == "confirmed_duplicate"
        assert transactions["REF1"].category_id == "cat-food"
        _, _, since = ledger.get_account_transactions.await_args.args
        assert since == date(2025, 1, 14)
