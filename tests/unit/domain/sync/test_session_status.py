"""Tests for SessionStatus transitions and the SyncSession entity."""

import pytest

from budgetbuddy.domain.sync.entities import SyncSession
from budgetbuddy.domain.sync.exceptions import InvalidSessionStateError
from budgetbuddy.domain.sync.value_objects import SessionStatus

HAPPY_PATH = [
    SessionStatus.AWAITING_TAN,
    SessionStatus.FETCHING_TRANSACTIONS,
    SessionStatus.REVIEWING_TRANSACTIONS,
    SessionStatus.IMPORTING_TO_YNAB,
]


class TestSessionStatus:
    @pytest.mark.parametrize(
        "status",
        [s for s in SessionStatus if not s.is_terminal()],
    )
    def test_fail_reachable_from_every_non_terminal_status(self, status):
        assert status.can_transition_to(SessionStatus.FAILED)

    @pytest.mark.parametrize("status", [SessionStatus.COMPLETED, SessionStatus.FAILED])
    def test_terminal_statuses_allow_nothing(self, status):
        assert status.is_terminal()
        assert not any(status.can_transition_to(target) for target in SessionStatus)

    def test_no_skipping_stages(self):
        assert not SessionStatus.AWAITING_BANK_AUTH.can_transition_to(
            SessionStatus.FETCHING_TRANSACTIONS,
        )
        assert not SessionStatus.AWAITING_TAN.can_transition_to(
            SessionStatus.IMPORTING_TO_YNAB,
        )

    def test_export_can_roll_back_to_review(self):
        assert SessionStatus.IMPORTING_TO_YNAB.can_transition_to(
            SessionStatus.REVIEWING_TRANSACTIONS,
        )


class TestSyncSession:
    def test_new_session_awaits_bank_auth(self):
        session = SyncSession()

        assert session.status == SessionStatus.AWAITING_BANK_AUTH
        assert session.transaction_count == 0
        assert session.completed_at is None
        assert session.id

    def test_happy_path_to_completed(self):
        session = SyncSession()
        for status in HAPPY_PATH:
            session.transition_to(status)

        session.complete(imported_count=2, skipped_count=1)

        assert session.status == SessionStatus.COMPLETED
        assert session.imported_count == 2
        assert session.skipped_count == 1
        assert session.completed_at is not None

    def test_invalid_transition_reports_expected_and_actual(self):
        session = SyncSession()

        with pytest.raises(InvalidSessionStateError) as exc_info:
            session.transition_to(SessionStatus.REVIEWING_TRANSACTIONS)

        assert exc_info.value.actual == "awaiting_bank_auth"
        assert "fetching_transactions" in exc_info.value.expected

    def test_fail_records_reason(self):
        session = SyncSession()
        session.fail("bank down")

        assert session.status == SessionStatus.FAILED
        assert session.failure_reason == "bank down"

    def test_terminal_session_rejects_mutation(self):
        session = SyncSession()
        session.fail("bank down")

        with pytest.raises(InvalidSessionStateError):
            session.record_transaction_count(3)
        with pytest.raises(InvalidSessionStateError):
            session.complete(imported_count=0, skipped_count=0)

    def test_snapshot_is_detached(self):
        session = SyncSession()
        snapshot = session.snapshot()

        session.transition_to(SessionStatus.AWAITING_TAN)

        assert snapshot.status == SessionStatus.AWAITING_BANK_AUTH
        assert snapshot == session
