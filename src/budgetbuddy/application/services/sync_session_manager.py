"""Single-slot store for the active sync session.

The manager is created once by the composition root and handed to every
pipeline operation. It holds at most one session plus that session's
transactions; starting a new session atomically discards the previous one.
All access goes through one re-entrant lock and readers receive snapshots,
never live objects.
"""

from __future__ import annotations

import logging
import threading
from collections import Counter
from collections.abc import Collection, Iterable

from budgetbuddy.domain.sync.entities import SyncSession, SyncTransaction
from budgetbuddy.domain.sync.exceptions import (
    InvalidSessionStateError,
    NoActiveSessionError,
    SessionNotFoundError,
)
from budgetbuddy.domain.sync.value_objects import SessionStatus, TransactionStatus

logger = logging.getLogger(__name__)


class SyncSessionManager:
    """Owns the active SyncSession and its transactions."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._session: SyncSession | None = None
        # Keyed by bank transaction ID, insertion ordered
        self._transactions: dict[str, SyncTransaction] = {}

    # -------------------------------------------------------------------------
    # Session lifecycle
    # -------------------------------------------------------------------------

    def start_new_session(self) -> SyncSession:
        with self._lock:
            if self._session is not None:
                logger.info(
                    "Discarding sync session %s (%s) with %d transactions",
                    self._session.id,
                    self._session.status.value,
                    len(self._transactions),
                )
            self._session = SyncSession()
            self._transactions = {}
            logger.info("Started sync session %s", self._session.id)
            return self._session.snapshot()

    def clear_session(self) -> None:
        with self._lock:
            self._session = None
            self._transactions = {}

    def get_session(self) -> SyncSession | None:
        with self._lock:
            return self._session.snapshot() if self._session else None

    def transition(
        self,
        session_id: str,
        expected: SessionStatus,
        target: SessionStatus,
    ) -> SyncSession:
        """Move the session from ``expected`` to ``target`` in one atomic step."""
        with self._lock:
            session = self._validate_status(session_id, expected)
            session.transition_to(target)
            logger.info(
                "Sync session %s: %s -> %s",
                session.id,
                expected.value,
                target.value,
            )
            return session.snapshot()

    def complete_session(self) -> SyncSession:
        """Complete the session with counts derived from its transactions."""
        with self._lock:
            session = self._require_session()
            transactions = list(self._transactions.values())
            imported = sum(1 for tx in transactions if _is_imported(tx))
            skipped = sum(
                1 for tx in transactions if tx.status == TransactionStatus.SKIPPED
            )
            session.complete(imported_count=imported, skipped_count=skipped)
            logger.info(
                "Completed sync session %s: %d imported, %d skipped",
                session.id,
                imported,
                skipped,
            )
            return session.snapshot()

    def fail_session(self, reason: str) -> SyncSession:
        with self._lock:
            session = self._require_session()
            session.fail(reason)
            logger.warning("Sync session %s failed: %s", session.id, reason)
            return session.snapshot()

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def validate_session(self, session_id: str) -> SyncSession:
        with self._lock:
            return self._validate_session(session_id).snapshot()

    def validate_session_status(
        self,
        session_id: str,
        expected: SessionStatus | Collection[SessionStatus],
    ) -> SyncSession:
        with self._lock:
            return self._validate_status(session_id, expected).snapshot()

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    def add_transactions(self, transactions: Iterable[SyncTransaction]) -> None:
        with self._lock:
            session = self._require_mutable_session()
            for tx in transactions:
                self._transactions[tx.transaction_id] = tx
            session.record_transaction_count(len(self._transactions))

    def get_transaction(self, transaction_id: str) -> SyncTransaction | None:
        with self._lock:
            self._require_session()
            return self._transactions.get(transaction_id)

    def get_transactions(self) -> list[SyncTransaction]:
        with self._lock:
            self._require_session()
            return list(self._transactions.values())

    def update_transaction(self, transaction: SyncTransaction) -> None:
        self.update_transactions([transaction])

    def update_transactions(self, transactions: Iterable[SyncTransaction]) -> None:
        """Upsert by bank transaction ID; unknown IDs are inserted."""
        self.add_transactions(transactions)

    def get_status_counts(self) -> dict[TransactionStatus, int]:
        with self._lock:
            self._require_session()
            return dict(Counter(tx.status for tx in self._transactions.values()))

    # -------------------------------------------------------------------------
    # Internal helpers (lock must be held)
    # -------------------------------------------------------------------------

    def _require_session(self) -> SyncSession:
        if self._session is None:
            raise NoActiveSessionError()
        return self._session

    def _require_mutable_session(self) -> SyncSession:
        session = self._require_session()
        if session.is_terminal():
            raise InvalidSessionStateError(
                expected="non-terminal",
                actual=session.status.value,
            )
        return session

    def _validate_session(self, session_id: str) -> SyncSession:
        session = self._session
        if session is None or session.id != session_id:
            raise SessionNotFoundError(session_id)
        return session

    def _validate_status(
        self,
        session_id: str,
        expected: SessionStatus | Collection[SessionStatus],
    ) -> SyncSession:
        session = self._validate_session(session_id)
        allowed = [expected] if isinstance(expected, SessionStatus) else list(expected)
        if session.status not in allowed:
            raise InvalidSessionStateError(
                expected=" | ".join(s.value for s in allowed),
                actual=session.status.value,
            )
        return session


def _is_imported(transaction: SyncTransaction) -> bool:
    return (
        transaction.import_status.kind == "imported"
        or transaction.status == TransactionStatus.IMPORTED
    )
