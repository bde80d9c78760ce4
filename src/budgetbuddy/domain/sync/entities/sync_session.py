"""Sync session entity."""

from __future__ import annotations

import copy
from datetime import datetime
from uuid import uuid4

from budgetbuddy.domain.shared.time import utc_now
from budgetbuddy.domain.sync.exceptions import InvalidSessionStateError
from budgetbuddy.domain.sync.value_objects import SessionStatus


class SyncSession:
    """
    One run of the sync pipeline, from bank authentication to export.

    Purpose:
    - Tracks the pipeline stage (see SessionStatus)
    - Records transaction, imported and skipped counts for the summary
    - Records why a run failed

    Completed and Failed are terminal. Counts are only written by
    ``complete`` and ``record_transaction_count``, which the session
    manager derives from the actual transaction list.
    """

    def __init__(
        self,
        session_id: str | None = None,
        status: SessionStatus = SessionStatus.AWAITING_BANK_AUTH,
        started_at: datetime | None = None,
        completed_at: datetime | None = None,
        transaction_count: int = 0,
        imported_count: int = 0,
        skipped_count: int = 0,
        failure_reason: str | None = None,
    ):
        self._id = session_id or str(uuid4())
        self._status = status
        self._started_at = started_at or utc_now()
        self._completed_at = completed_at
        self._transaction_count = transaction_count
        self._imported_count = imported_count
        self._skipped_count = skipped_count
        self._failure_reason = failure_reason

    @property
    def id(self) -> str:
        return self._id

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def started_at(self) -> datetime:
        return self._started_at

    @property
    def completed_at(self) -> datetime | None:
        return self._completed_at

    @property
    def transaction_count(self) -> int:
        return self._transaction_count

    @property
    def imported_count(self) -> int:
        return self._imported_count

    @property
    def skipped_count(self) -> int:
        return self._skipped_count

    @property
    def failure_reason(self) -> str | None:
        return self._failure_reason

    def is_terminal(self) -> bool:
        return self._status.is_terminal()

    def transition_to(self, target: SessionStatus) -> None:
        if not self._status.can_transition_to(target):
            raise InvalidSessionStateError(
                expected=self._allowed_sources(target),
                actual=self._status.value,
            )
        self._status = target

    def record_transaction_count(self, count: int) -> None:
        self._ensure_not_terminal()
        self._transaction_count = count

    def complete(self, imported_count: int, skipped_count: int) -> None:
        self.transition_to(SessionStatus.COMPLETED)
        self._imported_count = imported_count
        self._skipped_count = skipped_count
        self._completed_at = utc_now()

    def fail(self, reason: str) -> None:
        self.transition_to(SessionStatus.FAILED)
        self._failure_reason = reason
        self._completed_at = utc_now()

    def snapshot(self) -> SyncSession:
        """Detached copy for readers outside the session manager."""
        return copy.copy(self)

    def _ensure_not_terminal(self) -> None:
        if self.is_terminal():
            raise InvalidSessionStateError(
                expected="non-terminal",
                actual=self._status.value,
            )

    @staticmethod
    def _allowed_sources(target: SessionStatus) -> str:
        sources = [s.value for s in SessionStatus if s.can_transition_to(target)]
        return " | ".join(sources)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SyncSession):
            return False
        return self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __repr__(self) -> str:
        return (
            f"SyncSession(id={self._id!r}, status={self._status.value!r}, "
            f"transactions={self._transaction_count})"
        )
