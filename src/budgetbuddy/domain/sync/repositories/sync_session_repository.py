"""Repository interface for durable sync session snapshots."""

from abc import ABC, abstractmethod

from budgetbuddy.domain.sync.entities import SyncSession, SyncTransaction


class SyncSessionRepository(ABC):
    """Write-only audit trail of sync sessions.

    The in-memory session manager stays the source of truth during a run;
    implementations only record snapshots.
    """

    @abstractmethod
    async def persist_session(self, session: SyncSession) -> None:
        """Store a snapshot of the session."""

    @abstractmethod
    async def persist_transactions(
        self,
        session_id: str,
        transactions: list[SyncTransaction],
    ) -> None:
        """Store a snapshot of the session's transactions."""
