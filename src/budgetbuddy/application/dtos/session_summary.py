"""DTO summarizing the active sync session for progress display."""

from dataclasses import dataclass

from budgetbuddy.domain.sync.entities import SyncSession
from budgetbuddy.domain.sync.services import DuplicateCounts
from budgetbuddy.domain.sync.value_objects import TransactionStatus


@dataclass(frozen=True)
class SessionSummary:
    session: SyncSession
    status_counts: dict[TransactionStatus, int]
    duplicate_counts: DuplicateCounts

    def to_dict(self) -> dict:
        return {
            "session_id": self.session.id,
            "status": self.session.status.value,
            "started_at": self.session.started_at.isoformat(),
            "completed_at": (
                self.session.completed_at.isoformat()
                if self.session.completed_at
                else None
            ),
            "failure_reason": self.session.failure_reason,
            "transaction_count": self.session.transaction_count,
            "imported_count": self.session.imported_count,
            "skipped_count": self.session.skipped_count,
            "status_counts": {k.value: v for k, v in self.status_counts.items()},
            "duplicates": {
                "confirmed": self.duplicate_counts.confirmed,
                "possible": self.duplicate_counts.possible,
                "none": self.duplicate_counts.none,
            },
        }
