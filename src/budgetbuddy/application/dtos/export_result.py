"""DTO for the ledger export step."""

from dataclasses import dataclass, field
from typing import Optional

from budgetbuddy.domain.sync.entities import SyncSession


@dataclass(frozen=True)
class ExportResult:
    """Result of exporting reviewed transactions to the ledger.

    ``imported_count`` is what the ledger actually created. Duplicates are
    import IDs the ledger refused because an earlier export created them.
    """

    imported_count: int
    duplicate_count: int
    failed_count: int
    excluded_count: int
    duplicate_import_ids: tuple[str, ...] = field(default_factory=tuple)
    session: Optional[SyncSession] = None

    def to_dict(self) -> dict:
        return {
            "imported_count": self.imported_count,
            "duplicate_count": self.duplicate_count,
            "failed_count": self.failed_count,
            "excluded_count": self.excluded_count,
            "duplicate_import_ids": list(self.duplicate_import_ids),
            "session_status": self.session.status.value if self.session else None,
        }
