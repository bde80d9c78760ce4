"""Ledger transaction value objects."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class LedgerTransaction(BaseModel):
    """A transaction already present in the ledger."""

    id: str
    booking_date: date
    amount: Decimal = Field(..., description="In currency units")
    payee_name: str | None = None
    memo: str | None = None
    import_id: str | None = None

    model_config = ConfigDict(frozen=True)


class BulkCreateResult(BaseModel):
    """What the ledger actually did with an export batch.

    ``created`` maps import IDs to the ledger IDs of transactions the ledger
    returned; ``duplicate_import_ids`` are the keys it refused as already
    imported. ``sent`` maps every import ID in the batch to its bank
    transaction ID; ``excluded_transaction_ids`` were filtered out before
    the request.
    """

    created: dict[str, str] = Field(default_factory=dict)
    duplicate_import_ids: tuple[str, ...] = ()
    sent: dict[str, str] = Field(default_factory=dict)
    excluded_transaction_ids: tuple[str, ...] = ()

    model_config = ConfigDict(frozen=True)

    @property
    def created_count(self) -> int:
        return len(self.created)

    @property
    def duplicate_count(self) -> int:
        return len(self.duplicate_import_ids)

    @property
    def failed_import_ids(self) -> list[str]:
        """Sent, but neither created nor reported as duplicate."""
        duplicates = set(self.duplicate_import_ids)
        return [
            import_id
            for import_id in self.sent
            if import_id not in self.created and import_id not in duplicates
        ]
