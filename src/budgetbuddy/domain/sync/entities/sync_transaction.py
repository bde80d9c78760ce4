"""Sync transaction: the working record reviewed during a sync session."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from budgetbuddy.domain.banking.value_objects import BankTransaction
from budgetbuddy.domain.sync.value_objects import (
    DuplicateMatchDetails,
    DuplicateStatus,
    ExternalLink,
    LedgerImportStatus,
    NotAttempted,
    NotDuplicate,
    TransactionSplit,
    TransactionStatus,
    validate_splits,
)

UNKNOWN_PAYEE = "Unknown"


class SyncTransaction(BaseModel):
    """
    A bank transaction plus everything decided about it during review.

    Instances are immutable; every review action returns an updated copy
    that the session manager stores under the bank transaction's ID. Copies
    made through the ``with_*`` helpers leave all other fields untouched.

    Export requires either a category or at least two splits, never both.
    """

    transaction: BankTransaction
    status: TransactionStatus = TransactionStatus.PENDING
    category_id: str | None = None
    category_name: str | None = None
    matched_rule_id: str | None = None
    payee_override: str | None = None
    external_links: tuple[ExternalLink, ...] = ()
    user_notes: str | None = None
    duplicate_status: DuplicateStatus
    import_status: LedgerImportStatus = Field(default_factory=NotAttempted)
    splits: tuple[TransactionSplit, ...] | None = None

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _default_duplicate_status(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("duplicate_status") is None:
            transaction = data.get("transaction")
            reference = (
                transaction.reference
                if isinstance(transaction, BankTransaction)
                else (transaction or {}).get("reference", "")
            )
            data = {
                **data,
                "duplicate_status": NotDuplicate(
                    details=DuplicateMatchDetails(transaction_reference=reference),
                ),
            }
        return data

    @property
    def transaction_id(self) -> str:
        return self.transaction.transaction_id

    @property
    def effective_payee(self) -> str:
        return self.payee_override or self.transaction.payee or UNKNOWN_PAYEE

    @property
    def has_splits(self) -> bool:
        return self.splits is not None and len(self.splits) >= 2  # NOQA: PLR2004

    @property
    def is_exportable(self) -> bool:
        """Not skipped, and either categorized or split."""
        if self.status == TransactionStatus.SKIPPED:
            return False
        return self.category_id is not None or self.has_splits

    # -------------------------------------------------------------------------
    # Review actions
    # -------------------------------------------------------------------------

    def with_category(self, category_id: str, category_name: str) -> SyncTransaction:
        return self.model_copy(
            update={
                "category_id": category_id,
                "category_name": category_name,
                "splits": None,
                "status": TransactionStatus.MANUAL_CATEGORIZED,
            },
        )

    def without_category(self) -> SyncTransaction:
        return self.model_copy(
            update={
                "category_id": None,
                "category_name": None,
                "matched_rule_id": None,
                "status": TransactionStatus.PENDING,
            },
        )

    def skipped(self) -> SyncTransaction:
        return self.model_copy(update={"status": TransactionStatus.SKIPPED})

    def unskipped(self) -> SyncTransaction:
        status = (
            TransactionStatus.MANUAL_CATEGORIZED
            if self.category_id is not None or self.has_splits
            else TransactionStatus.PENDING
        )
        return self.model_copy(update={"status": status})

    def with_payee_override(self, payee: str | None) -> SyncTransaction:
        cleaned = payee.strip() if payee else None
        return self.model_copy(update={"payee_override": cleaned or None})

    def with_notes(self, notes: str | None) -> SyncTransaction:
        return self.model_copy(update={"user_notes": notes or None})

    def with_splits(self, splits: list[TransactionSplit]) -> SyncTransaction:
        validate_splits(self.transaction.amount, splits, self.transaction_id)
        return self.model_copy(
            update={
                "splits": tuple(splits),
                "category_id": None,
                "category_name": None,
                "status": TransactionStatus.MANUAL_CATEGORIZED,
            },
        )

    def without_splits(self) -> SyncTransaction:
        return self.model_copy(
            update={"splits": None, "status": TransactionStatus.PENDING},
        )

    def with_duplicate_status(self, status: DuplicateStatus) -> SyncTransaction:
        return self.model_copy(update={"duplicate_status": status})

    def with_import_status(self, status: LedgerImportStatus) -> SyncTransaction:
        update: dict[str, Any] = {"import_status": status}
        if status.kind == "imported":
            update["status"] = TransactionStatus.IMPORTED
        return self.model_copy(update=update)
