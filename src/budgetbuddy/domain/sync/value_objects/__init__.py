"""Sync value objects."""

from budgetbuddy.domain.sync.value_objects.duplicate_status import (
    ConfirmedDuplicate,
    DuplicateMatchDetails,
    DuplicateStatus,
    NotDuplicate,
    PossibleDuplicate,
)
from budgetbuddy.domain.sync.value_objects.external_link import ExternalLink
from budgetbuddy.domain.sync.value_objects.ledger_import_status import (
    Imported,
    LedgerImportStatus,
    NotAttempted,
    Rejected,
)
from budgetbuddy.domain.sync.value_objects.session_status import SessionStatus
from budgetbuddy.domain.sync.value_objects.sync_settings import (
    AppSettings,
    ComdirectSettings,
    DuplicateMatchConfig,
    SyncSettings,
    YnabSettings,
)
from budgetbuddy.domain.sync.value_objects.transaction_split import (
    TransactionSplit,
    validate_splits,
)
from budgetbuddy.domain.sync.value_objects.transaction_status import (
    TransactionStatus,
)

__all__ = [
    "AppSettings",
    "ComdirectSettings",
    "ConfirmedDuplicate",
    "DuplicateMatchConfig",
    "DuplicateMatchDetails",
    "DuplicateStatus",
    "ExternalLink",
    "Imported",
    "LedgerImportStatus",
    "NotAttempted",
    "NotDuplicate",
    "PossibleDuplicate",
    "Rejected",
    "SessionStatus",
    "SyncSettings",
    "TransactionSplit",
    "TransactionStatus",
    "YnabSettings",
    "validate_splits",
]
