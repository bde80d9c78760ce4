"""Ledger value objects."""

from budgetbuddy.domain.ledger.value_objects.ledger_taxonomy import (
    LedgerAccount,
    LedgerBudget,
    LedgerBudgetDetail,
    LedgerCategory,
)
from budgetbuddy.domain.ledger.value_objects.ledger_transaction import (
    BulkCreateResult,
    LedgerTransaction,
)

__all__ = [
    "BulkCreateResult",
    "LedgerAccount",
    "LedgerBudget",
    "LedgerBudgetDetail",
    "LedgerCategory",
    "LedgerTransaction",
]
