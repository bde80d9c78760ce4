"""YNAB ledger adapter."""

from budgetbuddy.infrastructure.ledger.ynab.milliunits import (
    from_milliunits,
    to_milliunits,
)
from budgetbuddy.infrastructure.ledger.ynab.ynab_client import YnabLedgerClient

__all__ = ["YnabLedgerClient", "from_milliunits", "to_milliunits"]
