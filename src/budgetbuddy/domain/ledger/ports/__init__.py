"""Ledger ports."""

from budgetbuddy.domain.ledger.ports.ledger_port import LedgerPort

__all__ = ["LedgerPort"]
