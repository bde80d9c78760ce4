"""Sync entities."""

from budgetbuddy.domain.sync.entities.sync_session import SyncSession
from budgetbuddy.domain.sync.entities.sync_transaction import SyncTransaction

__all__ = ["SyncSession", "SyncTransaction"]
