"""Sync repositories."""

from budgetbuddy.domain.sync.repositories.settings_repository import (
    SettingsRepository,
)
from budgetbuddy.domain.sync.repositories.sync_session_repository import (
    SyncSessionRepository,
)

__all__ = ["SettingsRepository", "SyncSessionRepository"]
