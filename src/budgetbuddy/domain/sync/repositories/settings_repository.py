"""Repository interface for sync settings."""

from abc import ABC, abstractmethod

from budgetbuddy.domain.sync.value_objects import AppSettings


class SettingsRepository(ABC):
    """Read access to bank, ledger and sync settings."""

    @abstractmethod
    async def load_settings(self) -> AppSettings:
        """Load the current settings."""
