"""Persistence adapters for rules, settings and session snapshots."""

from budgetbuddy.infrastructure.persistence.env_settings_repository import (
    EnvSettingsRepository,
)
from budgetbuddy.infrastructure.persistence.in_memory import (
    InMemoryRuleRepository,
    InMemorySettingsRepository,
    InMemorySyncSessionRepository,
)
from budgetbuddy.infrastructure.persistence.json_rule_repository import (
    JsonFileRuleRepository,
)

__all__ = [
    "EnvSettingsRepository",
    "InMemoryRuleRepository",
    "InMemorySettingsRepository",
    "InMemorySyncSessionRepository",
    "JsonFileRuleRepository",
]
