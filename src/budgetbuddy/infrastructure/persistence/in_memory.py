"""In-memory repositories, used by tests and one-shot CLI runs."""

from __future__ import annotations

from budgetbuddy.domain.rules.repositories import RuleRepository
from budgetbuddy.domain.rules.value_objects import Rule
from budgetbuddy.domain.sync.entities import SyncSession, SyncTransaction
from budgetbuddy.domain.sync.repositories import (
    SettingsRepository,
    SyncSessionRepository,
)
from budgetbuddy.domain.sync.value_objects import AppSettings


class InMemoryRuleRepository(RuleRepository):
    def __init__(self, rules: list[Rule] | None = None):
        self._rules = list(rules or [])

    async def load_rules(self) -> list[Rule]:
        return list(self._rules)


class InMemorySettingsRepository(SettingsRepository):
    def __init__(self, settings: AppSettings):
        self._settings = settings

    async def load_settings(self) -> AppSettings:
        return self._settings


class InMemorySyncSessionRepository(SyncSessionRepository):
    """Keeps the latest snapshot per session ID."""

    def __init__(self) -> None:
        self.sessions: dict[str, SyncSession] = {}
        self.transactions: dict[str, list[SyncTransaction]] = {}

    async def persist_session(self, session: SyncSession) -> None:
        self.sessions[session.id] = session.snapshot()

    async def persist_transactions(
        self,
        session_id: str,
        transactions: list[SyncTransaction],
    ) -> None:
        self.transactions[session_id] = list(transactions)
