"""Wires adapters, repositories and services for CLI commands."""

from __future__ import annotations

from dataclasses import dataclass

from budgetbuddy.application.services import SyncPipelineService, SyncSessionManager
from budgetbuddy.domain.shared.exceptions import ValidationError
from budgetbuddy.domain.shared.value_objects import SecureString
from budgetbuddy.infrastructure.banking.comdirect import ComdirectBankAdapter
from budgetbuddy.infrastructure.ledger.ynab import YnabLedgerClient
from budgetbuddy.infrastructure.persistence import (
    EnvSettingsRepository,
    InMemorySyncSessionRepository,
    JsonFileRuleRepository,
)
from budgetbuddy_config import Settings


@dataclass
class Container:
    pipeline: SyncPipelineService
    bank: ComdirectBankAdapter
    ledger: YnabLedgerClient

    async def close(self) -> None:
        await self.bank.close()
        await self.ledger.close()


def build_ledger_client(settings: Settings) -> YnabLedgerClient:
    if settings.ynab_token is None or not settings.ynab_token.get_secret_value():
        msg = "YNAB token is not configured (set YNAB_TOKEN)"
        raise ValidationError(msg, details={"field": "ynab_token"})
    return YnabLedgerClient(
        token=SecureString(settings.ynab_token.get_secret_value()),
        base_url=settings.ynab_api_url,
        timeout=settings.http_timeout_seconds,
        memo_max_length=settings.ledger_memo_max_length,
    )


def build_container(settings: Settings) -> Container:
    bank = ComdirectBankAdapter(
        base_url=settings.comdirect_api_url,
        timeout=settings.http_timeout_seconds,
    )
    ledger = build_ledger_client(settings)
    pipeline = SyncPipelineService(
        session_manager=SyncSessionManager(),
        bank=bank,
        ledger=ledger,
        rule_repository=JsonFileRuleRepository(settings.resolved_rules_file),
        settings_repository=EnvSettingsRepository(settings),
        session_repository=InMemorySyncSessionRepository(),
        timeout_seconds=settings.http_timeout_seconds * 2,
    )
    return Container(pipeline=pipeline, bank=bank, ledger=ledger)
