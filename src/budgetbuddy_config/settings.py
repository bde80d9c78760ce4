"""BudgetBuddy process settings.

Values are read, highest priority first, from:

- OS environment variables
- the env file named by ``BUDGETBUDDY_ENV_FILE``
- ``config/.env.dev`` for local development
- ``config/.env``
- the defaults below

pydantic-settings handles type coercion and validation.
"""

from __future__ import annotations

import os
from decimal import Decimal
from functools import lru_cache
from pathlib import Path

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE_VARIABLE = "BUDGETBUDDY_ENV_FILE"
ENV_FILE_CANDIDATES = (".env.dev", ".env")


def _project_root() -> Path:
    """Closest ancestor holding a config/ directory or a pyproject.toml."""
    here = Path(__file__).resolve().parent
    for directory in (here, *here.parents):
        if (directory / "config").is_dir() or (directory / "pyproject.toml").is_file():
            return directory
    return Path(__file__).resolve().parents[2]


def get_config_dir() -> Path:
    """Directory holding rules.json and the env files."""
    return _project_root() / "config"


def _env_file() -> Path | None:
    explicit = os.environ.get(ENV_FILE_VARIABLE)
    if explicit:
        path = Path(explicit)
        if not path.is_absolute():
            path = _project_root() / path
        if path.exists():
            return path

    config_dir = get_config_dir()
    for name in ENV_FILE_CANDIDATES:
        candidate = config_dir / name
        if candidate.exists():
            return candidate
    return None


class Settings(BaseSettings):
    """Settings for the bank client, the ledger client and the sync run."""

    model_config = SettingsConfigDict(
        env_file=_env_file(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = "BudgetBuddy"

    # Comdirect (COMDIRECT_ prefix)
    comdirect_api_url: str = "https://api.comdirect.de/"
    comdirect_client_id: str = ""
    comdirect_client_secret: SecretStr | None = None
    comdirect_username: str = ""
    comdirect_password: SecretStr | None = None
    comdirect_account_id: str | None = None

    # YNAB (YNAB_ prefix)
    ynab_api_url: str = "https://api.ynab.com/v1"
    ynab_token: SecretStr | None = None
    ynab_budget_id: str | None = None
    ynab_account_id: str | None = None

    # Sync
    sync_days_to_fetch: int = Field(default=30, ge=1, le=90)
    http_timeout_seconds: float = 30.0
    ledger_memo_max_length: int = 200

    # Duplicate detection
    duplicate_date_tolerance_days: int = Field(default=1, ge=0)
    duplicate_amount_tolerance_percent: Decimal = Field(
        default=Decimal("0.01"),
        ge=0,
    )

    # Rules
    rules_file: Path | None = None

    # Logging (LOG_ prefix)
    log_level: str = "INFO"

    @property
    def resolved_rules_file(self) -> Path:
        """Rules file path, defaulting to config/rules.json."""
        if self.rules_file is not None:
            return self.rules_file
        return get_config_dir() / "rules.json"


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings."""
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for tests)."""
    get_settings.cache_clear()
