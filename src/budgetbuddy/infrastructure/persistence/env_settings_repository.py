"""Settings repository reading process configuration."""

from budgetbuddy.domain.shared.value_objects import SecureString
from budgetbuddy.domain.sync.repositories import SettingsRepository
from budgetbuddy.domain.sync.value_objects import (
    AppSettings,
    ComdirectSettings,
    DuplicateMatchConfig,
    SyncSettings,
    YnabSettings,
)
from budgetbuddy_config import Settings


class EnvSettingsRepository(SettingsRepository):
    """Builds domain settings from environment-backed ``Settings``.

    Bank or ledger settings are None when their credentials are missing.
    """

    def __init__(self, settings: Settings):
        self._settings = settings

    async def load_settings(self) -> AppSettings:
        s = self._settings
        return AppSettings(
            comdirect=self._comdirect_settings(),
            ynab=self._ynab_settings(),
            sync=SyncSettings(
                days_to_fetch=s.sync_days_to_fetch,
                duplicate_matching=DuplicateMatchConfig(
                    date_tolerance_days=s.duplicate_date_tolerance_days,
                    amount_tolerance_percent=s.duplicate_amount_tolerance_percent,
                ),
            ),
        )

    def _comdirect_settings(self) -> ComdirectSettings | None:
        s = self._settings
        secret = s.comdirect_client_secret.get_secret_value() if s.comdirect_client_secret else ""
        password = s.comdirect_password.get_secret_value() if s.comdirect_password else ""
        if not (s.comdirect_client_id and secret and s.comdirect_username and password):
            return None
        return ComdirectSettings(
            client_id=s.comdirect_client_id,
            client_secret=SecureString(secret),
            username=s.comdirect_username,
            password=SecureString(password),
            account_id=s.comdirect_account_id,
        )

    def _ynab_settings(self) -> YnabSettings | None:
        s = self._settings
        token = s.ynab_token.get_secret_value() if s.ynab_token else ""
        if not token:
            return None
        return YnabSettings(
            token=SecureString(token),
            default_budget_id=s.ynab_budget_id,
            default_account_id=s.ynab_account_id,
        )
