"""Push-TAN handshake against the real Comdirect API (manual approval).

Requires the COMDIRECT_* credentials in the environment or
config/.env.test. Run with --run-manual (or RUN_MANUAL_TAN=1), then approve
the push-TAN in the photoTAN app within COMDIRECT_TAN_WAIT_SECONDS
(default 30) of the challenge being logged.
"""

import asyncio
import logging
import os

import pytest

from budgetbuddy.domain.banking.value_objects import BankCredentials, DateRange
from budgetbuddy.domain.shared.time import today_utc
from budgetbuddy.domain.shared.value_objects import SecureString
from budgetbuddy.infrastructure.banking.comdirect import ComdirectBankAdapter
from budgetbuddy_config import get_settings

logger = logging.getLogger(__name__)

pytestmark = [pytest.mark.tan, pytest.mark.manual]


@pytest.fixture
def settings():
    settings = get_settings()
    missing = [
        name
        for name, value in (
            ("COMDIRECT_CLIENT_ID", settings.comdirect_client_id),
            ("COMDIRECT_CLIENT_SECRET", settings.comdirect_client_secret),
            ("COMDIRECT_USERNAME", settings.comdirect_username),
            ("COMDIRECT_PASSWORD", settings.comdirect_password),
        )
        if not value
    ]
    if missing:
        pytest.skip(f"Missing credentials: {', '.join(missing)}")
    return settings


@pytest.fixture
def credentials(settings) -> BankCredentials:
    return BankCredentials(
        client_id=settings.comdirect_client_id,
        client_secret=SecureString(settings.comdirect_client_secret.get_secret_value()),
        username=settings.comdirect_username,
        password=SecureString(settings.comdirect_password.get_secret_value()),
    )


class TestPushTanFlow:
    @pytest.mark.asyncio
    async def test_approved_session_fetches_transactions(self, settings, credentials):
        wait_seconds = float(os.getenv("COMDIRECT_TAN_WAIT_SECONDS", "30"))
        adapter = ComdirectBankAdapter(
            base_url=settings.comdirect_api_url,
            timeout=settings.http_timeout_seconds,
        )
        try:
            handshake = await adapter.begin_handshake(credentials)
            assert handshake.challenge.is_push_tan
            logger.warning(
                "Approve push-TAN %s in the app within %.0f seconds",
                handshake.challenge.challenge_id,
                wait_seconds,
            )
            await asyncio.sleep(wait_seconds)

            session = await adapter.confirm_challenge(handshake)
            accounts = await adapter.list_accounts(session)
            assert accounts

            account_id = settings.comdirect_account_id or accounts[0].account_id
            transactions = await adapter.fetch_transactions(
                session,
                account_id,
                DateRange.last_days(30, today_utc()),
            )
        finally:
            await adapter.close()

        ids = [tx.transaction_id for tx in transactions]
        assert len(ids) == len(set(ids))
