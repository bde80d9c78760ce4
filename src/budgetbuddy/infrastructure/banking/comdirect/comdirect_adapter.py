"""Comdirect adapter - Anti-Corruption Layer for the Comdirect REST API.

This adapter implements the BankAuthPort against Comdirect's OAuth and
session-TAN flow. It translates between Comdirect's payloads and headers
and our domain model.

Handshake:
1. POST oauth/token (grant_type=password) -> first-factor token pair
2. GET sessions -> session identifier
3. POST sessions/{id}/validate -> push-TAN challenge (response header)
4. PATCH sessions/{id} with the push-TAN confirmation -> activated session
5. POST oauth/token (grant_type=cd_secondary) -> extended token pair
"""

from __future__ import annotations

import hashlib
import json
import logging
from collections import Counter
from decimal import Decimal
from typing import Any, Callable, TypeVar

import httpx
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from budgetbuddy.domain.banking.exceptions import (
    AuthenticationFailedError,
    BankInvalidResponseError,
    BankNetworkError,
    InvalidCredentialsError,
    SessionExpiredError,
    TanChallengeExpiredError,
    TanRejectedError,
    UnsupportedChallengeError,
)
from budgetbuddy.domain.banking.ports import BankAuthPort
from budgetbuddy.domain.banking.value_objects import (
    AuthHandshake,
    BankAccount,
    BankCredentials,
    BankSession,
    BankTransaction,
    ChallengeKind,
    DateRange,
    RequestInfo,
    TanChallenge,
    TokenPair,
)
from budgetbuddy.domain.shared.value_objects import Money, SecureString
from budgetbuddy.infrastructure.banking.comdirect.memo_normalizer import (
    remove_line_number_prefixes,
)
from budgetbuddy.infrastructure.banking.comdirect.wire_models import (
    AccountBalancePage,
    ErrorEnvelope,
    OnceAuthenticationInfo,
    SessionItem,
    TokenResponse,
    TransactionEntry,
    TransactionPage,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_BASE_URL = "https://api.comdirect.de/"

TOKEN_PATH = "oauth/token"
SESSIONS_PATH = "api/session/clients/user/v1/sessions"
TRANSACTIONS_PATH = "api/banking/v1/accounts/{account_id}/transactions"
ACCOUNTS_PATH = "api/banking/clients/user/v2/accounts/balances"

REQUEST_INFO_HEADER = "x-http-request-info"
ONCE_AUTH_INFO_HEADER = "x-once-authentication-info"
ONCE_AUTH_HEADER = "x-once-authentication"

# Comdirect expects this fixed TAN value once a push-TAN was approved in the app
PUSH_TAN_CONFIRMATION = "000000"

NOT_PROVIDED_REFERENCE = "NOTPROVIDED"

# Stops paging if the server keeps returning full in-range pages
MAX_PAGES = 100


def _compact_json(value: dict[str, Any]) -> str:
    return json.dumps(value, separators=(",", ":"))


def encode_request_info(request_info: RequestInfo) -> str:
    return _compact_json(
        {
            "clientRequestId": {
                "sessionId": request_info.session_id,
                "requestId": request_info.request_id,
            },
        },
    )


class ComdirectBankAdapter(BankAuthPort):
    """
    Comdirect Adapter - Anti-Corruption Layer.

    Responsibilities:
    1. Implement BankAuthPort interface
    2. Attach the bearer token and request info header to every API call
    3. Translate Comdirect payloads to domain value objects
    4. Translate status codes and error bodies to domain exceptions

    No step is retried; every failure is reported to the caller.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = base_url if base_url.endswith("/") else base_url + "/"
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                headers={"Accept": "application/json"},
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # -------------------------------------------------------------------------
    # Handshake
    # -------------------------------------------------------------------------

    async def begin_handshake(self, credentials: BankCredentials) -> AuthHandshake:
        request_info = RequestInfo.generate()
        logger.info(
            "Starting Comdirect handshake (session %s)",
            request_info.session_id,
        )

        tokens = await self._password_grant(credentials)
        identifier = await self._get_session_identifier(request_info, tokens)
        challenge = await self._request_tan_challenge(request_info, tokens, identifier)

        return AuthHandshake(
            request_info=request_info,
            tokens=tokens,
            session_identifier=identifier,
            challenge=challenge,
            client_id=credentials.client_id,
            client_secret=credentials.client_secret,
        )

    async def request_challenge(self, handshake: AuthHandshake) -> AuthHandshake:
        logger.info(
            "Requesting new TAN challenge (session %s)",
            handshake.request_info.session_id,
        )
        challenge = await self._request_tan_challenge(
            handshake.request_info,
            handshake.tokens,
            handshake.session_identifier,
        )
        return handshake.model_copy(update={"challenge": challenge})

    async def confirm_challenge(self, handshake: AuthHandshake) -> BankSession:
        await self._activate_session(handshake)
        tokens = await self._secondary_grant(handshake)
        logger.info(
            "Comdirect session activated (session %s)",
            handshake.request_info.session_id,
        )
        return BankSession(
            request_info=handshake.request_info,
            tokens=tokens,
            session_identifier=handshake.session_identifier,
        )

    async def _password_grant(self, credentials: BankCredentials) -> TokenPair:
        response = await self._send(
            "POST",
            TOKEN_PATH,
            data={
                "client_id": credentials.client_id,
                "client_secret": credentials.client_secret.get_value(),
                "username": credentials.username,
                "password": credentials.password.get_value(),
                "grant_type": "password",
            },
        )
        self._raise_for_status(
            response,
            TOKEN_PATH,
            overrides={
                400: lambda: InvalidCredentialsError(),
            },
        )
        return self._to_token_pair(self._decode(TokenResponse, response, TOKEN_PATH))

    async def _secondary_grant(self, handshake: AuthHandshake) -> TokenPair:
        response = await self._send(
            "POST",
            TOKEN_PATH,
            data={
                "client_id": handshake.client_id,
                "client_secret": handshake.client_secret.get_value(),
                "grant_type": "cd_secondary",
                "token": handshake.tokens.access_token.get_value(),
            },
        )
        self._raise_for_status(response, TOKEN_PATH)
        return self._to_token_pair(self._decode(TokenResponse, response, TOKEN_PATH))

    async def _get_session_identifier(
        self,
        request_info: RequestInfo,
        tokens: TokenPair,
    ) -> str:
        response = await self._send(
            "GET",
            SESSIONS_PATH,
            headers=self._api_headers(request_info, tokens),
        )
        self._raise_for_status(response, SESSIONS_PATH)
        sessions = self._decode(list[SessionItem], response, SESSIONS_PATH)
        if not sessions:
            raise BankInvalidResponseError("session list is empty", SESSIONS_PATH)
        return sessions[0].identifier

    async def _request_tan_challenge(
        self,
        request_info: RequestInfo,
        tokens: TokenPair,
        identifier: str,
    ) -> TanChallenge:
        path = f"{SESSIONS_PATH}/{identifier}/validate"
        response = await self._send(
            "POST",
            path,
            headers=self._api_headers(request_info, tokens),
            json=self._session_payload(identifier),
        )
        self._raise_for_status(response, path)

        header_value = response.headers.get(ONCE_AUTH_INFO_HEADER)
        if header_value is None:
            raise BankInvalidResponseError(f"missing {ONCE_AUTH_INFO_HEADER} header", path)
        try:
            info = OnceAuthenticationInfo.model_validate_json(header_value)
        except PydanticValidationError as e:
            raise BankInvalidResponseError(
                f"malformed {ONCE_AUTH_INFO_HEADER} header: {_summarize(e)}",
                path,
            ) from e

        challenge = TanChallenge(
            challenge_id=info.id,
            kind=ChallengeKind.from_wire(info.typ),
            raw_kind=info.typ,
        )
        if not challenge.is_push_tan:
            raise UnsupportedChallengeError(info.typ)

        logger.info("Push-TAN challenge %s issued, waiting for approval", challenge.challenge_id)
        return challenge

    async def _activate_session(self, handshake: AuthHandshake) -> None:
        path = f"{SESSIONS_PATH}/{handshake.session_identifier}"
        challenge_id = handshake.challenge.challenge_id
        headers = self._api_headers(handshake.request_info, handshake.tokens)
        headers[ONCE_AUTH_INFO_HEADER] = _compact_json({"id": challenge_id})
        headers[ONCE_AUTH_HEADER] = PUSH_TAN_CONFIRMATION

        response = await self._send(
            "PATCH",
            path,
            headers=headers,
            json=self._session_payload(handshake.session_identifier),
        )
        self._raise_for_status(
            response,
            path,
            overrides={
                403: lambda: TanRejectedError(challenge_id=challenge_id),
                408: lambda: TanChallengeExpiredError(challenge_id=challenge_id),
            },
        )

    # -------------------------------------------------------------------------
    # Banking
    # -------------------------------------------------------------------------

    async def fetch_transactions(
        self,
        session: BankSession,
        account_id: str,
        date_range: DateRange,
    ) -> list[BankTransaction]:
        """Fetch booked transactions, paging until entries leave the range.

        Comdirect returns newest bookings first, so paging stops at the
        first page that contains a booking older than ``date_range.start``.
        """
        collected: list[BankTransaction] = []
        occurrences: Counter[str] = Counter()
        offset = 0

        for _ in range(MAX_PAGES):
            page = await self._get_transactions_page(
                session,
                account_id,
                offset,
                occurrences,
            )
            if not page:
                break

            collected.extend(tx for tx in page if date_range.contains(tx.booking_date))

            if any(tx.booking_date < date_range.start for tx in page):
                break
            offset += len(page)
        else:
            logger.warning(
                "Stopped paging transactions of account %s after %d pages",
                account_id,
                MAX_PAGES,
            )

        logger.info(
            "Fetched %d transactions for account %s (%s to %s)",
            len(collected),
            account_id,
            date_range.start,
            date_range.end,
        )
        return collected

    async def list_accounts(self, session: BankSession) -> list[BankAccount]:
        response = await self._send(
            "GET",
            ACCOUNTS_PATH,
            headers=self._api_headers(session.request_info, session.tokens),
        )
        self._raise_for_status(response, ACCOUNTS_PATH)
        page = self._decode(AccountBalancePage, response, ACCOUNTS_PATH)
        return [
            BankAccount(
                account_id=item.account.account_id,
                display_id=item.account.account_display_id,
                account_type=item.account.account_type.text or item.account.account_type.key,
                iban=item.account.iban,
                balance=(
                    Money(item.balance.value, item.balance.unit)
                    if item.balance is not None
                    else None
                ),
            )
            for item in page.values
        ]

    async def _get_transactions_page(
        self,
        session: BankSession,
        account_id: str,
        offset: int,
        occurrences: Counter[str],
    ) -> list[BankTransaction]:
        path = TRANSACTIONS_PATH.format(account_id=account_id)
        response = await self._send(
            "GET",
            path,
            headers=self._api_headers(session.request_info, session.tokens),
            params={"transactionState": "BOOKED", "paging-first": offset},
        )
        self._raise_for_status(response, path)

        data = self._parse_json(response, path)
        page = self._validate(TransactionPage, data, path)
        raw_values = data.get("values") or [] if isinstance(data, dict) else []
        return [
            self._map_transaction(entry, raw, occurrences)
            for entry, raw in zip(page.values, raw_values)
        ]

    def _map_transaction(
        self,
        entry: TransactionEntry,
        raw: dict[str, Any],
        occurrences: Counter[str],
    ) -> BankTransaction:
        reference = (entry.reference or "").strip()
        if not reference or reference == NOT_PROVIDED_REFERENCE:
            reference = _derived_reference(entry)
            # Identical unreferenced bookings in one fetch are numbered in bank order
            occurrences[reference] += 1
            if occurrences[reference] > 1:
                reference = f"{reference}-{occurrences[reference]}"

        return BankTransaction(
            transaction_id=reference,
            booking_date=entry.booking_date,
            amount=Money(entry.amount.value, entry.amount.unit),
            payee=entry.counterparty,
            memo=remove_line_number_prefixes(entry.remittance_info),
            reference=reference,
            raw_data=raw,
        )

    # -------------------------------------------------------------------------
    # Transport helpers
    # -------------------------------------------------------------------------

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        client = await self._get_client()
        response = await client.request(method, path, **kwargs)
        logger.debug("%s %s -> %d", method, path, response.status_code)
        return response

    @staticmethod
    def _api_headers(request_info: RequestInfo, tokens: TokenPair) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {tokens.access_token.get_value()}",
            REQUEST_INFO_HEADER: encode_request_info(request_info),
        }

    @staticmethod
    def _session_payload(identifier: str) -> dict[str, Any]:
        return {
            "identifier": identifier,
            "sessionTanActive": True,
            "activated2FA": True,
        }

    @staticmethod
    def _to_token_pair(response: TokenResponse) -> TokenPair:
        return TokenPair(
            access_token=SecureString(response.access_token),
            refresh_token=SecureString(response.refresh_token),
            expires_in=response.expires_in,
        )

    def _raise_for_status(
        self,
        response: httpx.Response,
        endpoint: str,
        overrides: dict[int, Callable[[], Exception]] | None = None,
    ) -> None:
        if response.is_success:
            return

        status = response.status_code
        bank_message = _bank_message(response)
        logger.warning(
            "Comdirect %s returned %d: %s",
            endpoint,
            status,
            bank_message or "no message",
        )

        if overrides and status in overrides:
            raise overrides[status]()
        if status == httpx.codes.UNAUTHORIZED:
            raise AuthenticationFailedError(bank_message or f"access denied by {endpoint}")
        if status == httpx.codes.FORBIDDEN:
            raise SessionExpiredError(endpoint=endpoint)
        raise BankNetworkError(
            status_code=status,
            body=response.text,
            endpoint=endpoint,
            bank_message=bank_message,
        )

    def _decode(self, model: type[T] | Any, response: httpx.Response, endpoint: str) -> T:
        return self._validate(model, self._parse_json(response, endpoint), endpoint)

    @staticmethod
    def _parse_json(response: httpx.Response, endpoint: str) -> Any:
        try:
            return json.loads(response.text, parse_float=Decimal)
        except ValueError as e:
            raise BankInvalidResponseError("response body is not valid JSON", endpoint) from e

    @staticmethod
    def _validate(model: type[T] | Any, data: Any, endpoint: str) -> T:
        try:
            return TypeAdapter(model).validate_python(data)
        except PydanticValidationError as e:
            raise BankInvalidResponseError(_summarize(e), endpoint) from e


def _bank_message(response: httpx.Response) -> str | None:
    try:
        return ErrorEnvelope.model_validate_json(response.text).human_message()
    except PydanticValidationError:
        return None


def _summarize(error: PydanticValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first["loc"]) or "body"
    return f"{location}: {first['msg']}"


def _derived_reference(entry: TransactionEntry) -> str:
    """Stable stand-in for bookings Comdirect delivers without a reference."""
    identity = "|".join(
        [
            entry.booking_date.isoformat(),
            str(entry.amount.value),
            entry.amount.unit,
            entry.counterparty or "",
            entry.remittance_info.strip(),
        ],
    )
    digest = hashlib.sha256(identity.encode("utf-8")).hexdigest()
    return f"NP-{digest[:24]}"
