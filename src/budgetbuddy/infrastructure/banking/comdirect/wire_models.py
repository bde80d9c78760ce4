"""Comdirect REST API payloads.

Only the fields the sync pipeline consumes are modelled; unknown fields
are ignored so additive API changes do not break decoding.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

_IGNORE_EXTRA = ConfigDict(extra="ignore", populate_by_name=True)


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    expires_in: int | None = None

    model_config = _IGNORE_EXTRA


class SessionItem(BaseModel):
    identifier: str

    model_config = _IGNORE_EXTRA


class OnceAuthenticationInfo(BaseModel):
    """Content of the ``x-once-authentication-info`` response header."""

    id: str
    typ: str

    model_config = _IGNORE_EXTRA


class AmountValue(BaseModel):
    value: Decimal
    unit: str = "EUR"

    model_config = _IGNORE_EXTRA


class Holder(BaseModel):
    holder_name: str | None = Field(default=None, alias="holderName")

    model_config = _IGNORE_EXTRA


class TransactionEntry(BaseModel):
    reference: str | None = None
    booking_date: date = Field(alias="bookingDate")
    amount: AmountValue
    remitter: Holder | None = None
    creditor: Holder | None = None
    remittance_info: str = Field(default="", alias="remittanceInfo")

    model_config = _IGNORE_EXTRA

    @property
    def counterparty(self) -> str | None:
        for holder in (self.remitter, self.creditor):
            if holder is not None and holder.holder_name:
                return holder.holder_name.strip() or None
        return None


class TransactionPage(BaseModel):
    values: list[TransactionEntry] = Field(default_factory=list)

    model_config = _IGNORE_EXTRA


class AccountType(BaseModel):
    key: str = ""
    text: str = ""

    model_config = _IGNORE_EXTRA


class AccountInfo(BaseModel):
    account_id: str = Field(alias="accountId")
    account_display_id: str = Field(default="", alias="accountDisplayId")
    currency: str = "EUR"
    account_type: AccountType = Field(default_factory=AccountType, alias="accountType")
    iban: str | None = None

    model_config = _IGNORE_EXTRA


class AccountBalance(BaseModel):
    account: AccountInfo
    balance: AmountValue | None = None

    model_config = _IGNORE_EXTRA


class AccountBalancePage(BaseModel):
    values: list[AccountBalance] = Field(default_factory=list)

    model_config = _IGNORE_EXTRA


class ErrorMessage(BaseModel):
    message: str | None = None
    key: str | None = None

    model_config = _IGNORE_EXTRA


class ErrorEnvelope(BaseModel):
    """Error body of API calls (``messages``) or of the token endpoint."""

    code: str | None = None
    messages: list[ErrorMessage] = Field(default_factory=list)
    error: str | None = None
    error_description: str | None = None

    model_config = _IGNORE_EXTRA

    def human_message(self) -> str | None:
        for entry in self.messages:
            if entry.message:
                return entry.message
        return self.error_description or self.error or self.code
