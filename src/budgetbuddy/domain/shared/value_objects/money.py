"""Value object for monetary amounts."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

DEFAULT_CURRENCY = "EUR"

# The ledger stores milliunits, so three fractional digits is the finest
# amount that can cross the export boundary without rounding.
MAX_DECIMAL_PLACES = 3


class Money(BaseModel):
    """Value object representing a signed amount with currency."""

    amount: Decimal
    currency: str = DEFAULT_CURRENCY

    model_config = ConfigDict(frozen=True)

    # overriding pydantic init to allow positional arguments Money("1.50")
    def __init__(
        self,
        amount: Decimal | int | str | None = None,
        currency: str | None = None,
        **data: Any,
    ):
        if "amount" not in data:
            data["amount"] = amount
        if "currency" not in data and currency is not None:
            data["currency"] = currency
        super().__init__(**data)

    @field_validator("amount", mode="before")
    @classmethod
    def validate_amount(cls, v: Any) -> Decimal:
        if isinstance(v, float):
            msg = "Money must not be built from float, use Decimal or str"
            raise ValueError(msg)
        if not isinstance(v, Decimal):
            v = Decimal(str(v))
        if not v.is_finite():
            msg = "Money amount must be finite"
            raise ValueError(msg)
        return v

    @field_validator("currency", mode="before")
    @classmethod
    def validate_currency(cls, v: Any) -> str:
        code = str(v or DEFAULT_CURRENCY).strip().upper()
        if len(code) != 3 or not code.isalpha():  # NOQA: PLR2004
            msg = f"Invalid currency code: {v!r}"
            raise ValueError(msg)
        return code

    def __hash__(self) -> int:
        return hash((self.amount, self.currency))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Money):
            return False
        return self.amount == other.amount and self.currency == other.currency

    def __add__(self, other: Money) -> Money:
        if self.currency != other.currency:
            msg = f"Cannot add different currencies: {self.currency} + {other.currency}"
            raise ValueError(msg)
        return Money(self.amount + other.amount, self.currency)

    def __neg__(self) -> Money:
        return Money(-self.amount, self.currency)

    def __str__(self) -> str:
        return f"{self.amount:.2f} {self.currency}"

    def is_negative(self) -> bool:
        return self.amount < Decimal(0)

    def abs(self) -> Money:
        return Money(abs(self.amount), self.currency)

    def has_milliunit_precision(self) -> bool:
        exponent = self.amount.as_tuple().exponent
        return isinstance(exponent, int) and exponent >= -MAX_DECIMAL_PLACES

    @classmethod
    def zero(cls, currency: str = DEFAULT_CURRENCY) -> Money:
        return cls(Decimal(0), currency)
