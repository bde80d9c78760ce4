"""Bank transaction value object."""

from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from budgetbuddy.domain.shared.value_objects import Money


class BankTransaction(BaseModel):
    """Value object representing a booked transaction coming from the bank."""

    transaction_id: str = Field(..., min_length=1, description="Bank-side identifier")
    booking_date: date = Field(..., description="When transaction was booked")
    amount: Money = Field(..., description="Signed amount, negative for debits")
    payee: str | None = Field(default=None, description="Remitter or creditor name")
    memo: str = Field(default="", description="Normalized remittance information")
    reference: str = Field(..., min_length=1, description="Bank reference string")
    raw_data: dict[str, Any] = Field(
        default_factory=dict,
        description="Source payload, kept for audit",
    )

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    @field_serializer("booking_date")
    def serialize_date(self, value: date) -> str:
        return value.isoformat()

    def is_debit(self) -> bool:
        return self.amount.is_negative()
