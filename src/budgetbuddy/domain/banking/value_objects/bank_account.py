"""Bank account value object."""

from pydantic import BaseModel, ConfigDict

from budgetbuddy.domain.shared.value_objects import Money


class BankAccount(BaseModel):
    """An account visible in the authenticated bank session."""

    account_id: str
    display_id: str
    account_type: str
    iban: str | None = None
    balance: Money | None = None

    model_config = ConfigDict(frozen=True)
