"""Read-only mirrors of the ledger's budgets, accounts and categories."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class LedgerBudget(BaseModel):
    id: str
    name: str

    model_config = ConfigDict(frozen=True)


class LedgerAccount(BaseModel):
    id: str
    name: str
    balance: Decimal = Field(default=Decimal(0), description="In currency units")

    model_config = ConfigDict(frozen=True)


class LedgerCategory(BaseModel):
    id: str
    name: str
    group_name: str | None = None

    model_config = ConfigDict(frozen=True)


class LedgerBudgetDetail(BaseModel):
    """A budget with its accounts and flattened category list."""

    id: str
    name: str
    accounts: tuple[LedgerAccount, ...] = ()
    categories: tuple[LedgerCategory, ...] = ()

    model_config = ConfigDict(frozen=True)
