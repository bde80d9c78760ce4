"""YNAB API v1 payloads.

Request models keep amounts as ``int`` milliunits so they serialize as
JSON numbers. YNAB silently drops transactions whose amount arrives as a
string.
"""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field

_IGNORE_EXTRA = ConfigDict(extra="ignore")

# =============================================================================
# Requests
# =============================================================================


class SaveSubTransaction(BaseModel):
    amount: int
    category_id: str
    memo: str | None = None


class SaveTransaction(BaseModel):
    account_id: str
    date: date
    amount: int
    payee_name: str
    memo: str
    cleared: str = "cleared"
    import_id: str
    category_id: str | None = None
    subtransactions: list[SaveSubTransaction] | None = None


class SaveTransactionsRequest(BaseModel):
    transactions: list[SaveTransaction]


# =============================================================================
# Responses
# =============================================================================


class ErrorDetail(BaseModel):
    id: str | None = None
    name: str | None = None
    detail: str | None = None

    model_config = _IGNORE_EXTRA


class ErrorResponse(BaseModel):
    error: ErrorDetail

    model_config = _IGNORE_EXTRA


class BudgetSummary(BaseModel):
    id: str
    name: str

    model_config = _IGNORE_EXTRA


class BudgetsData(BaseModel):
    budgets: list[BudgetSummary]

    model_config = _IGNORE_EXTRA


class BudgetsResponse(BaseModel):
    data: BudgetsData

    model_config = _IGNORE_EXTRA


class Account(BaseModel):
    id: str
    name: str
    balance: int = 0
    closed: bool = False
    deleted: bool = False

    model_config = _IGNORE_EXTRA


class Category(BaseModel):
    id: str
    name: str
    hidden: bool = False
    deleted: bool = False

    model_config = _IGNORE_EXTRA


class CategoryGroup(BaseModel):
    name: str
    hidden: bool = False
    deleted: bool = False
    # YNAB omits the key for its internal master category group
    categories: list[Category] = Field(default_factory=list)

    model_config = _IGNORE_EXTRA


class BudgetDetail(BaseModel):
    id: str
    name: str
    accounts: list[Account] = Field(default_factory=list)
    category_groups: list[CategoryGroup] = Field(default_factory=list)

    model_config = _IGNORE_EXTRA


class BudgetDetailData(BaseModel):
    budget: BudgetDetail

    model_config = _IGNORE_EXTRA


class BudgetDetailResponse(BaseModel):
    data: BudgetDetailData

    model_config = _IGNORE_EXTRA


class CategoriesData(BaseModel):
    category_groups: list[CategoryGroup]

    model_config = _IGNORE_EXTRA


class CategoriesResponse(BaseModel):
    data: CategoriesData

    model_config = _IGNORE_EXTRA


class TransactionDetail(BaseModel):
    id: str
    date: date
    amount: int
    payee_name: str | None = None
    memo: str | None = None
    import_id: str | None = None
    deleted: bool = False

    model_config = _IGNORE_EXTRA


class TransactionsData(BaseModel):
    transactions: list[TransactionDetail]

    model_config = _IGNORE_EXTRA


class TransactionsResponse(BaseModel):
    data: TransactionsData

    model_config = _IGNORE_EXTRA


class SaveTransactionsData(BaseModel):
    transactions: list[TransactionDetail] = Field(default_factory=list)
    duplicate_import_ids: list[str] = Field(default_factory=list)

    model_config = _IGNORE_EXTRA


class SaveTransactionsResponse(BaseModel):
    data: SaveTransactionsData

    model_config = _IGNORE_EXTRA
