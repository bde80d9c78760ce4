"""Sync settings value objects.

Loaded through the settings repository and consumed by the pipeline when a
sync starts.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from budgetbuddy.domain.shared.value_objects import SecureString

MIN_DAYS_TO_FETCH = 1
MAX_DAYS_TO_FETCH = 90


@dataclass(frozen=True)
class ComdirectSettings:
    """Bank API client registration and login."""

    client_id: str
    client_secret: SecureString
    username: str
    password: SecureString
    account_id: str | None = None


@dataclass(frozen=True)
class YnabSettings:
    """Ledger API token and export target."""

    token: SecureString
    default_budget_id: str | None = None
    default_account_id: str | None = None


@dataclass(frozen=True)
class DuplicateMatchConfig:
    """Tolerances for the fuzzy duplicate check."""

    date_tolerance_days: int = 1
    amount_tolerance_percent: Decimal = Decimal("0.01")

    def __post_init__(self) -> None:
        if self.date_tolerance_days < 0:
            msg = f"date_tolerance_days must be >= 0, got: {self.date_tolerance_days}"
            raise ValueError(msg)
        if self.amount_tolerance_percent < 0:
            msg = (
                "amount_tolerance_percent must be >= 0, got: "
                f"{self.amount_tolerance_percent}"
            )
            raise ValueError(msg)


@dataclass(frozen=True)
class SyncSettings:
    """Settings controlling a sync run."""

    days_to_fetch: int = 30
    duplicate_matching: DuplicateMatchConfig = field(
        default_factory=DuplicateMatchConfig,
    )

    def __post_init__(self) -> None:
        if not MIN_DAYS_TO_FETCH <= self.days_to_fetch <= MAX_DAYS_TO_FETCH:
            msg = (
                f"days_to_fetch must be between {MIN_DAYS_TO_FETCH} and "
                f"{MAX_DAYS_TO_FETCH}, got: {self.days_to_fetch}"
            )
            raise ValueError(msg)


@dataclass(frozen=True)
class AppSettings:
    """Everything the pipeline needs from the settings store."""

    comdirect: ComdirectSettings | None
    ynab: YnabSettings | None
    sync: SyncSettings = field(default_factory=SyncSettings)
