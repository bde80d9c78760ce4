"""Categorization rule value object."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from budgetbuddy.domain.shared.time import utc_now


class PatternKind(Enum):
    """How a rule's pattern is matched."""

    REGEX = "regex"
    CONTAINS = "contains"
    EXACT = "exact"


class TargetField(Enum):
    """Which transaction text a rule's pattern is matched against."""

    PAYEE = "payee"
    MEMO = "memo"
    COMBINED = "combined"


class Rule(BaseModel):
    """User-defined rule assigning a ledger category to matching transactions.

    Lower ``priority`` values are evaluated first. Rules are configuration:
    the pipeline never mutates them.
    """

    id: str = Field(..., min_length=1)
    name: str
    pattern: str = Field(..., min_length=1)
    pattern_kind: PatternKind = PatternKind.CONTAINS
    target_field: TargetField = TargetField.COMBINED
    category_id: str = Field(..., min_length=1)
    category_name: str
    payee_override: str | None = None
    priority: int = 100
    enabled: bool = True
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    model_config = ConfigDict(frozen=True)
