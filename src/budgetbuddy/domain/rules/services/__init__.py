"""Rules domain services."""

from budgetbuddy.domain.rules.services.rules_engine import (
    Classification,
    CompiledRule,
    RulesEngine,
)
from budgetbuddy.domain.rules.services.special_transaction_detector import (
    detect_special_transaction,
)

__all__ = [
    "Classification",
    "CompiledRule",
    "RulesEngine",
    "detect_special_transaction",
]
