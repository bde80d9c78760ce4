"""Rules repositories."""

from budgetbuddy.domain.rules.repositories.rule_repository import RuleRepository

__all__ = ["RuleRepository"]
