"""Shared value objects used across domains."""

from budgetbuddy.domain.shared.value_objects.money import Money
from budgetbuddy.domain.shared.value_objects.secure_string import SecureString

__all__ = ["Money", "SecureString"]
