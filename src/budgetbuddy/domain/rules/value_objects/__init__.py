"""Rules value objects."""

from budgetbuddy.domain.rules.value_objects.rule import (
    PatternKind,
    Rule,
    TargetField,
)

__all__ = ["PatternKind", "Rule", "TargetField"]
