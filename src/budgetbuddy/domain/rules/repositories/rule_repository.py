"""Repository interface for categorization rules."""

from abc import ABC, abstractmethod

from budgetbuddy.domain.rules.value_objects import Rule


class RuleRepository(ABC):
    """Read access to the user's categorization rules."""

    @abstractmethod
    async def load_rules(self) -> list[Rule]:
        """
        Load all rules, enabled and disabled.

        Returns
        -------
        List of rules in storage order (the engine sorts by priority)
        """
