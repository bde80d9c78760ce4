"""BudgetBuddy - bank to budget ledger synchronization."""
