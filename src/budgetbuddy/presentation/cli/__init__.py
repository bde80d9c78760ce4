"""BudgetBuddy command-line interface."""
