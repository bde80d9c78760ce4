"""Bank API adapters."""
