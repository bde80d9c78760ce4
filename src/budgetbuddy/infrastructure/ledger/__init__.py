"""Budget ledger adapters."""
