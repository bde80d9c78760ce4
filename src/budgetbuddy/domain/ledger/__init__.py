"""Ledger domain: the external budget the pipeline exports to."""
