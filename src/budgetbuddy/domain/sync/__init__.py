"""Sync domain: session state machine, review records and duplicate detection."""
