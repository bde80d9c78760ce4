"""Shared domain components.

This module exports shared value objects, exceptions, and helpers
used across domain boundaries.
"""

from budgetbuddy.domain.shared.exceptions import (
    DomainException,
    EntityNotFoundError,
    ErrorCode,
    ValidationError,
)
from budgetbuddy.domain.shared.time import today_utc, utc_now

__all__ = [
    # Error codes
    "ErrorCode",
    # Base exception
    "DomainException",
    # Exception categories
    "ValidationError",
    "EntityNotFoundError",
    # Utilities
    "today_utc",
    "utc_now",
]
