"""Transaction review status enumeration."""

from enum import Enum


class TransactionStatus(Enum):
    """Lifecycle status of a transaction inside a sync session."""

    PENDING = "pending"
    AUTO_CATEGORIZED = "auto_categorized"
    MANUAL_CATEGORIZED = "manual_categorized"
    NEEDS_ATTENTION = "needs_attention"
    SKIPPED = "skipped"
    IMPORTED = "imported"
