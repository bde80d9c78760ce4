"""Sync domain services."""

from budgetbuddy.domain.sync.services.duplicate_detection_service import (
    DuplicateCounts,
    DuplicateDetectionService,
)

__all__ = ["DuplicateCounts", "DuplicateDetectionService"]
