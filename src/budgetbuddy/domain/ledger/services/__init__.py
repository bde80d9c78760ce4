"""Ledger domain services."""

from budgetbuddy.domain.ledger.services.import_identity import (
    ELLIPSIS,
    REFERENCE_MARKER,
    compute_import_id,
    extract_reference,
    format_export_memo,
    reference_suffix,
)

__all__ = [
    "ELLIPSIS",
    "REFERENCE_MARKER",
    "compute_import_id",
    "extract_reference",
    "format_export_memo",
    "reference_suffix",
]
