"""Deterministic import identifiers and the memo reference trailer.

Both conventions are how a later sync recognises transactions that an
earlier sync already exported:

- the import ID is sent with every exported transaction so the ledger
  itself refuses re-imports;
- the reference trailer (``", Ref: <reference>"``) is appended to the
  exported memo so the reference survives in the ledger even when import
  IDs are lost (manual edits, transactions imported by older tooling).
"""

import hashlib
import logging
from datetime import date

logger = logging.getLogger(__name__)

IMPORT_ID_PREFIX = "BB:"
IMPORT_ID_HASH_LENGTH = 32

REFERENCE_MARKER = "Ref:"
REFERENCE_SEPARATOR = ", "
ELLIPSIS = "..."


def compute_import_id(transaction_id: str, booking_date: date) -> str:
    """Return the import ID for a bank transaction.

    Format: ``"BB:" + sha256("<transaction_id>|<YYYY-MM-DD>")[:32]``
    (35 characters, within the ledger's 36 character limit).
    """
    identity = f"{transaction_id}|{booking_date.isoformat()}"
    digest = hashlib.sha256(identity.encode("utf-8")).hexdigest()
    return f"{IMPORT_ID_PREFIX}{digest[:IMPORT_ID_HASH_LENGTH]}"


def reference_suffix(reference: str) -> str:
    return f"{REFERENCE_SEPARATOR}{REFERENCE_MARKER} {reference}"


def extract_reference(memo: str | None) -> str | None:
    """Return the reference from a memo trailer, or None if absent or blank."""
    if not memo:
        return None
    position = memo.rfind(REFERENCE_MARKER)
    if position < 0:
        return None
    value = memo[position + len(REFERENCE_MARKER) :].strip()
    return value or None


def format_export_memo(memo: str, reference: str, max_length: int) -> str:
    """Collapse whitespace, append the reference trailer and fit ``max_length``.

    Overlong memos are cut from the front and prefixed with ``"..."`` so the
    trailer, and with it the reference, always survives intact.
    """
    collapsed = " ".join(memo.split())
    suffix = reference_suffix(reference)
    if not collapsed:
        suffix = suffix[len(REFERENCE_SEPARATOR) :]

    combined = collapsed + suffix
    if len(combined) <= max_length:
        return combined

    available = max_length - len(suffix) - len(ELLIPSIS)
    if available <= 0:
        logger.warning(
            "Reference %s does not fit into memo limit of %d characters",
            reference,
            max_length,
        )
        return (ELLIPSIS + suffix)[-max_length:]

    return ELLIPSIS + collapsed[-available:] + suffix
