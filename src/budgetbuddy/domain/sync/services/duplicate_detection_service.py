"""Duplicate detection against transactions already in the ledger.

Detection Strategy (first success wins):
1. Reference match: the ledger memo carries ``Ref: <reference>`` equal to
   the bank reference -> confirmed duplicate
2. Import ID match: the ledger transaction's import ID equals the one this
   system computes for the bank transaction -> confirmed duplicate
3. Fuzzy match: date within tolerance, amount within tolerance and payees
   equal or contained in one another -> possible duplicate
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from budgetbuddy.domain.banking.value_objects import BankTransaction
from budgetbuddy.domain.ledger.services import compute_import_id, extract_reference
from budgetbuddy.domain.ledger.value_objects import LedgerTransaction
from budgetbuddy.domain.sync.entities import SyncTransaction
from budgetbuddy.domain.sync.value_objects import (
    ConfirmedDuplicate,
    DuplicateMatchConfig,
    DuplicateMatchDetails,
    DuplicateStatus,
    NotDuplicate,
    PossibleDuplicate,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DuplicateCounts:
    confirmed: int
    possible: int
    none: int


class DuplicateDetectionService:
    """Compares bank transactions with the ledger's existing transactions."""

    def __init__(self, config: DuplicateMatchConfig | None = None):
        self._config = config or DuplicateMatchConfig()

    @property
    def config(self) -> DuplicateMatchConfig:
        return self._config

    def detect_duplicate(
        self,
        ledger_transactions: Sequence[LedgerTransaction],
        bank_transaction: BankTransaction,
    ) -> DuplicateStatus:
        reference_match = next(
            (
                tx
                for tx in ledger_transactions
                if self.matches_by_reference(bank_transaction, tx)
            ),
            None,
        )
        import_id_match = next(
            (
                tx
                for tx in ledger_transactions
                if self.matches_by_import_id(bank_transaction, tx)
            ),
            None,
        )
        fuzzy_match = next(
            (
                tx
                for tx in ledger_transactions
                if self.matches_fuzzy(bank_transaction, tx)
            ),
            None,
        )

        details = DuplicateMatchDetails(
            transaction_reference=bank_transaction.reference,
            reference_found=reference_match is not None,
            import_id_found=import_id_match is not None,
            fuzzy_match_date=fuzzy_match.booking_date if fuzzy_match else None,
            fuzzy_match_amount=fuzzy_match.amount if fuzzy_match else None,
            fuzzy_match_payee=fuzzy_match.payee_name if fuzzy_match else None,
        )

        if reference_match is not None or import_id_match is not None:
            return ConfirmedDuplicate(
                reference=bank_transaction.reference,
                details=details,
            )

        if fuzzy_match is not None:
            reason = (
                f"Similar transaction found: {fuzzy_match.payee_name or 'Unknown'} "
                f"on {fuzzy_match.booking_date.isoformat()} "
                f"for {fuzzy_match.amount:.2f}"
            )
            return PossibleDuplicate(reason=reason, details=details)

        return NotDuplicate(details=details)

    def mark_duplicates(
        self,
        ledger_transactions: Sequence[LedgerTransaction],
        transactions: Sequence[SyncTransaction],
    ) -> list[SyncTransaction]:
        """Recompute the duplicate status of every transaction.

        Only ``duplicate_status`` changes; category, status, splits and notes
        are carried over untouched.
        """
        marked = [
            tx.with_duplicate_status(
                self.detect_duplicate(ledger_transactions, tx.transaction),
            )
            for tx in transactions
        ]
        counts = self.count_duplicates(marked)
        logger.info(
            "Duplicate check against %d ledger transactions: "
            "%d confirmed, %d possible, %d new",
            len(ledger_transactions),
            counts.confirmed,
            counts.possible,
            counts.none,
        )
        return marked

    @staticmethod
    def count_duplicates(transactions: Sequence[SyncTransaction]) -> DuplicateCounts:
        confirmed = sum(
            1 for tx in transactions if tx.duplicate_status.kind == "confirmed_duplicate"
        )
        possible = sum(
            1 for tx in transactions if tx.duplicate_status.kind == "possible_duplicate"
        )
        return DuplicateCounts(
            confirmed=confirmed,
            possible=possible,
            none=len(transactions) - confirmed - possible,
        )

    # -------------------------------------------------------------------------
    # Match strategies
    # -------------------------------------------------------------------------

    @staticmethod
    def matches_by_reference(
        bank_transaction: BankTransaction,
        ledger_transaction: LedgerTransaction,
    ) -> bool:
        ledger_reference = extract_reference(ledger_transaction.memo)
        return ledger_reference is not None and ledger_reference == bank_transaction.reference

    @staticmethod
    def matches_by_import_id(
        bank_transaction: BankTransaction,
        ledger_transaction: LedgerTransaction,
    ) -> bool:
        if ledger_transaction.import_id is None:
            return False
        expected = compute_import_id(
            bank_transaction.transaction_id,
            bank_transaction.booking_date,
        )
        return ledger_transaction.import_id == expected

    def matches_fuzzy(
        self,
        bank_transaction: BankTransaction,
        ledger_transaction: LedgerTransaction,
    ) -> bool:
        day_diff = abs((bank_transaction.booking_date - ledger_transaction.booking_date).days)
        if day_diff > self._config.date_tolerance_days:
            return False

        bank_amount = bank_transaction.amount.amount
        tolerance = abs(bank_amount) * self._config.amount_tolerance_percent
        if abs(bank_amount - ledger_transaction.amount) > tolerance:
            return False

        return _payees_match(bank_transaction.payee, ledger_transaction.payee_name)


def _payees_match(bank_payee: str | None, ledger_payee: str | None) -> bool:
    if not bank_payee or not ledger_payee:
        return False
    bank_normalized = bank_payee.upper().strip()
    ledger_normalized = ledger_payee.upper().strip()
    if not bank_normalized or not ledger_normalized:
        return False
    return (
        bank_normalized == ledger_normalized
        or bank_normalized in ledger_normalized
        or ledger_normalized in bank_normalized
    )
