"""Tests for SyncTransaction review actions and split validation."""

from datetime import date
from decimal import Decimal

import pytest

from budgetbuddy.domain.banking.value_objects import BankTransaction
from budgetbuddy.domain.shared.value_objects import Money
from budgetbuddy.domain.sync.entities import SyncTransaction
from budgetbuddy.domain.sync.exceptions import InvalidSplitError
from budgetbuddy.domain.sync.value_objects import (
    Imported,
    Rejected,
    TransactionSplit,
    TransactionStatus,
)


def create_bank_transaction(amount: str = "-50.00") -> BankTransaction:
    return BankTransaction(
        transaction_id="REF123",
        booking_date=date(2025, 1, 15),
        amount=Money(Decimal(amount)),
        payee="REWE Supermarkt",
        memo="Shopping",
        reference="REF123",
    )


def split(category_id: str, amount: str) -> TransactionSplit:
    return TransactionSplit(
        category_id=category_id,
        category_name=category_id.title(),
        amount=Money(Decimal(amount)),
    )


@pytest.fixture
def pending() -> SyncTransaction:
    return SyncTransaction(transaction=create_bank_transaction())


class TestSyncTransactionDefaults:
    def test_defaults(self, pending):
        assert pending.status == TransactionStatus.PENDING
        assert pending.duplicate_status.kind == "not_duplicate"
        assert pending.duplicate_status.details.transaction_reference == "REF123"
        assert pending.import_status.kind == "not_attempted"
        assert pending.transaction_id == "REF123"

    def test_effective_payee(self, pending):
        assert pending.effective_payee == "REWE Supermarkt"
        assert pending.with_payee_override("REWE").effective_payee == "REWE"
        assert pending.with_payee_override("   ").payee_override is None


class TestReviewActions:
    def test_categorize_marks_manual(self, pending):
        categorized = pending.with_category("cat-1", "Groceries")

        assert categorized.status == TransactionStatus.MANUAL_CATEGORIZED
        assert categorized.category_id == "cat-1"
        assert categorized.is_exportable
        assert pending.category_id is None

    def test_uncategorize(self, pending):
        result = pending.with_category("cat-1", "Groceries").without_category()

        assert result.status == TransactionStatus.PENDING
        assert result.category_id is None
        assert not result.is_exportable

    def test_skip_and_unskip(self, pending):
        categorized = pending.with_category("cat-1", "Groceries")
        skipped = categorized.skipped()

        assert skipped.status == TransactionStatus.SKIPPED
        assert not skipped.is_exportable
        assert skipped.unskipped().status == TransactionStatus.MANUAL_CATEGORIZED
        assert pending.skipped().unskipped().status == TransactionStatus.PENDING

    def test_splits_replace_category(self, pending):
        categorized = pending.with_category("cat-1", "Groceries")

        result = categorized.with_splits(
            [split("food", "-30.00"), split("household", "-20.00")],
        )

        assert result.has_splits
        assert result.category_id is None
        assert result.is_exportable

    def test_category_clears_splits(self, pending):
        result = pending.with_splits(
            [split("food", "-30.00"), split("household", "-20.00")],
        ).with_category("cat-1", "Groceries")

        assert result.splits is None
        assert result.category_id == "cat-1"

    def test_single_split_rejected(self, pending):
        with pytest.raises(InvalidSplitError, match="at least 2"):
            pending.with_splits([split("food", "-50.00")])

    def test_split_sum_must_match(self, pending):
        with pytest.raises(InvalidSplitError) as exc_info:
            pending.with_splits([split("food", "-30.00"), split("household", "-10.00")])

        assert exc_info.value.details["transaction_id"] == "REF123"

    def test_split_currency_must_match(self, pending):
        usd = TransactionSplit(
            category_id="food",
            category_name="Food",
            amount=Money(Decimal("-25.00"), "USD"),
        )
        with pytest.raises(InvalidSplitError, match="currency"):
            pending.with_splits([usd, split("household", "-25.00")])

    def test_import_status_imported_sets_status(self, pending):
        result = pending.with_category("cat-1", "Groceries").with_import_status(
            Imported(ledger_transaction_id="ynab-1"),
        )

        assert result.status == TransactionStatus.IMPORTED
        assert result.import_status.ledger_transaction_id == "ynab-1"

    def test_import_status_rejected_keeps_status(self, pending):
        categorized = pending.with_category("cat-1", "Groceries")
        result = categorized.with_import_status(Rejected(duplicate_import_id="BB:abc"))

        assert result.status == TransactionStatus.MANUAL_CATEGORIZED
        assert result.import_status.is_duplicate
