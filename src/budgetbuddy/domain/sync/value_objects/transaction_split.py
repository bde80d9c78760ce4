"""Transaction split value object."""

from collections.abc import Sequence
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from budgetbuddy.domain.shared.value_objects import Money
from budgetbuddy.domain.sync.exceptions import InvalidSplitError

MIN_SPLITS = 2


class TransactionSplit(BaseModel):
    """One category share of a split transaction."""

    category_id: str = Field(..., min_length=1)
    category_name: str
    amount: Money
    memo: str | None = None

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)


def validate_splits(
    total: Money,
    splits: Sequence[TransactionSplit],
    transaction_id: str | None = None,
) -> None:
    """Check that splits are a valid breakdown of ``total``.

    Raises
    ------
    InvalidSplitError
        If fewer than two splits are given, currencies differ, or the
        split amounts do not sum to the transaction amount
    """
    if len(splits) < MIN_SPLITS:
        msg = f"A split needs at least {MIN_SPLITS} parts, got {len(splits)}"
        raise InvalidSplitError(msg, transaction_id=transaction_id)

    for split in splits:
        if split.amount.currency != total.currency:
            msg = (
                f"Split currency {split.amount.currency} does not match "
                f"transaction currency {total.currency}"
            )
            raise InvalidSplitError(msg, transaction_id=transaction_id)

    split_sum = sum((s.amount.amount for s in splits), Decimal(0))
    if split_sum != total.amount:
        msg = f"Splits sum to {split_sum} but transaction amount is {total.amount}"
        raise InvalidSplitError(msg, transaction_id=transaction_id)
