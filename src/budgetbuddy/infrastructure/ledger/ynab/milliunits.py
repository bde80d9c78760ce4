"""Conversion between currency units and YNAB milliunits.

YNAB represents money as signed integers in thousandths of the currency
unit. Conversion is exact Decimal scaling; floats never touch amounts.
"""

from decimal import Decimal

from budgetbuddy.domain.shared.exceptions import ErrorCode, ValidationError

MILLIUNIT_EXPONENT = 3


def to_milliunits(amount: Decimal) -> int:
    """Convert a currency amount to milliunits.

    Raises
    ------
    ValidationError
        If the amount has more than three fractional digits
    """
    scaled = amount.scaleb(MILLIUNIT_EXPONENT)
    if scaled != scaled.to_integral_value():
        msg = f"Amount {amount} has more than {MILLIUNIT_EXPONENT} decimal places"
        raise ValidationError(
            msg,
            code=ErrorCode.INVALID_AMOUNT,
            details={"amount": str(amount)},
        )
    return int(scaled)


def from_milliunits(milliunits: int) -> Decimal:
    return Decimal(milliunits).scaleb(-MILLIUNIT_EXPONENT)
