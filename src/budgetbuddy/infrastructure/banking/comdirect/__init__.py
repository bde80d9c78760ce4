"""Comdirect bank adapter."""

from budgetbuddy.infrastructure.banking.comdirect.comdirect_adapter import (
    ComdirectBankAdapter,
)
from budgetbuddy.infrastructure.banking.comdirect.memo_normalizer import (
    remove_line_number_prefixes,
)

__all__ = ["ComdirectBankAdapter", "remove_line_number_prefixes"]
