"""Banking value objects."""

from budgetbuddy.domain.banking.value_objects.auth_handshake import (
    AuthHandshake,
    BankSession,
)
from budgetbuddy.domain.banking.value_objects.bank_account import BankAccount
from budgetbuddy.domain.banking.value_objects.bank_credentials import BankCredentials
from budgetbuddy.domain.banking.value_objects.bank_transaction import BankTransaction
from budgetbuddy.domain.banking.value_objects.date_range import DateRange
from budgetbuddy.domain.banking.value_objects.request_info import RequestInfo
from budgetbuddy.domain.banking.value_objects.tan_challenge import (
    ChallengeKind,
    TanChallenge,
)
from budgetbuddy.domain.banking.value_objects.token_pair import TokenPair

__all__ = [
    "AuthHandshake",
    "BankAccount",
    "BankCredentials",
    "BankSession",
    "BankTransaction",
    "ChallengeKind",
    "DateRange",
    "RequestInfo",
    "TanChallenge",
    "TokenPair",
]
