"""Banking ports."""

from budgetbuddy.domain.banking.ports.bank_auth_port import BankAuthPort

__all__ = ["BankAuthPort"]
