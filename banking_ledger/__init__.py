"""
Banking Ledger

An in-memory banking ledger: named accounts with a balance and an outstanding
loan, a bank-wide total-deposits aggregate, Decimal money arithmetic and a
hash-chained audit trail of every posting.
"""

from .exceptions import (
    AccountNotFoundError,
    DuplicateAccountError,
    InsufficientFundsError,
    InvalidAccountNameError,
    InvalidAmountError,
    LedgerError,
    LoanLimitExceededError,
)
from .ledger import AccountSnapshot, Ledger

__version__ = "1.0.0"

__all__ = [
    "Ledger",
    "AccountSnapshot",
    "LedgerError",
    "AccountNotFoundError",
    "DuplicateAccountError",
    "InsufficientFundsError",
    "InvalidAccountNameError",
    "InvalidAmountError",
    "LoanLimitExceededError",
]
