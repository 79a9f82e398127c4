"""
Ledger Exceptions Module

Domain-specific errors raised by ledger operations. Every error is raised
before any state change, so callers can treat each one as an expected,
recoverable outcome. All of them subclass ValueError.
"""

from decimal import Decimal
from typing import Optional


class LedgerError(ValueError):
    """Base class for all ledger errors"""

    def __init__(self, message: str, account_name: Optional[str] = None):
        super().__init__(message)
        self.account_name = account_name


class AccountNotFoundError(LedgerError):
    """Raised when an operation references an account the ledger does not hold"""

    def __init__(self, account_name: str):
        super().__init__(f"Account {account_name!r} not found", account_name)


class DuplicateAccountError(LedgerError):
    """Raised when creating an account whose name is already taken"""

    def __init__(self, account_name: str):
        super().__init__(f"Account {account_name!r} already exists", account_name)


class InvalidAccountNameError(LedgerError):
    """Raised when an account name is empty or not a string"""

    def __init__(self, account_name):
        super().__init__(f"Invalid account name: {account_name!r}")
        self.account_name = account_name


class InvalidAmountError(LedgerError):
    """
    Raised when an amount is not acceptable:
    - not a finite number
    - zero or negative where a positive amount is required
    - negative initial balance
    - repayment larger than the outstanding loan
    """

    def __init__(self, message: str, account_name: Optional[str] = None, amount=None):
        super().__init__(message, account_name)
        self.amount = amount


class InsufficientFundsError(LedgerError):
    """Raised when a withdrawal exceeds the account balance"""

    def __init__(self, account_name: str, amount: Decimal, balance: Decimal):
        super().__init__(
            f"Insufficient funds in {account_name!r}: requested {amount}, available {balance}",
            account_name
        )
        self.amount = amount
        self.balance = balance


class LoanLimitExceededError(LedgerError):
    """Raised when a loan request exceeds the configured loan ceiling"""

    def __init__(self, account_name: str, amount: Decimal, ceiling: Decimal):
        super().__init__(
            f"Loan of {amount} for {account_name!r} exceeds the ceiling of {ceiling}",
            account_name
        )
        self.amount = amount
        self.ceiling = ceiling
