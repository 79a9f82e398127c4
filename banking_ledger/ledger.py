"""
Ledger Engine

In-memory banking ledger. Owns every account (a balance and an outstanding
loan) and a running total-deposits aggregate that is updated together with
the account on each posting. All validation happens before mutation, so a
rejected operation leaves the ledger exactly as it was.
"""

import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, localcontext
from typing import Any, Callable, Dict, List, Optional, TypeVar

from .audit import AuditTrail, AuditEventType
from .config import LedgerConfig, get_config
from .currency import AmountLike, Money, to_decimal
from .exceptions import (
    AccountNotFoundError,
    DuplicateAccountError,
    InsufficientFundsError,
    InvalidAccountNameError,
    InvalidAmountError,
    LedgerError,
    LoanLimitExceededError,
)
from .logging_config import get_logger, log_action

T = TypeVar("T")

# Digits used when re-adding every account during reconciliation
RECONCILE_PRECISION = 60


@dataclass
class _AccountRecord:
    """Mutable account state, private to the ledger"""
    name: str
    balance: Money
    loan: Money
    created_at: datetime


@dataclass(frozen=True)
class AccountSnapshot:
    """Read-only view of an account at the time it was taken"""
    name: str
    balance: Decimal
    loan: Decimal
    created_at: datetime


class Ledger:
    """
    Ledger of named accounts with a bank-wide total-deposits aggregate.

    Loans are funded from the deposit pool: approving a loan lowers total
    deposits without touching the balance, and repaying raises it again.
    Hence total_deposits == sum(balances) - sum(loans) at all times.
    """

    def __init__(self, config: Optional[LedgerConfig] = None,
                 audit_trail: Optional[AuditTrail] = None):
        self.config = config if config is not None else get_config()
        self.currency = self.config.ledger_currency

        if audit_trail is None and self.config.enable_audit_logging:
            audit_trail = AuditTrail()
        self.audit_trail = audit_trail

        self._accounts: Dict[str, _AccountRecord] = {}
        self._total_deposits = Money.zero(self.currency)
        # Guards the account map and the aggregate together
        self._lock = threading.RLock()
        self.logger = get_logger("banking_ledger.ledger")

    def __contains__(self, name) -> bool:
        if not isinstance(name, str):
            return False
        with self._lock:
            return name in self._accounts

    def __len__(self) -> int:
        with self._lock:
            return len(self._accounts)

    def has_account(self, name: str) -> bool:
        """Check whether an account with this name exists"""
        return name in self

    def add_account(self, name: str, initial_balance: AmountLike) -> None:
        """
        Open a new account

        Args:
            name: Unique, non-empty account name
            initial_balance: Opening balance, zero or more

        Raises:
            InvalidAccountNameError: If the name is empty or not a string
            DuplicateAccountError: If the name is already taken
            InvalidAmountError: If the balance is negative or not a number
        """
        action = "add_account"
        if not isinstance(name, str) or not name.strip():
            raise self._reject(action, name, InvalidAccountNameError(name))

        with self._lock:
            if name in self._accounts:
                raise self._reject(action, name, DuplicateAccountError(name))

            balance = self._to_money(action, name, initial_balance)
            if balance.is_negative():
                raise self._reject(action, name, InvalidAmountError(
                    f"Initial balance must not be negative: {balance.to_string()}",
                    name, balance.amount
                ))

            new_total = self._compute(action, name, lambda: self._total_deposits + balance)

            record = _AccountRecord(
                name=name,
                balance=balance,
                loan=Money.zero(self.currency),
                created_at=datetime.now(timezone.utc)
            )
            self._accounts[name] = record
            self._total_deposits = new_total

            self._record(action, AuditEventType.ACCOUNT_CREATED, record, balance)

    def deposit(self, name: str, amount: AmountLike) -> None:
        """Credit a positive amount to the account and the deposit pool"""
        action = "deposit"
        with self._lock:
            record = self._lookup(action, name)
            money = self._positive_amount(action, name, amount)

            new_balance, new_total = self._compute(action, name, lambda: (
                record.balance + money, self._total_deposits + money
            ))

            record.balance = new_balance
            self._total_deposits = new_total

            self._record(action, AuditEventType.DEPOSIT_POSTED, record, money)

    def withdraw(self, name: str, amount: AmountLike) -> None:
        """Debit a positive amount no larger than the current balance"""
        action = "withdraw"
        with self._lock:
            record = self._lookup(action, name)
            money = self._positive_amount(action, name, amount)

            if money > record.balance:
                raise self._reject(action, name, InsufficientFundsError(
                    name, money.amount, record.balance.amount
                ))

            new_balance, new_total = self._compute(action, name, lambda: (
                record.balance - money, self._total_deposits - money
            ))

            record.balance = new_balance
            self._total_deposits = new_total

            self._record(action, AuditEventType.WITHDRAWAL_POSTED, record, money)

    def approve_loan(self, name: str, amount: AmountLike) -> None:
        """
        Grant a loan to the account

        The loan is paid out of the deposit pool: the account's loan grows and
        total deposits shrink by the same amount. The balance is unchanged.

        Raises:
            AccountNotFoundError: If the account does not exist
            InvalidAmountError: If the amount is not positive
            LoanLimitExceededError: If the amount is above the loan ceiling
        """
        action = "approve_loan"
        with self._lock:
            record = self._lookup(action, name)
            money = self._positive_amount(action, name, amount)

            ceiling = self._compute(action, name, lambda: self._loan_ceiling(record))
            if money > ceiling:
                raise self._reject(action, name, LoanLimitExceededError(
                    name, money.amount, ceiling.amount
                ))

            new_loan, new_total = self._compute(action, name, lambda: (
                record.loan + money, self._total_deposits - money
            ))

            record.loan = new_loan
            self._total_deposits = new_total

            self._record(action, AuditEventType.LOAN_APPROVED, record, money)

    def repay_loan(self, name: str, amount: AmountLike) -> None:
        """
        Pay down the account's outstanding loan

        Repaying more than is outstanding is an invalid amount, not a
        shortage of funds.
        """
        action = "repay_loan"
        with self._lock:
            record = self._lookup(action, name)
            money = self._positive_amount(action, name, amount)

            if money > record.loan:
                raise self._reject(action, name, InvalidAmountError(
                    f"Repayment of {money.to_string()} exceeds outstanding loan "
                    f"of {record.loan.to_string()}",
                    name, money.amount
                ))

            new_loan, new_total = self._compute(action, name, lambda: (
                record.loan - money, self._total_deposits + money
            ))

            record.loan = new_loan
            self._total_deposits = new_total

            self._record(action, AuditEventType.LOAN_REPAYMENT_POSTED, record, money)

    def get_balance(self, name: str) -> Decimal:
        with self._lock:
            return self._lookup("get_balance", name).balance.amount

    def get_loan(self, name: str) -> Decimal:
        with self._lock:
            return self._lookup("get_loan", name).loan.amount

    def get_total_deposits(self) -> Decimal:
        with self._lock:
            return self._total_deposits.amount

    def get_account(self, name: str) -> AccountSnapshot:
        with self._lock:
            return self._snapshot(self._lookup("get_account", name))

    def list_accounts(self) -> List[AccountSnapshot]:
        """Snapshots of every account, in the order they were opened"""
        with self._lock:
            return [self._snapshot(record) for record in self._accounts.values()]

    def loan_ceiling(self, name: str) -> Decimal:
        """Largest amount a single approve_loan on this account may request"""
        with self._lock:
            record = self._lookup("loan_ceiling", name)
            return self._compute("loan_ceiling", name, lambda: self._loan_ceiling(record)).amount

    def verify_integrity(self) -> Dict[str, Any]:
        """
        Recompute the deposit pool from the accounts and compare it with the
        running aggregate

        Returns:
            Dictionary with reconciliation results
        """
        with self._lock, localcontext() as ctx:
            # Sums of in-range amounts can outgrow the money context; add exactly
            ctx.prec = RECONCILE_PRECISION
            balances = Decimal('0')
            loans = Decimal('0')
            negative_balances = []
            negative_loans = []

            for record in self._accounts.values():
                balances += record.balance.amount
                loans += record.loan.amount
                if record.balance.is_negative():
                    negative_balances.append(record.name)
                if record.loan.is_negative():
                    negative_loans.append(record.name)

            recomputed = balances - loans
            return {
                'valid': (recomputed == self._total_deposits.amount
                          and not negative_balances and not negative_loans),
                'total_deposits': self._total_deposits.amount,
                'recomputed_total': recomputed,
                'total_balances': balances,
                'total_loans': loans,
                'negative_balances': negative_balances,
                'negative_loans': negative_loans
            }

    def _lookup(self, action: str, name: str) -> _AccountRecord:
        record = self._accounts.get(name) if isinstance(name, str) else None
        if record is None:
            raise self._reject(action, name, AccountNotFoundError(name))
        return record

    def _compute(self, action: str, name: str, compute: Callable[[], T]) -> T:
        """Run the arithmetic for a posting before any state is touched"""
        try:
            return compute()
        except ArithmeticError as e:
            raise self._reject(action, name, InvalidAmountError(
                f"Amount out of range for {self.currency.code} ledger arithmetic",
                name
            )) from e

    def _to_money(self, action: str, name: str, amount: AmountLike) -> Money:
        try:
            return Money(to_decimal(amount), self.currency)
        except (ValueError, ArithmeticError) as e:
            raise self._reject(action, name, InvalidAmountError(str(e), name, amount)) from e

    def _positive_amount(self, action: str, name: str, amount: AmountLike) -> Money:
        money = self._to_money(action, name, amount)
        if not money.is_positive():
            raise self._reject(action, name, InvalidAmountError(
                f"Amount must be positive: {money.to_string()}", name, money.amount
            ))
        return money

    def _loan_ceiling(self, record: _AccountRecord) -> Money:
        if self.config.loan_limit_policy == "balance_multiple":
            return record.balance * Decimal(self.config.loan_balance_multiple)
        return Money(Decimal(self.config.max_loan_amount), self.currency)

    @staticmethod
    def _snapshot(record: _AccountRecord) -> AccountSnapshot:
        return AccountSnapshot(
            name=record.name,
            balance=record.balance.amount,
            loan=record.loan.amount,
            created_at=record.created_at
        )

    def _record(self, action: str, event_type: AuditEventType,
                record: _AccountRecord, amount: Money) -> None:
        """Log an accepted posting and append it to the audit trail"""
        figures = {
            "amount": amount.amount,
            "balance": record.balance.amount,
            "loan": record.loan.amount,
            "total_deposits": self._total_deposits.amount,
            "currency": self.currency.code
        }

        log_action(
            self.logger, "info", f"{action} posted: {amount.to_string()}",
            action=action, resource=f"account:{record.name}",
            extra={k: str(v) for k, v in figures.items()}
        )

        if self.audit_trail is not None:
            self.audit_trail.log_event(
                event_type=event_type,
                account_name=record.name,
                metadata=figures
            )

    def _reject(self, action: str, name, error: LedgerError) -> LedgerError:
        log_action(
            self.logger, "warning", f"{action} rejected: {error}",
            action=action, resource=f"account:{name}",
            extra={"error": type(error).__name__}
        )
        return error
