"""Domain model entities for bankledger.

These are pure data classes representing business concepts, independent of
database schema. Money is always held as integer minor units (cents) so the
ledger never does binary floating point arithmetic.
"""

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


class AccountType(str, enum.Enum):
    """Closed set of account products."""

    SAVINGS = "SAVINGS"
    CHECKING = "CHECKING"
    CREDIT = "CREDIT"
    MONEY_MARKET = "MONEY_MARKET"
    CERTIFICATE_OF_DEPOSIT = "CERTIFICATE_OF_DEPOSIT"

    @property
    def allows_negative_balance(self) -> bool:
        """Only credit lines may be drawn below zero."""
        return self is AccountType.CREDIT


class TransactionType(str, enum.Enum):
    """Closed set of transaction kinds."""

    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"
    TRANSFER = "TRANSFER"


class AuditAction(str, enum.Enum):
    """Actions recorded in the audit trail."""

    CREATE = "CREATE"
    READ = "READ"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True)
class Customer:
    """Bank customer domain entity."""

    id: int
    name: str
    email: str
    phone: Optional[str]
    address: Optional[str]
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class Account:
    """Bank account domain entity."""

    id: int
    customer_id: int
    account_type: AccountType
    balance_cents: int
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity.

    A TRANSFER carries both legs: the source leg on ``account_id`` and the
    destination leg on ``destination_account_id``.
    """

    id: int
    account_id: int
    transaction_type: TransactionType
    amount_cents: int
    description: Optional[str]
    destination_account_id: Optional[int]
    created_at: datetime
    updated_at: datetime

    @property
    def account_ids(self) -> tuple[int, ...]:
        """Accounts whose balance this transaction touches."""
        if self.destination_account_id is None:
            return (self.account_id,)
        return (self.account_id, self.destination_account_id)


@dataclass(frozen=True)
class AuditEntry:
    """Audit trail entry domain entity."""

    id: int
    actor_id: str
    action: AuditAction
    entity_type: str
    entity_id: Optional[str]
    details: Optional[str]
    ip_address: Optional[str]
    user_agent: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class RequestContext:
    """Who is performing an operation, passed explicitly to every mutation."""

    actor_id: str
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


@dataclass(frozen=True)
class TransactionPage:
    """One page of a filtered transaction listing."""

    transactions: list[Transaction]
    page: int
    page_size: int
    total_items: int

    @property
    def total_pages(self) -> int:
        """Number of pages for the current filter."""
        if self.total_items == 0:
            return 0
        return (self.total_items + self.page_size - 1) // self.page_size


@dataclass(frozen=True)
class BalanceCheck:
    """Result of reconciling a stored balance against its transactions."""

    account_id: int
    stored_cents: int
    computed_cents: int
    transaction_count: int = 0

    @property
    def difference_cents(self) -> int:
        """Stored minus computed balance."""
        return self.stored_cents - self.computed_cents

    @property
    def is_consistent(self) -> bool:
        """True when the stored balance equals the sum of effects."""
        return self.difference_cents == 0


@dataclass(frozen=True)
class CustomerSummary:
    """Customer with the accounts they own."""

    customer: Customer
    accounts: list[Account] = field(default_factory=list)

    @property
    def total_balance_cents(self) -> int:
        """Sum of balances across all accounts."""
        return sum(acc.balance_cents for acc in self.accounts)
