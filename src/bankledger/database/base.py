"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import datetime
from typing import Iterable, Optional

# Import entities directly to avoid circular import through domain/__init__.py
from bankledger.domain.entities import (
    Account,
    AccountType,
    AuditAction,
    AuditEntry,
    Customer,
    Transaction,
    TransactionType,
)


class UnitOfWork(ABC):
    """Writes staged inside one atomic storage transaction.

    Nothing done through a unit of work is visible to other sessions until
    the enclosing ``Database.atomic`` block exits cleanly.
    """

    @abstractmethod
    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID, reflecting writes staged so far."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID, reflecting writes staged so far."""
        pass

    @abstractmethod
    def insert_transaction(
        self,
        account_id: int,
        transaction_type: TransactionType,
        amount_cents: int,
        description: Optional[str] = None,
        destination_account_id: Optional[int] = None,
    ) -> Transaction:
        """Stage a new transaction row. Returns the staged transaction."""
        pass

    @abstractmethod
    def update_transaction(
        self,
        transaction_id: int,
        transaction_type: TransactionType,
        amount_cents: int,
        description: Optional[str],
        destination_account_id: Optional[int],
    ) -> Transaction:
        """Stage a rewrite of a transaction's ledger fields."""
        pass

    @abstractmethod
    def delete_transaction(self, transaction_id: int) -> None:
        """Stage removal of a transaction row."""
        pass

    @abstractmethod
    def increment_balance(self, account_id: int, delta_cents: int) -> Account:
        """Stage ``balance = balance + delta`` on an account. Returns the account."""
        pass


class Database(ABC):
    """Abstract database interface for bankledger."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def atomic(self, account_ids: Iterable[int] = ()) -> AbstractContextManager[UnitOfWork]:
        """Open an all-or-nothing unit of work.

        Read-modify-write sequences on the listed accounts are serialized
        against every other ``atomic`` block naming the same accounts.
        The block commits when it exits normally and rolls back completely
        otherwise. Storage failures surface as ``StorageError``.
        """
        pass

    # Customer operations
    @abstractmethod
    def create_customer(
        self,
        name: str,
        email: str,
        phone: Optional[str] = None,
        address: Optional[str] = None,
    ) -> int:
        """Create a new customer. Returns customer ID."""
        pass

    @abstractmethod
    def get_customer(self, customer_id: int) -> Optional[Customer]:
        """Get customer by ID."""
        pass

    @abstractmethod
    def get_customer_by_email(self, email: str) -> Optional[Customer]:
        """Get customer by email address (case-insensitive)."""
        pass

    @abstractmethod
    def list_customers(self, search: Optional[str] = None) -> list[Customer]:
        """List customers, optionally filtered by a name/email search term."""
        pass

    @abstractmethod
    def update_customer(
        self,
        customer_id: int,
        name: Optional[str] = None,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        address: Optional[str] = None,
    ) -> None:
        """Update the provided customer fields."""
        pass

    @abstractmethod
    def delete_customer(self, customer_id: int) -> None:
        """Delete a customer."""
        pass

    # Account operations
    @abstractmethod
    def create_account(self, customer_id: int, account_type: AccountType) -> int:
        """Create a new account with a zero balance. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def list_accounts(
        self,
        customer_id: Optional[int] = None,
        account_type: Optional[AccountType] = None,
    ) -> list[Account]:
        """List accounts, optionally filtered by owner and type."""
        pass

    @abstractmethod
    def update_account_type(self, account_id: int, account_type: AccountType) -> None:
        """Change an account's product type."""
        pass

    @abstractmethod
    def delete_account(self, account_id: int) -> None:
        """Delete an account."""
        pass

    @abstractmethod
    def get_account_transaction_count(self, account_id: int) -> int:
        """Count transactions touching an account as source or destination."""
        pass

    # Transaction operations
    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        account_id: Optional[int] = None,
        transaction_type: Optional[TransactionType] = None,
        search: Optional[str] = None,
        start_at: Optional[datetime] = None,
        end_before: Optional[datetime] = None,
        sort: Optional[str] = None,
        descending: bool = True,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> list[Transaction]:
        """List transactions with optional filters.

        Args:
            account_id: Match transactions where the account is either leg
            transaction_type: Only this type
            search: Case-insensitive match on type, description, customer name or email
            start_at: Inclusive lower bound on created_at
            end_before: Exclusive upper bound on created_at
            sort: One of 'transaction_type', 'amount', 'created_at'
            descending: Sort direction
            offset: Rows to skip
            limit: Maximum rows to return
        """
        pass

    @abstractmethod
    def count_transactions(
        self,
        account_id: Optional[int] = None,
        transaction_type: Optional[TransactionType] = None,
        search: Optional[str] = None,
        start_at: Optional[datetime] = None,
        end_before: Optional[datetime] = None,
    ) -> int:
        """Count transactions matching the same filters as list_transactions."""
        pass

    # Audit operations
    @abstractmethod
    def add_audit_entry(
        self,
        actor_id: str,
        action: AuditAction,
        entity_type: str,
        entity_id: Optional[str] = None,
        details: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> int:
        """Append an audit entry. Returns entry ID."""
        pass

    @abstractmethod
    def list_audit_entries(
        self,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        actor_id: Optional[str] = None,
        limit: int = 50,
    ) -> list[AuditEntry]:
        """List audit entries, newest first."""
        pass
