"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so the ledger and services never
see ORM instances that could be lazily refreshed after a session closes.
"""

from bankledger.domain import entities as domain
from bankledger.database.models import (
    Customer as ORMCustomer,
    Account as ORMAccount,
    Transaction as ORMTransaction,
    AuditLog as ORMAuditLog,
)


def customer_to_domain(orm_customer: ORMCustomer) -> domain.Customer:
    """Convert SQLAlchemy Customer model to domain Customer entity."""
    return domain.Customer(
        id=orm_customer.id,
        name=orm_customer.name,
        email=orm_customer.email,
        phone=orm_customer.phone,
        address=orm_customer.address,
        created_at=orm_customer.created_at,
        updated_at=orm_customer.updated_at,
    )


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        customer_id=orm_account.customer_id,
        account_type=domain.AccountType(orm_account.account_type),
        balance_cents=int(orm_account.balance_cents),
        created_at=orm_account.created_at,
        updated_at=orm_account.updated_at,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        account_id=orm_transaction.account_id,
        transaction_type=domain.TransactionType(orm_transaction.transaction_type),
        amount_cents=int(orm_transaction.amount_cents),
        description=orm_transaction.description,
        destination_account_id=orm_transaction.destination_account_id,
        created_at=orm_transaction.created_at,
        updated_at=orm_transaction.updated_at,
    )


def audit_log_to_domain(orm_entry: ORMAuditLog) -> domain.AuditEntry:
    """Convert SQLAlchemy AuditLog model to domain AuditEntry entity."""
    return domain.AuditEntry(
        id=orm_entry.id,
        actor_id=orm_entry.actor_id,
        action=domain.AuditAction(orm_entry.action),
        entity_type=orm_entry.entity_type,
        entity_id=orm_entry.entity_id,
        details=orm_entry.details,
        ip_address=orm_entry.ip_address,
        user_agent=orm_entry.user_agent,
        created_at=orm_entry.created_at,
    )
