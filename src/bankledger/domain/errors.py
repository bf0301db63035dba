"""Shared domain error messages and error types."""

from typing import Optional

from bankledger.utils.amount_parser import format_minor_units


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic.

    ``errors`` maps each offending field to a human readable message.
    """

    def __init__(self, message: str, errors: Optional[dict[str, str]] = None):
        super().__init__(message)
        self.errors = dict(errors or {})

    @classmethod
    def from_fields(cls, errors: dict[str, str]) -> "ValidationError":
        """Build an error whose message lists every failing field."""
        summary = "; ".join(f"{name}: {msg}" for name, msg in sorted(errors.items()))
        return cls(f"Validation failed ({summary})", errors)


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


class InsufficientFundsError(DomainError):
    """Withdrawal would drive a non-credit account below zero."""


class StorageError(DomainError):
    """The storage layer could not commit an atomic unit of work."""


def customer_not_found(customer_id: int) -> str:
    """Return message for missing customer."""
    return f"Customer {customer_id} not found"


def account_not_found(account_id: int) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def duplicate_customer_email(email: str) -> str:
    """Return message for a customer email that is already registered."""
    return f"Customer with email '{email}' already exists"


def insufficient_funds(account_id: int, balance_cents: int, delta_cents: int) -> str:
    """Return message when an account cannot cover a debit."""
    return (
        f"Insufficient funds in account {account_id}: balance {format_minor_units(balance_cents)}, "
        f"change {format_minor_units(delta_cents)}"
    )


def customer_delete_blocked(customer_id: int, account_count: int) -> str:
    """Return message when a customer still owns accounts."""
    return (
        f"Cannot delete customer {customer_id}: they own "
        f"{account_count} account{'s' if account_count != 1 else ''}. "
        "Please delete the accounts first."
    )


def account_delete_blocked(account_id: int, transaction_count: int) -> str:
    """Return message when account has dependent transactions."""
    return (
        f"Cannot delete account {account_id}: it has "
        f"{transaction_count} transaction{'s' if transaction_count != 1 else ''}. "
        "Please delete them first."
    )
