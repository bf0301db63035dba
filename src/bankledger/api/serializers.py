"""JSON-safe representations of domain entities.

Money leaves the process as decimal strings, never as floats.
"""

from datetime import datetime
from typing import Any, Optional

from bankledger.domain.entities import Account, Transaction, TransactionPage
from bankledger.utils.amount_parser import format_minor_units


def _timestamp(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def account_to_dict(account: Account) -> dict[str, Any]:
    """Serialize an account."""
    return {
        "id": account.id,
        "customerId": account.customer_id,
        "accountType": account.account_type.value,
        "balance": format_minor_units(account.balance_cents),
        "createdAt": _timestamp(account.created_at),
        "updatedAt": _timestamp(account.updated_at),
    }


def transaction_to_dict(txn: Transaction) -> dict[str, Any]:
    """Serialize a transaction."""
    return {
        "id": txn.id,
        "accountId": txn.account_id,
        "type": txn.transaction_type.value,
        "amount": format_minor_units(txn.amount_cents),
        "description": txn.description,
        "destinationAccountId": txn.destination_account_id,
        "createdAt": _timestamp(txn.created_at),
        "updatedAt": _timestamp(txn.updated_at),
    }


def transaction_page_to_dict(page: TransactionPage) -> dict[str, Any]:
    """Serialize a page of transactions with its pagination block."""
    return {
        "transactions": [transaction_to_dict(t) for t in page.transactions],
        "pagination": {
            "currentPage": page.page,
            "pageSize": page.page_size,
            "totalItems": page.total_items,
            "totalPages": page.total_pages,
        },
    }
