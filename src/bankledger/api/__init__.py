"""Framework-independent request surface for bankledger."""

from bankledger.api.handlers import (
    amend_transaction,
    create_transaction,
    delete_transaction,
    list_transactions,
    parse_json_body,
)

__all__ = [
    "amend_transaction",
    "create_transaction",
    "delete_transaction",
    "list_transactions",
    "parse_json_body",
]
