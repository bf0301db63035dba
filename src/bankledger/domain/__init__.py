"""Domain layer for bankledger application."""

_SERVICES = {
    "LedgerService": "bankledger.domain.ledger",
    "TransactionService": "bankledger.domain.transaction",
    "AccountService": "bankledger.domain.account",
    "CustomerService": "bankledger.domain.customer",
    "DatabaseAuditTrail": "bankledger.domain.audit",
}

__all__ = list(_SERVICES)


# Import services lazily: they depend on bankledger.database, which in turn
# imports bankledger.domain.entities.
def __getattr__(name):
    if name in _SERVICES:
        import importlib

        return getattr(importlib.import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
