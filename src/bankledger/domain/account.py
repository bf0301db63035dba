"""Account domain service."""

import logging
from decimal import Decimal
from typing import Optional

from bankledger.database.base import Database
from bankledger.domain import errors
from bankledger.domain.audit import AuditTrail, DatabaseAuditTrail
from bankledger.domain.entities import (
    Account as AccountEntity,
    AccountType,
    AuditAction,
    BalanceCheck,
    RequestContext,
    TransactionType,
)
from bankledger.domain.ledger import LedgerErrorKind, LedgerService, sum_effects
from bankledger.utils.amount_parser import to_minor_units

logger = logging.getLogger(__name__)

OPENING_DEPOSIT_DESCRIPTION = "Opening deposit"


def parse_account_type(value: object) -> AccountType:
    """Coerce user input to an AccountType.

    Raises:
        ValidationError: If the value is missing or outside the closed set
    """
    if isinstance(value, AccountType):
        return value
    if value is None or not str(value).strip():
        raise errors.ValidationError.from_fields({"account_type": "Account type is required"})
    normalized = str(value).strip().upper().replace("-", "_").replace(" ", "_")
    try:
        return AccountType(normalized)
    except ValueError:
        allowed = ", ".join(t.value for t in AccountType)
        raise errors.ValidationError.from_fields(
            {"account_type": f"Invalid account type '{value}'. Must be one of {allowed}"}
        )


class AccountService:
    """Service for managing accounts.

    Balances are never written here directly: the opening deposit is an
    ordinary ledger DEPOSIT, so every balance is backed by transactions.
    """

    def __init__(
        self,
        db: Database,
        ledger: Optional[LedgerService] = None,
        audit: Optional[AuditTrail] = None,
    ):
        """Initialize account service.

        Args:
            db: Database instance
            ledger: Ledger used for opening deposits (built from ``db`` if omitted)
            audit: Audit trail (defaults to one stored in ``db``)
        """
        self.db = db
        self.audit = audit if audit is not None else DatabaseAuditTrail(db)
        self.ledger = ledger if ledger is not None else LedgerService(db, self.audit)

    def open_account(
        self,
        ctx: RequestContext,
        customer_id: int,
        account_type: AccountType | str,
        initial_deposit: Decimal | int | str | None = None,
    ) -> int:
        """Open a new account, optionally funded with an opening deposit.

        Args:
            ctx: Request context of the caller
            customer_id: Owning customer
            account_type: One of the AccountType values
            initial_deposit: Optional positive amount recorded as a DEPOSIT

        Returns:
            Account ID

        Raises:
            ValidationError: If the type or deposit amount is invalid
            NotFoundError: If the customer does not exist
            StorageError: If the opening deposit could not be recorded
        """
        acc_type = parse_account_type(account_type)

        if initial_deposit is not None:
            try:
                deposit_cents = to_minor_units(initial_deposit)
            except ValueError as e:
                raise errors.ValidationError.from_fields({"initial_deposit": str(e)})
            if deposit_cents < 0:
                raise errors.ValidationError.from_fields(
                    {"initial_deposit": "Initial deposit cannot be negative"}
                )
            if deposit_cents == 0:
                initial_deposit = None

        if self.db.get_customer(customer_id) is None:
            raise errors.NotFoundError(errors.customer_not_found(customer_id))

        account_id = self.db.create_account(customer_id=customer_id, account_type=acc_type)

        if initial_deposit is not None:
            result = self.ledger.apply(
                ctx,
                account_id,
                TransactionType.DEPOSIT,
                initial_deposit,
                OPENING_DEPOSIT_DESCRIPTION,
            )
            if not result.ok:
                # The account has no transactions yet, so it can be removed cleanly
                self.db.delete_account(account_id)
                logger.warning(
                    "Opening deposit for account %s failed (%s); account removed",
                    account_id,
                    result.error.value,
                )
                if result.error is LedgerErrorKind.VALIDATION_FAILED:
                    raise errors.ValidationError(result.message, result.errors)
                raise errors.StorageError(result.message)

        self.audit.record(
            ctx,
            AuditAction.CREATE,
            "Account",
            account_id,
            f"Opened {acc_type.value} account for customer {customer_id}",
        )

        return account_id

    def get_account(self, account_id: int) -> Optional[AccountEntity]:
        """Get account by ID.

        Returns:
            Account entity or None if not found
        """
        return self.db.get_account(account_id)

    def require_account(self, account_id: int) -> AccountEntity:
        """Get account by ID or raise NotFoundError."""
        account = self.db.get_account(account_id)
        if account is None:
            raise errors.NotFoundError(errors.account_not_found(account_id))
        return account

    def list_accounts(
        self,
        customer_id: Optional[int] = None,
        account_type: AccountType | str | None = None,
    ) -> list[AccountEntity]:
        """List accounts, optionally filtered by owner and type."""
        acc_type = parse_account_type(account_type) if account_type is not None else None
        return self.db.list_accounts(customer_id=customer_id, account_type=acc_type)

    def change_account_type(
        self, ctx: RequestContext, account_id: int, account_type: AccountType | str
    ) -> None:
        """Change an account's product type.

        An overdrawn account can only stay a CREDIT account.

        Raises:
            NotFoundError: If the account does not exist
            ValidationError: If the type is invalid or incompatible with the balance
        """
        acc_type = parse_account_type(account_type)
        account = self.require_account(account_id)

        if account.balance_cents < 0 and not acc_type.allows_negative_balance:
            raise errors.ValidationError.from_fields(
                {"account_type": f"Account {account_id} is overdrawn and must remain a credit account"}
            )

        self.db.update_account_type(account_id, acc_type)
        self.audit.record(
            ctx,
            AuditAction.UPDATE,
            "Account",
            account_id,
            f"Changed type from {account.account_type.value} to {acc_type.value}",
        )

    def delete_account(self, ctx: RequestContext, account_id: int) -> None:
        """Delete an account.

        Raises:
            NotFoundError: If the account does not exist
            DependencyError: If any transaction still references the account
        """
        self.require_account(account_id)
        self.db.delete_account(account_id)
        self.audit.record(ctx, AuditAction.DELETE, "Account", account_id, "Deleted account")

    def reconcile(self, account_id: int) -> BalanceCheck:
        """Compare the stored balance with the sum of transaction effects.

        Runs under the account's ledger lock so no mutation can interleave.

        Raises:
            NotFoundError: If the account does not exist
        """
        with self.db.atomic([account_id]):
            account = self.require_account(account_id)
            transactions = self.db.list_transactions(account_id=account_id)

        check = BalanceCheck(
            account_id=account_id,
            stored_cents=account.balance_cents,
            computed_cents=sum_effects(transactions, account_id),
            transaction_count=len(transactions),
        )
        if not check.is_consistent:
            logger.warning(
                "Account %s balance drift: stored %s, computed %s",
                account_id,
                check.stored_cents,
                check.computed_cents,
            )
        return check
