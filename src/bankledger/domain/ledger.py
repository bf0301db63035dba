"""Ledger consistency operations.

Every change to a transaction goes through ``LedgerService`` so that, for
each account, the stored balance always equals the signed sum of the
effects of the transactions touching it::

    balance(account) == sum(effect(t)[account] for t touching account)

Each operation computes a per-account balance delta and applies it together
with the transaction write inside one ``Database.atomic`` block.
"""

import enum
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Optional

from bankledger.database.base import Database, UnitOfWork
from bankledger.domain import errors
from bankledger.domain.audit import AuditTrail, DatabaseAuditTrail
from bankledger.domain.entities import (
    Account,
    AuditAction,
    RequestContext,
    Transaction,
    TransactionType,
)
from bankledger.utils.amount_parser import format_minor_units, to_minor_units

logger = logging.getLogger(__name__)

MAX_DESCRIPTION_LENGTH = 255

# Largest single amount, 10 trillion in major units
MAX_AMOUNT_CENTS = 10**15
# Balances stay within +/- this bound, far inside a signed 64-bit column,
# so reversing any single transaction cannot overflow either
MAX_BALANCE_CENTS = 10**17

# How often amend/reverse re-lock when a concurrent amend moved a transfer's
# destination between the lookup and the lock.
MAX_LOCK_ATTEMPTS = 3


class LedgerErrorKind(str, enum.Enum):
    """Why a ledger operation did not apply."""

    VALIDATION_FAILED = "VALIDATION_FAILED"
    NOT_FOUND = "NOT_FOUND"
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    STORAGE_FAILURE = "STORAGE_FAILURE"


@dataclass(frozen=True)
class LedgerResult:
    """Outcome of a ledger operation.

    On success ``error`` is None and ``transaction``/``account`` hold the
    post-operation state (for ``reverse``, the removed transaction). For
    transfers ``destination_account`` holds the credited account.
    """

    transaction: Optional[Transaction] = None
    account: Optional[Account] = None
    destination_account: Optional[Account] = None
    error: Optional[LedgerErrorKind] = None
    message: Optional[str] = None
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """True when the operation was applied."""
        return self.error is None

    @classmethod
    def failure(
        cls, kind: LedgerErrorKind, message: str, field_errors: Optional[dict[str, str]] = None
    ) -> "LedgerResult":
        """Build a failed result."""
        return cls(error=kind, message=message, errors=dict(field_errors or {}))


@dataclass(frozen=True)
class LedgerEntry:
    """Validated ledger fields of a transaction."""

    transaction_type: TransactionType
    amount_cents: int
    description: Optional[str] = None
    destination_account_id: Optional[int] = None


class _LockSetChanged(Exception):
    """The transaction touched accounts outside the held locks."""


def effect(
    transaction_type: TransactionType,
    amount_cents: int,
    account_id: int,
    destination_account_id: Optional[int] = None,
) -> dict[int, int]:
    """Signed balance change per account for one transaction.

    DEPOSIT credits its account, WITHDRAWAL debits it, and TRANSFER debits
    the source account while crediting the destination account.
    """
    if transaction_type is TransactionType.DEPOSIT:
        return {account_id: amount_cents}
    if transaction_type is TransactionType.WITHDRAWAL:
        return {account_id: -amount_cents}
    if destination_account_id is None:
        raise ValueError("Transfer requires a destination account")
    return {account_id: -amount_cents, destination_account_id: amount_cents}


def transaction_effect(txn: Transaction) -> dict[int, int]:
    """Signed balance change per account for a stored transaction."""
    return effect(txn.transaction_type, txn.amount_cents, txn.account_id, txn.destination_account_id)


def balance_delta(old: dict[int, int], new: dict[int, int]) -> dict[int, int]:
    """Per-account ``new - old``, leaving out accounts that do not change."""
    deltas = {}
    for account_id in set(old) | set(new):
        delta = new.get(account_id, 0) - old.get(account_id, 0)
        if delta != 0:
            deltas[account_id] = delta
    return deltas


def sum_effects(transactions: Iterable[Transaction], account_id: int) -> int:
    """Balance an account should hold given the transactions touching it."""
    return sum(transaction_effect(txn).get(account_id, 0) for txn in transactions)


def parse_transaction_type(value: object) -> TransactionType:
    """Coerce user input to a TransactionType.

    Raises:
        ValueError: If the value is missing or outside the closed set
    """
    if isinstance(value, TransactionType):
        return value
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValueError("Transaction type is required")
    try:
        return TransactionType(str(value).strip().upper())
    except ValueError:
        allowed = ", ".join(t.value for t in TransactionType)
        raise ValueError(f"Invalid transaction type '{value}'. Must be one of {allowed}")


def validate_entry(
    transaction_type: object,
    amount: object,
    description: object = None,
    destination_account_id: Optional[int] = None,
) -> LedgerEntry:
    """Validate raw ledger fields.

    Raises:
        ValidationError: With a field-keyed error map when any field is invalid
    """
    field_errors: dict[str, str] = {}

    txn_type = None
    try:
        txn_type = parse_transaction_type(transaction_type)
    except ValueError as e:
        field_errors["type"] = str(e)

    amount_cents = 0
    if amount is None or (isinstance(amount, str) and not amount.strip()):
        field_errors["amount"] = "Amount is required"
    else:
        try:
            amount_cents = to_minor_units(amount)
        except ValueError as e:
            field_errors["amount"] = str(e)
        else:
            if amount_cents <= 0:
                field_errors["amount"] = "Amount must be a positive number"
            elif amount_cents > MAX_AMOUNT_CENTS:
                field_errors["amount"] = (
                    f"Amount cannot be more than {format_minor_units(MAX_AMOUNT_CENTS)}"
                )

    if description is not None and not isinstance(description, str):
        field_errors["description"] = "Description must be text"
        description = None
    if description is not None:
        description = description.strip() or None
    if description is not None and len(description) > MAX_DESCRIPTION_LENGTH:
        field_errors["description"] = (
            f"Description cannot be longer than {MAX_DESCRIPTION_LENGTH} characters"
        )

    if txn_type is TransactionType.TRANSFER and destination_account_id is None:
        field_errors["destination_account_id"] = "Destination account is required for transfers"
    elif txn_type is not None and txn_type is not TransactionType.TRANSFER:
        if destination_account_id is not None:
            field_errors["destination_account_id"] = "Only transfers have a destination account"

    if field_errors:
        raise errors.ValidationError.from_fields(field_errors)

    return LedgerEntry(
        transaction_type=txn_type,
        amount_cents=amount_cents,
        description=description,
        destination_account_id=destination_account_id,
    )


class LedgerService:
    """Applies, amends and reverses transactions while keeping balances consistent."""

    def __init__(self, db: Database, audit: Optional[AuditTrail] = None):
        """Initialize ledger service.

        Args:
            db: Database instance
            audit: Audit trail (defaults to one stored in ``db``)
        """
        self.db = db
        self.audit = audit if audit is not None else DatabaseAuditTrail(db)

    def apply(
        self,
        ctx: RequestContext,
        account_id: Optional[int],
        transaction_type: object,
        amount: Decimal | int | str | None,
        description: Optional[str] = None,
        destination_account_id: Optional[int] = None,
    ) -> LedgerResult:
        """Create a transaction and apply its effect to the account balance(s).

        Args:
            ctx: Request context of the caller
            account_id: Account the transaction belongs to (source for transfers)
            transaction_type: DEPOSIT, WITHDRAWAL or TRANSFER
            amount: Positive decimal amount (Decimal, int, or decimal string)
            description: Optional free text
            destination_account_id: Credited account, transfers only

        Returns:
            LedgerResult with the new transaction and updated account(s)
        """
        try:
            if account_id is None:
                raise errors.ValidationError.from_fields({"account_id": "Account ID is required"})
            entry = validate_entry(transaction_type, amount, description, destination_account_id)
            self._check_distinct_legs(account_id, entry)
        except errors.ValidationError as e:
            return self._rejected(LedgerErrorKind.VALIDATION_FAILED, e, e.errors)

        deltas = effect(
            entry.transaction_type, entry.amount_cents, account_id, entry.destination_account_id
        )

        try:
            with self.db.atomic(deltas.keys()) as uow:
                self._require_accounts(uow, deltas.keys())
                self._check_limits(uow, deltas)
                self._check_funds(uow, deltas)
                txn = uow.insert_transaction(
                    account_id=account_id,
                    transaction_type=entry.transaction_type,
                    amount_cents=entry.amount_cents,
                    description=entry.description,
                    destination_account_id=entry.destination_account_id,
                )
                updated = self._apply_deltas(uow, deltas)
        except errors.ValidationError as e:
            return self._rejected(LedgerErrorKind.VALIDATION_FAILED, e, e.errors)
        except errors.NotFoundError as e:
            return self._rejected(LedgerErrorKind.NOT_FOUND, e)
        except errors.InsufficientFundsError as e:
            return self._rejected(LedgerErrorKind.INSUFFICIENT_FUNDS, e)
        except errors.StorageError:
            return self._storage_failure("apply", account_id)

        logger.info(
            "Applied %s %s to account %s (transaction %s)",
            txn.transaction_type.value,
            format_minor_units(txn.amount_cents),
            account_id,
            txn.id,
        )
        self.audit.record(
            ctx,
            AuditAction.CREATE,
            "Transaction",
            txn.id,
            f"Created {txn.transaction_type.value} transaction of "
            f"{format_minor_units(txn.amount_cents)} for account {account_id}",
        )
        return self._success(txn, updated)

    def amend(
        self,
        ctx: RequestContext,
        transaction_id: int,
        transaction_type: object,
        amount: Decimal | int | str | None,
        description: Optional[str] = None,
        destination_account_id: Optional[int] = None,
    ) -> LedgerResult:
        """Rewrite a transaction and move the balance(s) by the change in effect.

        The transaction stays on its original account; only type, amount,
        description and (for transfers) destination can change.
        """
        try:
            entry = validate_entry(transaction_type, amount, description, destination_account_id)
        except errors.ValidationError as e:
            return self._rejected(LedgerErrorKind.VALIDATION_FAILED, e, e.errors)

        for _ in range(MAX_LOCK_ATTEMPTS):
            try:
                current = self.db.get_transaction(transaction_id)
            except errors.StorageError:
                return self._storage_failure("amend", transaction_id)
            if current is None:
                return self._rejected(
                    LedgerErrorKind.NOT_FOUND,
                    errors.NotFoundError(errors.transaction_not_found(transaction_id)),
                )
            try:
                self._check_distinct_legs(current.account_id, entry)
            except errors.ValidationError as e:
                return self._rejected(LedgerErrorKind.VALIDATION_FAILED, e, e.errors)

            new_effect = effect(
                entry.transaction_type,
                entry.amount_cents,
                current.account_id,
                entry.destination_account_id,
            )
            lock_ids = set(current.account_ids) | set(new_effect)

            try:
                with self.db.atomic(lock_ids) as uow:
                    old = self._require_transaction(uow, transaction_id)
                    if not set(old.account_ids) <= lock_ids:
                        raise _LockSetChanged()
                    self._require_accounts(uow, new_effect.keys())
                    deltas = balance_delta(transaction_effect(old), new_effect)
                    self._check_limits(uow, deltas)
                    self._check_funds(uow, deltas)
                    txn = uow.update_transaction(
                        transaction_id=transaction_id,
                        transaction_type=entry.transaction_type,
                        amount_cents=entry.amount_cents,
                        description=entry.description,
                        destination_account_id=entry.destination_account_id,
                    )
                    updated = self._apply_deltas(uow, deltas)
                    for account_id in new_effect:
                        if account_id not in updated:
                            updated[account_id] = uow.get_account(account_id)
            except _LockSetChanged:
                logger.debug("Transaction %s moved while locking, retrying amend", transaction_id)
                continue
            except errors.ValidationError as e:
                return self._rejected(LedgerErrorKind.VALIDATION_FAILED, e, e.errors)
            except errors.NotFoundError as e:
                return self._rejected(LedgerErrorKind.NOT_FOUND, e)
            except errors.InsufficientFundsError as e:
                return self._rejected(LedgerErrorKind.INSUFFICIENT_FUNDS, e)
            except errors.StorageError:
                return self._storage_failure("amend", transaction_id)

            logger.info(
                "Amended transaction %s to %s %s (deltas %s)",
                transaction_id,
                txn.transaction_type.value,
                format_minor_units(txn.amount_cents),
                {k: format_minor_units(v) for k, v in sorted(deltas.items())},
            )
            self.audit.record(
                ctx,
                AuditAction.UPDATE,
                "Transaction",
                transaction_id,
                f"Changed {old.transaction_type.value} {format_minor_units(old.amount_cents)} "
                f"to {txn.transaction_type.value} {format_minor_units(txn.amount_cents)}",
            )
            return self._success(txn, updated)

        return self._storage_failure("amend", transaction_id, exc_info=False)

    def reverse(self, ctx: RequestContext, transaction_id: int) -> LedgerResult:
        """Undo a transaction's effect on its account(s) and remove it.

        A second call for the same ID returns NOT_FOUND and changes nothing.
        """
        for _ in range(MAX_LOCK_ATTEMPTS):
            try:
                current = self.db.get_transaction(transaction_id)
            except errors.StorageError:
                return self._storage_failure("reverse", transaction_id)
            if current is None:
                return self._rejected(
                    LedgerErrorKind.NOT_FOUND,
                    errors.NotFoundError(errors.transaction_not_found(transaction_id)),
                )
            lock_ids = set(current.account_ids)

            try:
                with self.db.atomic(lock_ids) as uow:
                    old = self._require_transaction(uow, transaction_id)
                    if not set(old.account_ids) <= lock_ids:
                        raise _LockSetChanged()
                    deltas = {k: -v for k, v in transaction_effect(old).items()}
                    updated = self._apply_deltas(uow, deltas)
                    uow.delete_transaction(transaction_id)
            except _LockSetChanged:
                logger.debug("Transaction %s moved while locking, retrying reverse", transaction_id)
                continue
            except errors.NotFoundError as e:
                return self._rejected(LedgerErrorKind.NOT_FOUND, e)
            except errors.StorageError:
                return self._storage_failure("reverse", transaction_id)

            logger.info(
                "Reversed transaction %s (%s %s)",
                transaction_id,
                old.transaction_type.value,
                format_minor_units(old.amount_cents),
            )
            self.audit.record(
                ctx,
                AuditAction.DELETE,
                "Transaction",
                transaction_id,
                f"Deleted {old.transaction_type.value} transaction of "
                f"{format_minor_units(old.amount_cents)} from account {old.account_id}",
            )
            return self._success(old, updated)

        return self._storage_failure("reverse", transaction_id, exc_info=False)

    @staticmethod
    def _check_distinct_legs(account_id: int, entry: LedgerEntry) -> None:
        if entry.destination_account_id is not None and entry.destination_account_id == account_id:
            raise errors.ValidationError.from_fields(
                {"destination_account_id": "Cannot transfer to the same account"}
            )

    @staticmethod
    def _require_transaction(uow: UnitOfWork, transaction_id: int) -> Transaction:
        txn = uow.get_transaction(transaction_id)
        if txn is None:
            raise errors.NotFoundError(errors.transaction_not_found(transaction_id))
        return txn

    @staticmethod
    def _require_accounts(uow: UnitOfWork, account_ids: Iterable[int]) -> None:
        for account_id in sorted(account_ids):
            if uow.get_account(account_id) is None:
                raise errors.NotFoundError(errors.account_not_found(account_id))

    @staticmethod
    def _check_limits(uow: UnitOfWork, deltas: dict[int, int]) -> None:
        """Refuse changes that would push a balance past MAX_BALANCE_CENTS."""
        for account_id, delta in sorted(deltas.items()):
            balance = uow.get_account(account_id).balance_cents + delta
            if abs(balance) > MAX_BALANCE_CENTS:
                raise errors.ValidationError.from_fields(
                    {"amount": f"Balance of account {account_id} would exceed the allowed limit"}
                )

    @staticmethod
    def _check_funds(uow: UnitOfWork, deltas: dict[int, int]) -> None:
        """Refuse debits that would take a non-credit account below zero."""
        for account_id, delta in sorted(deltas.items()):
            if delta >= 0:
                continue
            account = uow.get_account(account_id)
            if account.account_type.allows_negative_balance:
                continue
            if account.balance_cents + delta < 0:
                raise errors.InsufficientFundsError(
                    errors.insufficient_funds(account_id, account.balance_cents, delta)
                )

    @staticmethod
    def _apply_deltas(uow: UnitOfWork, deltas: dict[int, int]) -> dict[int, Account]:
        return {
            account_id: uow.increment_balance(account_id, delta)
            for account_id, delta in sorted(deltas.items())
        }

    @staticmethod
    def _success(txn: Transaction, accounts: dict[int, Account]) -> LedgerResult:
        destination = None
        if txn.destination_account_id is not None:
            destination = accounts.get(txn.destination_account_id)
        return LedgerResult(
            transaction=txn,
            account=accounts.get(txn.account_id),
            destination_account=destination,
        )

    @staticmethod
    def _rejected(
        kind: LedgerErrorKind, error: Exception, field_errors: Optional[dict[str, str]] = None
    ) -> LedgerResult:
        logger.info("Ledger operation rejected (%s): %s", kind.value, error)
        return LedgerResult.failure(kind, str(error), field_errors)

    @staticmethod
    def _storage_failure(operation: str, subject_id: object, exc_info: bool = True) -> LedgerResult:
        logger.error(
            "Ledger %s failed for %s; nothing was applied", operation, subject_id, exc_info=exc_info
        )
        return LedgerResult.failure(LedgerErrorKind.STORAGE_FAILURE, "Internal storage error")
