"""Tests for AccountService."""

import logging
from decimal import Decimal

import pytest
from sqlalchemy import update
from sqlalchemy.exc import OperationalError

from bankledger.database.models import Account as ORMAccount
from bankledger.database.sqlalchemy_db import SQLAlchemyUnitOfWork
from bankledger.domain import errors
from bankledger.domain.account import parse_account_type
from bankledger.domain.entities import AccountType, TransactionType


class TestParseAccountType:
    """Tests for parse_account_type."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("savings", AccountType.SAVINGS),
            ("Money Market", AccountType.MONEY_MARKET),
            ("certificate-of-deposit", AccountType.CERTIFICATE_OF_DEPOSIT),
            (AccountType.CREDIT, AccountType.CREDIT),
        ],
    )
    def test_valid(self, value, expected):
        assert parse_account_type(value) is expected

    def test_invalid(self):
        with pytest.raises(errors.ValidationError) as exc_info:
            parse_account_type("BROKERAGE")
        assert "account_type" in exc_info.value.errors


class TestOpenAccount:
    """Tests for opening accounts."""

    def test_open_without_deposit(self, account_service, sample_customer, request_ctx):
        account_id = account_service.open_account(request_ctx, sample_customer.id, "checking")

        account = account_service.get_account(account_id)
        assert account.customer_id == sample_customer.id
        assert account.account_type is AccountType.CHECKING
        assert account.balance_cents == 0

    def test_opening_deposit_is_a_transaction(
        self, account_service, transaction_service, sample_customer, request_ctx
    ):
        account_id = account_service.open_account(
            request_ctx, sample_customer.id, AccountType.SAVINGS, initial_deposit=Decimal("250.00")
        )

        account = account_service.get_account(account_id)
        page = transaction_service.list_transactions(account_id=account_id)
        assert account.balance_cents == 25000
        assert page.total_items == 1
        opening = page.transactions[0]
        assert opening.transaction_type is TransactionType.DEPOSIT
        assert opening.amount_cents == 25000
        assert opening.description == "Opening deposit"

    def test_zero_deposit_records_nothing(
        self, account_service, transaction_service, sample_customer, request_ctx
    ):
        account_id = account_service.open_account(
            request_ctx, sample_customer.id, AccountType.SAVINGS, initial_deposit="0"
        )

        assert transaction_service.list_transactions(account_id=account_id).total_items == 0

    def test_negative_deposit(self, account_service, sample_customer, request_ctx):
        with pytest.raises(errors.ValidationError) as exc_info:
            account_service.open_account(
                request_ctx, sample_customer.id, AccountType.SAVINGS, initial_deposit="-5"
            )
        assert "initial_deposit" in exc_info.value.errors
        assert account_service.list_accounts() == []

    def test_failed_opening_deposit_leaves_no_account(
        self, account_service, audit_trail, sample_customer, request_ctx, monkeypatch
    ):
        def fail(self, account_id, delta_cents):
            raise OperationalError("UPDATE accounts", {}, Exception("disk I/O error"))

        monkeypatch.setattr(SQLAlchemyUnitOfWork, "increment_balance", fail)

        with pytest.raises(errors.StorageError):
            account_service.open_account(
                request_ctx, sample_customer.id, AccountType.SAVINGS, initial_deposit="100"
            )

        assert account_service.list_accounts() == []
        assert audit_trail.list_entries(entity_type="Account") == []

    def test_unknown_customer(self, account_service, request_ctx):
        with pytest.raises(errors.NotFoundError, match="Customer 77 not found"):
            account_service.open_account(request_ctx, 77, AccountType.SAVINGS)


def test_list_accounts_filters(account_service, customer_service, sample_account, second_account, request_ctx):
    other = customer_service.create_customer(request_ctx, name="Grace", email="grace@navy.mil")
    other_account = account_service.open_account(request_ctx, other, AccountType.CHECKING)

    assert len(account_service.list_accounts()) == 3
    assert [a.id for a in account_service.list_accounts(customer_id=other)] == [other_account]
    checking = account_service.list_accounts(account_type="CHECKING")
    assert [a.id for a in checking] == [sample_account.id, other_account]


class TestChangeAccountType:
    """Tests for changing account types."""

    def test_change_type(self, account_service, sample_account, request_ctx):
        account_service.change_account_type(request_ctx, sample_account.id, "money_market")

        account = account_service.get_account(sample_account.id)
        assert account.account_type is AccountType.MONEY_MARKET
        assert account.balance_cents == sample_account.balance_cents

    def test_overdrawn_account_must_stay_credit(
        self, account_service, ledger, credit_account, request_ctx
    ):
        ledger.apply(request_ctx, credit_account.id, "WITHDRAWAL", "10")

        with pytest.raises(errors.ValidationError) as exc_info:
            account_service.change_account_type(request_ctx, credit_account.id, AccountType.SAVINGS)
        assert "account_type" in exc_info.value.errors

    def test_missing_account(self, account_service, request_ctx):
        with pytest.raises(errors.NotFoundError):
            account_service.change_account_type(request_ctx, 404, AccountType.SAVINGS)


class TestDeleteAccount:
    """Tests for deleting accounts."""

    def test_delete_empty_account(self, account_service, second_account, request_ctx):
        account_service.delete_account(request_ctx, second_account.id)

        assert account_service.get_account(second_account.id) is None

    def test_delete_blocked_by_transactions(self, account_service, sample_account, request_ctx):
        with pytest.raises(errors.DependencyError, match="1 transaction"):
            account_service.delete_account(request_ctx, sample_account.id)

    def test_delete_blocked_by_incoming_transfer(
        self, account_service, ledger, sample_account, second_account, request_ctx
    ):
        ledger.apply(request_ctx, sample_account.id, "TRANSFER", "5", None, second_account.id)

        with pytest.raises(errors.DependencyError):
            account_service.delete_account(request_ctx, second_account.id)

    def test_delete_after_reversal(
        self, account_service, ledger, transaction_service, sample_account, request_ctx
    ):
        for txn in transaction_service.list_transactions(account_id=sample_account.id).transactions:
            assert ledger.reverse(request_ctx, txn.id).ok

        account_service.delete_account(request_ctx, sample_account.id)
        assert account_service.get_account(sample_account.id) is None


class TestReconcile:
    """Tests for balance reconciliation."""

    def test_consistent_account(self, account_service, ledger, sample_account, second_account, request_ctx):
        ledger.apply(request_ctx, sample_account.id, "WITHDRAWAL", "20")
        ledger.apply(request_ctx, sample_account.id, "TRANSFER", "30", None, second_account.id)

        check = account_service.reconcile(sample_account.id)

        assert check.is_consistent
        assert check.stored_cents == check.computed_cents == 45000
        assert check.transaction_count == 3
        assert account_service.reconcile(second_account.id).computed_cents == 3000

    def test_detects_drift(self, account_service, temp_db, sample_account, caplog):
        caplog.set_level(logging.WARNING, logger="bankledger")
        # Corrupt the stored balance behind the ledger's back
        with temp_db._session() as session:
            session.execute(
                update(ORMAccount).where(ORMAccount.id == sample_account.id).values(balance_cents=1)
            )

        check = account_service.reconcile(sample_account.id)

        assert not check.is_consistent
        assert check.difference_cents == 1 - 50000
        assert "balance drift" in caplog.text

    def test_missing_account(self, account_service):
        with pytest.raises(errors.NotFoundError):
            account_service.reconcile(999)
