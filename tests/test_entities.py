"""Tests for domain entities."""

from datetime import datetime, UTC

import pytest

from bankledger.domain.entities import (
    Account,
    AccountType,
    BalanceCheck,
    Customer,
    CustomerSummary,
    Transaction,
    TransactionPage,
    TransactionType,
)


NOW = datetime(2024, 1, 15, 12, 0, tzinfo=UTC)


def make_transaction(**overrides):
    fields = dict(
        id=1,
        account_id=10,
        transaction_type=TransactionType.DEPOSIT,
        amount_cents=5000,
        description=None,
        destination_account_id=None,
        created_at=NOW,
        updated_at=NOW,
    )
    fields.update(overrides)
    return Transaction(**fields)


def make_account(account_id, balance_cents, account_type=AccountType.CHECKING):
    return Account(
        id=account_id,
        customer_id=1,
        account_type=account_type,
        balance_cents=balance_cents,
        created_at=NOW,
        updated_at=NOW,
    )


class TestEnums:
    """Tests for the closed value sets."""

    def test_transaction_types(self):
        assert {t.value for t in TransactionType} == {"DEPOSIT", "WITHDRAWAL", "TRANSFER"}

    def test_only_credit_accounts_may_go_negative(self):
        allowed = [t for t in AccountType if t.allows_negative_balance]
        assert allowed == [AccountType.CREDIT]

    def test_enum_values_compare_as_strings(self):
        assert AccountType("MONEY_MARKET") is AccountType.MONEY_MARKET
        assert TransactionType.DEPOSIT == "DEPOSIT"


class TestTransaction:
    """Tests for Transaction entity."""

    def test_single_leg_account_ids(self):
        assert make_transaction().account_ids == (10,)

    def test_transfer_account_ids(self):
        txn = make_transaction(transaction_type=TransactionType.TRANSFER, destination_account_id=20)
        assert txn.account_ids == (10, 20)

    def test_is_immutable(self):
        txn = make_transaction()
        with pytest.raises(AttributeError):
            txn.amount_cents = 1


class TestTransactionPage:
    """Tests for pagination arithmetic."""

    @pytest.mark.parametrize(
        "total_items,page_size,expected",
        [(0, 10, 0), (1, 10, 1), (10, 10, 1), (11, 10, 2), (250, 100, 3)],
    )
    def test_total_pages(self, total_items, page_size, expected):
        page = TransactionPage(transactions=[], page=1, page_size=page_size, total_items=total_items)
        assert page.total_pages == expected


class TestBalanceCheck:
    """Tests for BalanceCheck."""

    def test_consistent(self):
        check = BalanceCheck(account_id=1, stored_cents=500, computed_cents=500, transaction_count=2)
        assert check.is_consistent
        assert check.difference_cents == 0

    def test_drift(self):
        check = BalanceCheck(account_id=1, stored_cents=700, computed_cents=500)
        assert not check.is_consistent
        assert check.difference_cents == 200


def test_customer_summary_total_balance():
    customer = Customer(
        id=1, name="Ada", email="ada@example.com", phone=None, address=None,
        created_at=NOW, updated_at=NOW,
    )
    summary = CustomerSummary(
        customer=customer,
        accounts=[make_account(1, 10000), make_account(2, -2500, AccountType.CREDIT)],
    )
    assert summary.total_balance_cents == 7500
