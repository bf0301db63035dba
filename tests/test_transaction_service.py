"""Tests for TransactionService queries."""

from datetime import date, datetime, timedelta, UTC

import pytest

from bankledger.domain import errors
from bankledger.domain.entities import TransactionType


@pytest.fixture
def history(ledger, sample_account, second_account, request_ctx):
    """Sample account with a mix of transactions (plus its opening deposit)."""
    ledger.apply(request_ctx, sample_account.id, "DEPOSIT", "20.00", "Coffee refund")
    ledger.apply(request_ctx, sample_account.id, "WITHDRAWAL", "75.50", "Groceries")
    ledger.apply(request_ctx, sample_account.id, "WITHDRAWAL", "5.25", "Coffee")
    ledger.apply(request_ctx, sample_account.id, "TRANSFER", "100.00", "Savings", second_account.id)
    return sample_account


def test_get_transaction(transaction_service, history):
    page = transaction_service.list_transactions(account_id=history.id)
    txn = page.transactions[0]

    assert transaction_service.get_transaction(txn.id) == txn
    assert transaction_service.get_transaction(12345) is None


def test_require_transaction(transaction_service):
    with pytest.raises(errors.NotFoundError, match="Transaction 5 not found"):
        transaction_service.require_transaction(5)


def test_default_listing_is_newest_first(transaction_service, history):
    page = transaction_service.list_transactions(account_id=history.id)

    assert page.total_items == 5
    assert page.page == 1
    assert page.page_size == 10
    assert page.total_pages == 1
    assert page.transactions[0].description == "Savings"
    assert page.transactions[-1].description == "Opening deposit"


def test_account_filter_matches_transfer_destination(transaction_service, history, second_account):
    page = transaction_service.list_transactions(account_id=second_account.id)

    assert page.total_items == 1
    assert page.transactions[0].transaction_type is TransactionType.TRANSFER


def test_type_filter(transaction_service, history):
    page = transaction_service.list_transactions(transaction_type="withdrawal")

    assert page.total_items == 2
    assert {t.description for t in page.transactions} == {"Groceries", "Coffee"}


def test_search_description_and_customer(transaction_service, history):
    coffee = transaction_service.list_transactions(search="coffee")
    assert coffee.total_items == 2

    by_customer = transaction_service.list_transactions(search="ADA@example")
    assert by_customer.total_items == 5

    by_type = transaction_service.list_transactions(search="transf")
    assert [t.description for t in by_type.transactions] == ["Savings"]


def test_sort_by_amount(transaction_service, history):
    page = transaction_service.list_transactions(sort="amount", order="asc")

    amounts = [t.amount_cents for t in page.transactions]
    assert amounts == sorted(amounts)
    assert amounts[0] == 525


def test_pagination(transaction_service, history):
    first = transaction_service.list_transactions(page=1, page_size=2)
    third = transaction_service.list_transactions(page=3, page_size=2)

    assert first.total_items == 5
    assert first.total_pages == 3
    assert len(first.transactions) == 2
    assert len(third.transactions) == 1
    seen = {t.id for t in first.transactions} | {t.id for t in third.transactions}
    assert len(seen) == 3


def test_page_bounds_are_clamped(transaction_service, history):
    page = transaction_service.list_transactions(page=0, page_size=1000)

    assert page.page == 1
    assert page.page_size == 100


def test_date_range(transaction_service, history):
    # Timestamps are stored in UTC
    today = datetime.now(UTC).date()

    assert transaction_service.list_transactions(start_date=today, end_date=today).total_items == 5
    yesterday = today - timedelta(days=1)
    assert transaction_service.list_transactions(end_date=yesterday).total_items == 0


def test_invalid_filters(transaction_service):
    with pytest.raises(errors.ValidationError) as exc_info:
        transaction_service.list_transactions(
            transaction_type="REFUND",
            sort="description",
            order="sideways",
            start_date=date(2024, 2, 1),
            end_date=date(2024, 1, 1),
        )

    assert set(exc_info.value.errors) == {"type", "sort", "order", "start_date"}
