"""Tests for CustomerService."""

import pytest

from bankledger.domain import errors
from bankledger.domain.entities import AccountType, AuditAction
from bankledger.utils.customer_resolver import resolve_customer


def test_create_customer(customer_service, request_ctx):
    """Test creating a customer."""
    customer_id = customer_service.create_customer(
        request_ctx, name="  Alan Turing ", email="alan@example.com", address="Bletchley"
    )

    customer = customer_service.get_customer(customer_id)
    assert customer.name == "Alan Turing"
    assert customer.email == "alan@example.com"
    assert customer.address == "Bletchley"
    assert customer.phone is None


def test_create_customer_validation(customer_service, request_ctx):
    """Test that name and email are validated together."""
    with pytest.raises(errors.ValidationError) as exc_info:
        customer_service.create_customer(request_ctx, name=" ", email="not-an-email")

    assert set(exc_info.value.errors) == {"name", "email"}


def test_create_duplicate_email(customer_service, sample_customer, request_ctx):
    """Test duplicate emails are rejected regardless of case."""
    with pytest.raises(errors.ConflictError, match="already exists"):
        customer_service.create_customer(request_ctx, name="Imposter", email="ADA@example.com")


def test_list_customers_search(customer_service, sample_customer, request_ctx):
    """Test listing customers with a search term."""
    customer_service.create_customer(request_ctx, name="Grace Hopper", email="grace@navy.mil")

    assert len(customer_service.list_customers()) == 2
    found = customer_service.list_customers(search="hopper")
    assert [c.name for c in found] == ["Grace Hopper"]
    assert [c.email for c in customer_service.list_customers(search="EXAMPLE.COM")] == [
        "ada@example.com"
    ]


def test_update_customer(customer_service, sample_customer, request_ctx):
    """Test partial updates leave other fields alone."""
    customer_service.update_customer(request_ctx, sample_customer.id, phone="555-0199")

    updated = customer_service.get_customer(sample_customer.id)
    assert updated.phone == "555-0199"
    assert updated.name == sample_customer.name
    assert updated.email == sample_customer.email


def test_update_customer_email_conflict(customer_service, sample_customer, request_ctx):
    """Test moving to another customer's email fails."""
    other_id = customer_service.create_customer(request_ctx, name="Grace", email="grace@navy.mil")

    with pytest.raises(errors.ConflictError):
        customer_service.update_customer(request_ctx, other_id, email="ada@example.com")


def test_update_customer_same_email_is_allowed(customer_service, sample_customer, request_ctx):
    customer_service.update_customer(request_ctx, sample_customer.id, email="ada@example.com")


def test_update_missing_customer(customer_service, request_ctx):
    with pytest.raises(errors.NotFoundError, match="Customer 42 not found"):
        customer_service.update_customer(request_ctx, 42, name="Nobody")


def test_delete_customer(customer_service, sample_customer, request_ctx):
    """Test deleting a customer without accounts."""
    customer_service.delete_customer(request_ctx, sample_customer.id)

    assert customer_service.get_customer(sample_customer.id) is None


def test_delete_customer_with_accounts_is_blocked(
    customer_service, account_service, sample_customer, request_ctx
):
    """Test a customer who owns accounts cannot be deleted."""
    account_service.open_account(request_ctx, sample_customer.id, AccountType.SAVINGS)

    with pytest.raises(errors.DependencyError, match="1 account"):
        customer_service.delete_customer(request_ctx, sample_customer.id)


def test_summary_totals_balances(customer_service, sample_account, credit_account, ledger, request_ctx):
    ledger.apply(request_ctx, credit_account.id, "WITHDRAWAL", "100")

    summary = customer_service.get_summary(sample_account.customer_id)

    assert len(summary.accounts) == 2
    assert summary.total_balance_cents == 40000


def test_customer_changes_are_audited(customer_service, audit_trail, request_ctx):
    customer_id = customer_service.create_customer(request_ctx, name="Grace", email="grace@navy.mil")
    customer_service.update_customer(request_ctx, customer_id, name="Grace Hopper")
    customer_service.delete_customer(request_ctx, customer_id)

    entries = audit_trail.list_entries(entity_type="Customer", entity_id=customer_id)

    assert [e.action for e in entries] == [AuditAction.DELETE, AuditAction.UPDATE, AuditAction.CREATE]
    assert all(e.actor_id == "teller-1" for e in entries)
    assert entries[1].details == "Updated name"


class TestResolveCustomer:
    """Tests for resolving customers by ID or email."""

    def test_by_id(self, customer_service, sample_customer):
        assert resolve_customer(customer_service, sample_customer.id) == sample_customer.id
        assert resolve_customer(customer_service, str(sample_customer.id)) == sample_customer.id

    def test_by_email(self, customer_service, sample_customer):
        assert resolve_customer(customer_service, "Ada@Example.com") == sample_customer.id

    def test_unknown(self, customer_service):
        with pytest.raises(errors.NotFoundError):
            resolve_customer(customer_service, "nobody@example.com")
        with pytest.raises(errors.NotFoundError):
            resolve_customer(customer_service, "99")
