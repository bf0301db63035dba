"""Shared pytest fixtures for bankledger tests."""

import os
import tempfile
from decimal import Decimal

import pytest

from bankledger.database.factories import create_sqlite_database
from bankledger.domain.account import AccountService
from bankledger.domain.audit import DatabaseAuditTrail
from bankledger.domain.customer import CustomerService
from bankledger.domain.entities import AccountType, RequestContext
from bankledger.domain.ledger import LedgerService
from bankledger.domain.transaction import TransactionService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def request_ctx():
    """Request context of a test teller."""
    return RequestContext(actor_id="teller-1", ip_address="127.0.0.1", user_agent="pytest")


@pytest.fixture
def audit_trail(temp_db):
    """Create a DatabaseAuditTrail with a temporary database."""
    return DatabaseAuditTrail(temp_db)


@pytest.fixture
def ledger(temp_db, audit_trail):
    """Create a LedgerService with a temporary database."""
    return LedgerService(temp_db, audit_trail)


@pytest.fixture
def customer_service(temp_db, audit_trail):
    """Create a CustomerService with a temporary database."""
    return CustomerService(temp_db, audit_trail)


@pytest.fixture
def account_service(temp_db, ledger, audit_trail):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db, ledger, audit_trail)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def sample_customer(customer_service, request_ctx):
    """Create a sample customer for testing."""
    customer_id = customer_service.create_customer(
        request_ctx, name="Ada Lovelace", email="ada@example.com", phone="555-0100"
    )
    return customer_service.get_customer(customer_id)


@pytest.fixture
def sample_account(account_service, sample_customer, request_ctx):
    """Create a checking account holding 500.00."""
    account_id = account_service.open_account(
        request_ctx, sample_customer.id, AccountType.CHECKING, initial_deposit=Decimal("500.00")
    )
    return account_service.get_account(account_id)


@pytest.fixture
def second_account(account_service, sample_customer, request_ctx):
    """Create an empty savings account."""
    account_id = account_service.open_account(request_ctx, sample_customer.id, AccountType.SAVINGS)
    return account_service.get_account(account_id)


@pytest.fixture
def credit_account(account_service, sample_customer, request_ctx):
    """Create an empty credit account."""
    account_id = account_service.open_account(request_ctx, sample_customer.id, AccountType.CREDIT)
    return account_service.get_account(account_id)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
