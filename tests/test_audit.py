"""Tests for the audit trail."""

import logging

from bankledger.domain.audit import DatabaseAuditTrail, NullAuditTrail
from bankledger.domain.entities import AuditAction
from bankledger.domain.ledger import LedgerService


def test_ledger_operations_are_audited(ledger, audit_trail, sample_account, request_ctx):
    txn = ledger.apply(request_ctx, sample_account.id, "DEPOSIT", "100").transaction
    ledger.amend(request_ctx, txn.id, "WITHDRAWAL", "40")
    ledger.reverse(request_ctx, txn.id)

    entries = audit_trail.list_entries(entity_type="Transaction", entity_id=txn.id)

    assert [e.action for e in entries] == [AuditAction.DELETE, AuditAction.UPDATE, AuditAction.CREATE]
    create = entries[-1]
    assert create.actor_id == "teller-1"
    assert create.ip_address == "127.0.0.1"
    assert create.user_agent == "pytest"
    assert create.details == f"Created DEPOSIT transaction of 100.00 for account {sample_account.id}"
    assert entries[1].details == "Changed DEPOSIT 100.00 to WITHDRAWAL 40.00"


def test_rejected_operations_are_not_audited(ledger, audit_trail, sample_account, request_ctx):
    before = len(audit_trail.list_entries())

    ledger.apply(request_ctx, sample_account.id, "WITHDRAWAL", "9999")

    assert len(audit_trail.list_entries()) == before


def test_list_entries_filters_and_limit(ledger, audit_trail, sample_account, request_ctx):
    for _ in range(3):
        ledger.apply(request_ctx, sample_account.id, "DEPOSIT", "1")

    assert len(audit_trail.list_entries(actor_id="teller-1", limit=2)) == 2
    assert audit_trail.list_entries(actor_id="someone-else") == []
    assert len(audit_trail.list_entries(entity_type="Account")) == 1


def test_audit_failure_does_not_fail_operation(temp_db, sample_account, request_ctx, monkeypatch, caplog):
    caplog.set_level(logging.ERROR, logger="bankledger")

    def broken_write(**kwargs):
        raise RuntimeError("audit table is gone")

    monkeypatch.setattr(temp_db, "add_audit_entry", broken_write)
    ledger = LedgerService(temp_db, DatabaseAuditTrail(temp_db))

    result = ledger.apply(request_ctx, sample_account.id, "DEPOSIT", "100")

    assert result.ok
    assert temp_db.get_account(sample_account.id).balance_cents == 60000
    assert temp_db.get_transaction(result.transaction.id) is not None
    failures = [r for r in caplog.records if r.name == "bankledger.domain.audit"]
    assert len(failures) == 1
    assert failures[0].exc_info is not None


def test_null_audit_trail(temp_db, sample_account, request_ctx):
    ledger = LedgerService(temp_db, NullAuditTrail())
    before = len(DatabaseAuditTrail(temp_db).list_entries())

    assert ledger.apply(request_ctx, sample_account.id, "DEPOSIT", "5").ok
    assert len(DatabaseAuditTrail(temp_db).list_entries()) == before
    assert NullAuditTrail().list_entries() == []
