import logging
from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError

from onboarding.core.errors import PersistenceError
from onboarding.models.codes import AuditAction
from onboarding.services.audit_log import AuditLogWriter

MERCHANT_A = "merchant-a"
MERCHANT_B = "merchant-b"


@pytest.fixture
def audit(db):
    return AuditLogWriter(db)


def test_record_persists_row(audit):
    entry = audit.record(
        MERCHANT_A, "merchants", MERCHANT_A, AuditAction.insert, "user-1", {"new": {"legal_name": "X"}}, "10.1.1.1"
    )
    stored = audit.find_by_id(entry.id)
    assert stored.action == "INSERT"
    assert stored.changed_by == "user-1"
    assert stored.ip_address == "10.1.1.1"
    assert stored.changes == {"new": {"legal_name": "X"}}
    assert stored.created_at is not None


def test_find_by_merchant_most_recent_first_and_bounded(audit):
    for i in range(5):
        audit.record(MERCHANT_A, "merchants", MERCHANT_A, AuditAction.update, "user-1", {"new": {"n": i}})
    audit.record(MERCHANT_B, "merchants", MERCHANT_B, AuditAction.update, "user-1", {"new": {"n": 99}})

    logs = audit.find_by_merchant(MERCHANT_A, limit=3)
    assert [log.changes["new"]["n"] for log in logs] == [4, 3, 2]
    assert all(log.merchant_id == MERCHANT_A for log in logs)


def test_find_by_table_and_record(audit):
    audit.record(MERCHANT_A, "merchants", MERCHANT_A, AuditAction.update, "user-1", {})
    audit.record(MERCHANT_A, "merchant_notes", "note-1", AuditAction.insert, "user-1", {})
    audit.record(MERCHANT_B, "merchant_notes", "note-1", AuditAction.update, "user-2", {})

    assert [log.record_id for log in audit.find_by_table(MERCHANT_A, "merchant_notes")] == ["note-1"]
    by_record = audit.find_by_record_id("note-1")
    assert {log.merchant_id for log in by_record} == {MERCHANT_A, MERCHANT_B}


def test_find_by_date_range_is_inclusive(audit):
    first = audit.record(MERCHANT_A, "merchants", MERCHANT_A, AuditAction.insert, "user-1", {})
    second = audit.record(MERCHANT_A, "merchants", MERCHANT_A, AuditAction.update, "user-1", {})
    audit.record(MERCHANT_A, "merchants", MERCHANT_A, AuditAction.update, "user-1", {})

    logs = audit.find_by_date_range(MERCHANT_A, first.created_at, second.created_at)
    assert {log.id for log in logs} == {first.id, second.id}


def test_actor_activity_summary(audit):
    first = audit.record(MERCHANT_A, "merchants", MERCHANT_A, AuditAction.insert, "user-1", {})
    audit.record(MERCHANT_A, "merchants", MERCHANT_A, AuditAction.update, "user-1", {})
    audit.record(MERCHANT_A, "merchant_members", "m-1", AuditAction.insert, "user-1", {})
    audit.record(MERCHANT_B, "merchants", MERCHANT_B, AuditAction.update, "user-1", {})
    audit.record(MERCHANT_B, "merchants", MERCHANT_B, AuditAction.update, "someone-else", {})

    start = first.created_at - timedelta(minutes=1)
    end = first.created_at + timedelta(minutes=1)
    summary = audit.get_actor_activity_summary("user-1", start, end)

    assert summary["total_actions"] == 4
    assert summary["actions_by_table"] == {
        "merchants": {"INSERT": 1, "UPDATE": 2},
        "merchant_members": {"INSERT": 1},
    }
    assert summary["merchants_modified"] == 2
    assert sum(summary["timeline"].values()) == 4
    assert first.created_at.date().isoformat() in summary["timeline"]


def test_record_failure_raises_persistence_error(audit, db, monkeypatch):
    def fail_commit():
        raise OperationalError("INSERT", {}, Exception("disk full"))

    monkeypatch.setattr(db, "commit", fail_commit)
    with pytest.raises(PersistenceError):
        audit.record(MERCHANT_A, "merchants", MERCHANT_A, AuditAction.insert, "user-1", {})


def test_record_after_commit_logs_warning_instead_of_raising(audit, monkeypatch, caplog):
    def fail(*args, **kwargs):
        raise PersistenceError("store unavailable")

    monkeypatch.setattr(audit, "record", fail)
    with caplog.at_level(logging.WARNING, logger="onboarding.services.audit_log"):
        result = audit.record_after_commit(MERCHANT_A, "merchants", MERCHANT_A, AuditAction.update, "user-1", {})
    assert result is None
    assert "Audit write failed" in caplog.text
