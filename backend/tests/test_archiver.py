from datetime import datetime, timezone

import pytest
from sqlmodel import select

from rma_portal.core.errors import ArchiveJobError
from rma_portal.models import ActivityLog, Ticket
from rma_portal.services import archiver

NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)


def _status(session, rma_number):
    return session.exec(select(Ticket.status).where(Ticket.rma_number == rma_number)).one()


def _logs(session, activity_type):
    return session.exec(select(ActivityLog).where(ActivityLog.activity_type == activity_type)).all()


def test_archives_only_tickets_past_the_threshold(session, make_ticket):
    make_ticket("RMA-2026-100001", age_days=10, now=NOW)
    make_ticket("RMA-2026-100002", age_days=1, now=NOW)

    count = archiver.archive_old_tickets(session, now=NOW, older_than_days=7)

    assert count == 1
    assert _status(session, "RMA-2026-100001") == "archived"
    assert _status(session, "RMA-2026-100002") == "active"
    archived = session.exec(select(Ticket).where(Ticket.rma_number == "RMA-2026-100001")).one()
    assert archived.archived_at is not None


def test_second_run_archives_nothing(session, make_ticket):
    make_ticket("RMA-2026-100003", age_days=40, now=NOW)

    assert archiver.archive_old_tickets(session, now=NOW) == 1
    assert archiver.archive_old_tickets(session, now=NOW) == 0


def test_uses_configured_threshold(session, make_ticket):
    make_ticket("RMA-2026-100004", age_days=29, now=NOW)
    make_ticket("RMA-2026-100005", age_days=31, now=NOW)

    assert archiver.archive_old_tickets(session, now=NOW) == 1
    assert _status(session, "RMA-2026-100004") == "active"


def test_run_archive_job_logs_only_when_something_moved(session, make_ticket):
    assert archiver.run_archive_job(session, now=NOW) == 0
    assert _logs(session, "tickets_archived") == []

    make_ticket("RMA-2026-100006", age_days=45, now=NOW)
    make_ticket("RMA-2026-100007", age_days=60, now=NOW)
    assert archiver.run_archive_job(session, source="scheduler", now=NOW) == 2

    entries = _logs(session, "tickets_archived")
    assert len(entries) == 1
    assert entries[0].user_type == "system"
    assert entries[0].meta["archivedCount"] == 2
    assert entries[0].meta["source"] == "scheduler"


def test_run_archive_job_failure_is_logged_and_raised(session, monkeypatch):
    def broken(*args, **kwargs):
        raise RuntimeError("database went away")

    monkeypatch.setattr(archiver, "archive_old_tickets", broken)

    with pytest.raises(ArchiveJobError):
        archiver.run_archive_job(session)

    errors = _logs(session, "system_error")
    assert len(errors) == 1
    assert "database went away" in errors[0].meta["context"]
