from sqlmodel import select

import tasks
from rma_portal.models import ActivityLog, Ticket
from rma_portal.services import archiver


def test_beat_schedule_runs_daily_sweep():
    entry = tasks.celery_app.conf.beat_schedule["archive-old-tickets-daily"]
    assert entry["task"] == "archive_old_tickets"
    assert entry["schedule"].hour == {tasks.settings.archive_cron_hour}


def test_archive_task(session, make_ticket, monkeypatch):
    pushed = []
    monkeypatch.setattr(tasks, "_push_metrics", lambda: pushed.append(True))
    make_ticket("RMA-2026-500001", age_days=45)

    result = tasks.archive_old_tickets()

    assert result["ok"] is True
    assert result["archived_count"] == 1
    assert pushed == [True]
    session.expire_all()
    assert session.exec(select(Ticket.status)).one() == "archived"
    entry = session.exec(select(ActivityLog).where(ActivityLog.activity_type == "tickets_archived")).one()
    assert entry.meta["source"] == "scheduler"


def test_archive_task_reports_failure(engine, monkeypatch):
    monkeypatch.setattr(tasks, "_push_metrics", lambda: None)

    def broken(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(archiver, "archive_old_tickets", broken)

    result = tasks.archive_old_tickets()
    assert result["ok"] is False
    assert result["error"] == "Auto-archiving failed"
