"""Moves old active tickets into the archive.

The transition is one set-based UPDATE so overlapping sweeps cannot
double-process a ticket; already archived rows never match the predicate.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import update
from sqlmodel import Session

from rma_portal.core.config import settings
from rma_portal.core.errors import ArchiveJobError
from rma_portal.metrics.prometheus import archive_runs_total, tickets_archived_total
from rma_portal.models.ticket import Ticket, TicketStatus
from rma_portal.services import activity

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def archive_cutoff(now: datetime, older_than_days: int) -> datetime:
    return now - timedelta(days=older_than_days)


def archive_old_tickets(
    session: Session,
    *,
    now: Optional[datetime] = None,
    older_than_days: Optional[int] = None,
) -> int:
    now = now or _now()
    days = settings.archive_after_days if older_than_days is None else older_than_days
    cutoff = archive_cutoff(now, days)

    stmt = (
        update(Ticket)
        .where(Ticket.status == TicketStatus.active.value)
        .where(Ticket.created_at < cutoff)
        .values(status=TicketStatus.archived.value, archived_at=now, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    result = session.exec(stmt)  # type: ignore[call-overload]
    session.commit()
    return int(result.rowcount or 0)


def run_archive_job(
    session: Session,
    *,
    source: str = "cron",
    now: Optional[datetime] = None,
    older_than_days: Optional[int] = None,
) -> int:
    logger.info("[%s] running auto-archiving job", source)
    try:
        count = archive_old_tickets(session, now=now, older_than_days=older_than_days)
    except Exception as e:
        session.rollback()
        archive_runs_total.labels(source=source, outcome="error").inc()
        logger.exception("[%s] auto-archiving failed", source)
        activity.log_system_error(session, "Auto-archiving failed", context=repr(e))
        raise ArchiveJobError() from e

    archive_runs_total.labels(source=source, outcome="ok").inc()
    if count > 0:
        tickets_archived_total.labels(source=source).inc(count)
        logger.info("[%s] archived %d tickets", source, count, extra={"source": source})
        activity.log_tickets_archived(session, count, source=source)
    return count
