import logging
from datetime import datetime, timezone

from celery import Celery
from celery.schedules import crontab
from celery.signals import worker_ready
from prometheus_client import CollectorRegistry, Counter, push_to_gateway
from sqlmodel import Session, SQLModel

from rma_portal.core.errors import ArchiveJobError
from rma_portal.core.logging import configure_logging
from rma_portal.db import session as session_mod
from rma_portal.models import Ticket  # noqa: F401  (table registration)
from rma_portal.services.archiver import run_archive_job

from worker_config import settings

configure_logging(settings.log_level, settings.log_json, service="rma-portal-worker")
logger = logging.getLogger(__name__)

celery_app = Celery(
    "rma_portal_worker",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
)

celery_app.conf.beat_schedule = {
    "archive-old-tickets-daily": {
        "task": "archive_old_tickets",
        "schedule": crontab(hour=settings.archive_cron_hour, minute=settings.archive_cron_minute),
    },
}
celery_app.conf.timezone = "UTC"

worker_registry = CollectorRegistry()
archive_job_runs_total = Counter(
    "archive_job_runs_total",
    "Scheduled archive sweeps run by the worker",
    ["outcome"],
    registry=worker_registry,
)


def _push_metrics():
    try:
        push_to_gateway(settings.pushgateway_url, job="rma-portal-worker", registry=worker_registry)
    except OSError as e:
        logger.warning("metrics push failed: %s", e)


def _ensure_tables():
    SQLModel.metadata.create_all(session_mod.engine)


@celery_app.task(name="archive_old_tickets")
def archive_old_tickets():
    _ensure_tables()
    started = datetime.now(timezone.utc)

    with Session(session_mod.engine) as session:
        try:
            count = run_archive_job(session, source="scheduler")
        except ArchiveJobError as e:
            archive_job_runs_total.labels(outcome="error").inc()
            _push_metrics()
            # no retry: the next scheduled run picks the tickets up
            return {"ok": False, "error": e.user_message, "started_at": started.isoformat()}

    archive_job_runs_total.labels(outcome="ok").inc()
    _push_metrics()
    return {"ok": True, "archived_count": count, "started_at": started.isoformat()}


@worker_ready.connect
def _archive_on_startup(**kwargs):
    if settings.archive_on_startup:
        celery_app.send_task("archive_old_tickets")
