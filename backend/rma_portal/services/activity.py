"""Append-only activity log.

Every writer goes through ``log_activity``. A failing log write never breaks
the flow that triggered it: the session is rolled back and the failure is
reported through the application logger instead.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import Request
from sqlmodel import Session, select

from rma_portal.models.activity_log import ActivityLog

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _request_info(request: Optional[Request]) -> dict[str, Optional[str]]:
    if request is None:
        return {"ip_address": None, "user_agent": None}
    return {
        "ip_address": request.client.host if request.client else None,
        "user_agent": request.headers.get("user-agent"),
    }


def log_activity(
    session: Session,
    activity_type: str,
    user_type: str,
    description: str,
    *,
    user_id: Optional[str] = None,
    entity_type: Optional[str] = None,
    entity_id: Optional[str] = None,
    metadata: Optional[dict[str, Any]] = None,
    request: Optional[Request] = None,
) -> Optional[ActivityLog]:
    entry = ActivityLog(
        activity_type=activity_type,
        user_type=user_type,
        user_id=user_id,
        description=description,
        entity_type=entity_type,
        entity_id=entity_id,
        meta=metadata,
        timestamp=_now(),
        **_request_info(request),
    )
    try:
        session.add(entry)
        session.commit()
        session.refresh(entry)
    except Exception:
        session.rollback()
        logger.exception("failed to write activity log entry type=%s", activity_type)
        return None
    logger.info("[activity] %s: %s", activity_type, description)
    return entry


def list_activity(
    session: Session,
    *,
    limit: int = 100,
    offset: int = 0,
    activity_type: Optional[str] = None,
    user_type: Optional[str] = None,
    user_id: Optional[str] = None,
    entity_type: Optional[str] = None,
    entity_id: Optional[str] = None,
) -> list[ActivityLog]:
    q = select(ActivityLog).order_by(ActivityLog.timestamp.desc())
    if activity_type:
        q = q.where(ActivityLog.activity_type == activity_type)
    if user_type and user_id:
        q = q.where(ActivityLog.user_type == user_type, ActivityLog.user_id == user_id)
    if entity_type and entity_id:
        q = q.where(ActivityLog.entity_type == entity_type, ActivityLog.entity_id == entity_id)
    return list(session.exec(q.offset(offset).limit(limit)).all())


# Convenience writers for the recurring events


def log_ticket_created(session: Session, rma_number: str, customer_number: str, error_type: str, request=None):
    return log_activity(
        session,
        "ticket_created",
        "customer",
        f'New support ticket {rma_number} for error type "{error_type}"',
        user_id=customer_number,
        entity_type="ticket",
        entity_id=rma_number,
        metadata={"errorType": error_type, "customerNumber": customer_number},
        request=request,
    )


def log_resolved_via_tutorial(session: Session, error_type: str, request=None):
    return log_activity(
        session,
        "resolved_via_tutorial",
        "customer",
        f'Problem "{error_type}" resolved via troubleshooting tutorial',
        entity_type="error_type",
        entity_id=error_type,
        metadata={"errorType": error_type},
        request=request,
    )


def log_status_changed(session: Session, rma_number: str, old: str, new: str, admin_user: str, request=None):
    return log_activity(
        session,
        "status_changed",
        "admin",
        f'Ticket status changed from "{old}" to "{new}" for RMA {rma_number}',
        user_id=admin_user,
        entity_type="ticket",
        entity_id=rma_number,
        metadata={"oldStatus": old, "newStatus": new, "rmaNumber": rma_number},
        request=request,
    )


def log_customer_validated(session: Session, customer_number: str, request=None):
    return log_activity(
        session,
        "customer_validated",
        "customer",
        f"Customer number validated: {customer_number}",
        user_id=customer_number,
        entity_type="customer",
        entity_id=customer_number,
        request=request,
    )


def log_customer_created(session: Session, customer_number: str, admin_user: str, request=None):
    return log_activity(
        session,
        "customer_created",
        "admin",
        f"Customer created: {customer_number}",
        user_id=admin_user,
        entity_type="customer",
        entity_id=customer_number,
        request=request,
    )


def log_error_type_changed(session: Session, action: str, title: str, admin_user: str, request=None):
    # action: created/updated/deleted
    return log_activity(
        session,
        f"error_type_{action}",
        "admin",
        f'Error type {action}: "{title}"',
        user_id=admin_user,
        entity_type="error_type",
        entity_id=title,
        request=request,
    )


def log_tickets_archived(session: Session, count: int, source: str):
    return log_activity(
        session,
        "tickets_archived",
        "system",
        f"Auto-archiving moved {count} ticket(s) to the archive",
        user_id="system",
        metadata={"archivedCount": count, "source": source, "timestamp": _now().isoformat()},
    )


def log_system_error(session: Session, error: str, context: Optional[str] = None):
    return log_activity(
        session,
        "system_error",
        "system",
        f"System error: {error}",
        user_id="system",
        metadata={"error": error, "context": context, "timestamp": _now().isoformat()},
    )
