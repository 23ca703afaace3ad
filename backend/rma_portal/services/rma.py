import logging
import secrets
import time
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from rma_portal.core.config import settings
from rma_portal.core.errors import RmaGenerationError
from rma_portal.metrics.prometheus import rma_generation_latency_seconds
from rma_portal.models.rma_number import IssuedRmaNumber
from rma_portal.models.ticket import Ticket

logger = logging.getLogger(__name__)


def _candidate(now: datetime) -> str:
    return f"{settings.rma_prefix}-{now.year}-{100000 + secrets.randbelow(900000)}"


def _taken(session: Session, rma_number: str) -> bool:
    issued = session.exec(select(IssuedRmaNumber).where(IssuedRmaNumber.rma_number == rma_number)).first()
    if issued:
        return True
    return session.exec(select(Ticket.id).where(Ticket.rma_number == rma_number)).first() is not None


def generate_rma_number(session: Session, now: Optional[datetime] = None) -> str:
    """Issue an RMA number no ticket or earlier call has used.

    Every issued number is recorded, so two calls never return the same value
    even when neither has been turned into a ticket yet.
    """
    start = time.perf_counter()
    now = now or datetime.now(timezone.utc)

    for attempt in range(1, settings.rma_max_attempts + 1):
        rma_number = _candidate(now)
        if _taken(session, rma_number):
            logger.debug("rma collision on %s (attempt %d)", rma_number, attempt)
            continue
        session.add(IssuedRmaNumber(rma_number=rma_number, issued_at=now))
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            logger.debug("rma %s issued concurrently (attempt %d)", rma_number, attempt)
            continue
        rma_generation_latency_seconds.observe(time.perf_counter() - start)
        return rma_number

    raise RmaGenerationError()
