import logging
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from rma_portal.core.errors import DuplicateRmaError, InvalidCustomerError, TicketNotFoundError
from rma_portal.metrics.prometheus import tickets_created_total
from rma_portal.models.customer import Customer
from rma_portal.models.ticket import Ticket, TicketStatus
from rma_portal.services import activity

logger = logging.getLogger(__name__)


def get_customer(session: Session, customer_number: str) -> Optional[Customer]:
    return session.exec(select(Customer).where(Customer.customer_number == customer_number)).first()


def create_customer(session: Session, customer_number: str, name: Optional[str] = None, email: Optional[str] = None) -> Customer:
    customer = Customer(customer_number=customer_number, name=name, email=email)
    session.add(customer)
    session.commit()
    session.refresh(customer)
    return customer


def create_ticket(session: Session, payload: dict[str, Any], request=None) -> Ticket:
    """Persist a ticket in a single commit; nothing is written on failure."""
    customer_number = payload.get("customer_number") or ""
    if not get_customer(session, customer_number):
        raise InvalidCustomerError()

    now = datetime.now(timezone.utc)
    ticket = Ticket(
        **payload,
        status=TicketStatus.active.value,
        created_at=now,
        updated_at=now,
    )
    session.add(ticket)
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        raise DuplicateRmaError() from e
    session.refresh(ticket)

    tickets_created_total.labels(category=ticket.error_category or "unknown").inc()
    logger.info(
        "ticket %s created for customer %s",
        ticket.rma_number,
        ticket.customer_number,
        extra={"rma_number": ticket.rma_number, "customer_number": ticket.customer_number},
    )
    activity.log_ticket_created(session, ticket.rma_number, ticket.customer_number, ticket.error_type, request=request)
    return ticket


def get_ticket(session: Session, rma_number: str) -> Ticket:
    ticket = session.exec(select(Ticket).where(Ticket.rma_number == rma_number)).first()
    if not ticket:
        raise TicketNotFoundError()
    return ticket


def list_active_tickets(session: Session) -> list[Ticket]:
    q = select(Ticket).where(Ticket.status == TicketStatus.active.value).order_by(Ticket.created_at)
    return list(session.exec(q).all())


def list_archived_tickets(session: Session) -> list[Ticket]:
    q = select(Ticket).where(Ticket.status == TicketStatus.archived.value).order_by(Ticket.archived_at)
    return list(session.exec(q).all())


def update_workflow_status(
    session: Session,
    rma_number: str,
    workflow_status: str,
    admin_user: str,
    status_details: Optional[str] = None,
    tracking_number: Optional[str] = None,
    request=None,
) -> Ticket:
    ticket = get_ticket(session, rma_number)
    old = ticket.workflow_status

    ticket.workflow_status = workflow_status
    ticket.status_details = status_details
    ticket.tracking_number = tracking_number
    ticket.updated_at = datetime.now(timezone.utc)
    session.add(ticket)
    session.commit()
    session.refresh(ticket)

    if old != workflow_status:
        activity.log_status_changed(session, rma_number, old, workflow_status, admin_user, request=request)
    return ticket
