import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from rma_portal.core.errors import DuplicateRmaError, TransitionBlocked, TicketSubmissionError, WizardStateError
from rma_portal.models.ticket import Ticket
from rma_portal.services.rma import generate_rma_number
from rma_portal.services.tickets import create_ticket
from rma_portal.wizard import machine
from rma_portal.wizard.state import Step, WizardState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubmissionResult:
    ticket: Ticket
    state: WizardState


def submit_wizard(session: Session, state: WizardState, request=None) -> SubmissionResult:
    """Turn a wizard session sitting on the submit step into a ticket.

    A fresh RMA number is issued on every call, so a retried submission never
    reuses the number of a failed attempt.
    """
    if state.step is not Step.submit:
        raise WizardStateError(f"cannot submit from step {state.step.value!r}")
    missing = machine.ticket_requirements_missing(state.form)
    if missing:
        raise TransitionBlocked(state.step.value, missing)

    try:
        rma_number = generate_rma_number(session)
        payload = machine.build_ticket_payload(state.form, rma_number)
        ticket = create_ticket(session, payload, request=request)
    except SQLAlchemyError as e:
        session.rollback()
        logger.exception("ticket submission failed")
        raise TicketSubmissionError() from e
    except DuplicateRmaError as e:
        # the number was taken between issuing and insert; a retry gets a new one
        logger.warning("rma number collided on insert, submission not persisted")
        raise TicketSubmissionError() from e

    return SubmissionResult(ticket=ticket, state=machine.mark_submitted(state, rma_number))
