from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlmodel import Session

from rma_portal.core.errors import DuplicateRmaError, InvalidCustomerError, TicketNotFoundError
from rma_portal.db.session import get_session
from rma_portal.schemas import TicketCreate, TicketOut, TrackingOut
from rma_portal.services.catalog import get_error_type
from rma_portal.services.documents import ConfirmationData, confirmation_filename, render_confirmation_pdf
from rma_portal.services.tickets import create_ticket, get_ticket

router = APIRouter(tags=["tickets"])


def _load(session: Session, rma_number: str):
    try:
        return get_ticket(session, rma_number)
    except TicketNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.user_message)


@router.post("/support-tickets")
def create_support_ticket(body: TicketCreate, request: Request, session: Session = Depends(get_session)):
    try:
        ticket = create_ticket(session, body.model_dump(), request=request)
    except InvalidCustomerError as e:
        raise HTTPException(status_code=400, detail=e.user_message)
    except DuplicateRmaError as e:
        raise HTTPException(status_code=409, detail=e.user_message)
    return TicketOut.model_validate(ticket).dump()


@router.get("/support-tickets/{rma_number}")
def get_support_ticket(rma_number: str, session: Session = Depends(get_session)):
    return TicketOut.model_validate(_load(session, rma_number)).dump()


@router.get("/support-tickets/{rma_number}/document")
def download_document(rma_number: str, session: Session = Depends(get_session)):
    ticket = _load(session, rma_number)
    error_type = get_error_type(session, ticket.error_type, active_only=False)
    data = ConfirmationData.from_ticket(ticket, error_title=error_type.title if error_type else None)

    pdf = render_confirmation_pdf(data, generated_at=datetime.now(timezone.utc))
    filename = confirmation_filename(ticket.rma_number)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/track/{rma_number}")
def track(rma_number: str, session: Session = Depends(get_session)):
    return TrackingOut.model_validate(_load(session, rma_number)).dump()
