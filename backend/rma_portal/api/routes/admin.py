import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from rma_portal.api.deps import require_admin_key
from rma_portal.core.errors import ArchiveJobError, TicketNotFoundError
from rma_portal.db.session import get_session
from rma_portal.schemas import (
    ActivityLogOut,
    CustomerCreate,
    CustomerOut,
    ErrorTypeCreate,
    ErrorTypeOut,
    ErrorTypeUpdate,
    StatusUpdate,
    TicketOut,
)
from rma_portal.services import activity, catalog
from rma_portal.services.archiver import run_archive_job
from rma_portal.services.tickets import (
    create_customer,
    get_customer,
    list_active_tickets,
    list_archived_tickets,
    update_workflow_status,
)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/tickets")
def active_tickets(session: Session = Depends(get_session), admin: str = Depends(require_admin_key)):
    return {"tickets": [TicketOut.model_validate(t).dump() for t in list_active_tickets(session)]}


@router.get("/tickets/archived")
def archived_tickets(session: Session = Depends(get_session), admin: str = Depends(require_admin_key)):
    return {"tickets": [TicketOut.model_validate(t).dump() for t in list_archived_tickets(session)]}


@router.post("/tickets/archive")
def archive_now(session: Session = Depends(get_session), admin: str = Depends(require_admin_key)):
    try:
        archived_count = run_archive_job(session, source="admin")
    except ArchiveJobError as e:
        raise HTTPException(status_code=500, detail=e.user_message)
    return {"archivedCount": archived_count}


@router.patch("/tickets/{rma_number}/status")
def update_status(
    rma_number: str,
    body: StatusUpdate,
    request: Request,
    session: Session = Depends(get_session),
    admin: str = Depends(require_admin_key),
):
    try:
        ticket = update_workflow_status(
            session,
            rma_number,
            body.status.value,
            admin,
            status_details=body.status_details,
            tracking_number=body.tracking_number,
            request=request,
        )
    except TicketNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.user_message)
    return TicketOut.model_validate(ticket).dump()


@router.get("/logs")
def logs(
    session: Session = Depends(get_session),
    admin: str = Depends(require_admin_key),
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    type: Optional[str] = Query(default=None),
    user_type: Optional[str] = Query(default=None, alias="userType"),
    user_id: Optional[str] = Query(default=None, alias="userId"),
    entity_type: Optional[str] = Query(default=None, alias="entityType"),
    entity_id: Optional[str] = Query(default=None, alias="entityId"),
):
    entries = activity.list_activity(
        session,
        limit=limit,
        offset=offset,
        activity_type=type,
        user_type=user_type,
        user_id=user_id,
        entity_type=entity_type,
        entity_id=entity_id,
    )
    return {"logs": [ActivityLogOut.model_validate(e).dump() for e in entries]}


@router.post("/error-types")
def create_error_type(
    body: ErrorTypeCreate,
    request: Request,
    session: Session = Depends(get_session),
    admin: str = Depends(require_admin_key),
):
    try:
        error_type = catalog.create_error_type(session, body.model_dump())
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=409, detail="Error type id already exists")
    activity.log_error_type_changed(session, "created", error_type.title, admin, request=request)
    return ErrorTypeOut.model_validate(error_type).dump()


@router.put("/error-types/{id}")
def update_error_type(
    id: uuid.UUID,
    body: ErrorTypeUpdate,
    request: Request,
    session: Session = Depends(get_session),
    admin: str = Depends(require_admin_key),
):
    error_type = catalog.update_error_type(session, id, body.model_dump(exclude_unset=True))
    if not error_type:
        raise HTTPException(status_code=404, detail="Error type not found")
    activity.log_error_type_changed(session, "updated", error_type.title, admin, request=request)
    return ErrorTypeOut.model_validate(error_type).dump()


@router.delete("/error-types/{id}")
def delete_error_type(
    id: uuid.UUID,
    request: Request,
    session: Session = Depends(get_session),
    admin: str = Depends(require_admin_key),
):
    title = catalog.delete_error_type(session, id)
    if title is None:
        raise HTTPException(status_code=404, detail="Error type not found")
    activity.log_error_type_changed(session, "deleted", title, admin, request=request)
    return {"success": True}


@router.post("/customers", status_code=201)
def create_customer_route(
    body: CustomerCreate,
    request: Request,
    session: Session = Depends(get_session),
    admin: str = Depends(require_admin_key),
):
    if get_customer(session, body.customer_number):
        raise HTTPException(status_code=409, detail="Customer number already exists")
    customer = create_customer(session, body.customer_number, name=body.name, email=body.email)
    activity.log_customer_created(session, customer.customer_number, admin, request=request)
    return CustomerOut.model_validate(customer).dump()
