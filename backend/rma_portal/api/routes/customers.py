from fastapi import APIRouter, Depends, Request
from sqlmodel import Session

from rma_portal.db.session import get_session
from rma_portal.metrics.prometheus import customer_validations_total
from rma_portal.schemas import CustomerOut
from rma_portal.services import activity
from rma_portal.services.tickets import get_customer

router = APIRouter(prefix="/customers", tags=["customers"])


@router.get("/{customer_number}/validate")
def validate_customer(customer_number: str, request: Request, session: Session = Depends(get_session)):
    customer = get_customer(session, customer_number)
    if not customer:
        customer_validations_total.labels(result="invalid").inc()
        return {"valid": False}

    customer_validations_total.labels(result="valid").inc()
    activity.log_customer_validated(session, customer_number, request=request)
    return {"valid": True, "customer": CustomerOut.model_validate(customer).dump()}
