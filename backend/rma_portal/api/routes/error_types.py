from fastapi import APIRouter, Depends
from sqlmodel import Session

from rma_portal.db.session import get_session
from rma_portal.schemas import ErrorTypeOut
from rma_portal.services.catalog import list_active_error_types

router = APIRouter(prefix="/error-types", tags=["error-types"])


@router.get("")
def error_types(session: Session = Depends(get_session)):
    return [ErrorTypeOut.model_validate(et).dump() for et in list_active_error_types(session)]
