from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from rma_portal.core.errors import RmaGenerationError
from rma_portal.db.session import get_session
from rma_portal.services.rma import generate_rma_number

router = APIRouter(prefix="/rma", tags=["rma"])


@router.post("/generate")
def generate(session: Session = Depends(get_session)):
    try:
        rma_number = generate_rma_number(session)
    except RmaGenerationError as e:
        raise HTTPException(status_code=503, detail=e.user_message)
    return {"rmaNumber": rma_number}
