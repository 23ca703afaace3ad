from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Header
from fastapi.responses import JSONResponse
from sqlmodel import Session

from rma_portal.core.config import settings
from rma_portal.core.errors import ArchiveJobError
from rma_portal.db.session import get_session
from rma_portal.services.archiver import run_archive_job

router = APIRouter(prefix="/cron", tags=["cron"])


def _authorized(authorization: Optional[str]) -> bool:
    return bool(settings.cron_secret) and authorization == f"Bearer {settings.cron_secret}"


@router.api_route("/archive", methods=["GET", "POST"])
def archive(
    session: Session = Depends(get_session),
    authorization: Optional[str] = Header(default=None),
):
    # reject before touching the store
    if not _authorized(authorization):
        return JSONResponse(status_code=401, content={"error": "Unauthorized"})

    try:
        archived_count = run_archive_job(session, source="cron")
    except ArchiveJobError as e:
        return JSONResponse(status_code=500, content={"success": False, "error": e.user_message})

    return {
        "success": True,
        "archivedCount": archived_count,
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    }
