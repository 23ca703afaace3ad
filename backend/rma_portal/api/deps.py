from typing import Optional

from fastapi import Header, HTTPException

from rma_portal.core.config import settings


def require_admin_key(
    x_admin_key: Optional[str] = Header(default=None),
    x_admin_user: Optional[str] = Header(default=None),
) -> str:
    if not x_admin_key or x_admin_key != settings.admin_api_key:
        raise HTTPException(status_code=401, detail="Invalid admin key")
    return x_admin_user or "admin"
