import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import Column
from sqlmodel import Field, SQLModel

from rma_portal.models.types import JsonB


class ActivityLog(SQLModel, table=True):
    __tablename__ = "activity_logs"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, index=True)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), index=True)

    activity_type: str = Field(index=True)  # ticket_created/status_changed/tickets_archived/system_error/...
    user_type: str = Field(index=True)  # system/customer/admin
    user_id: Optional[str] = Field(default=None, index=True)
    description: str

    entity_type: Optional[str] = Field(default=None, index=True)
    entity_id: Optional[str] = Field(default=None, index=True)
    # "metadata" is reserved on SQLModel classes
    meta: Any = Field(default=None, sa_column=Column("metadata", JsonB, nullable=True))

    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
