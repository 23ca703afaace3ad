import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import Column
from sqlmodel import Field, SQLModel

from rma_portal.models.types import JsonB


class ErrorType(SQLModel, table=True):
    __tablename__ = "error_types"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, index=True)
    error_id: str = Field(unique=True, index=True)
    title: str
    description: str
    category: str = Field(index=True)  # hardware/software/network
    icon_name: str = "AlertTriangle"

    video_url: Optional[str] = None
    video_enabled: bool = False
    instructions: Optional[str] = None

    # [{"id": ..., "label": ...}]; chosen id lands in sub_option_field
    sub_options: Any = Field(default_factory=list, sa_column=Column(JsonB, nullable=False))
    sub_option_field: str = "issue_scope"  # issue_scope/specific_message
    required_checks: Any = Field(default_factory=list, sa_column=Column(JsonB, nullable=False))

    is_active: bool = Field(default=True, index=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), index=True)
