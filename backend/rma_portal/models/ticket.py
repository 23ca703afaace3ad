import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from sqlalchemy import Column
from sqlmodel import Field, SQLModel

from rma_portal.models.types import JsonB


class TicketStatus(str, Enum):
    active = "active"
    archived = "archived"


class WorkflowStatus(str, Enum):
    pending = "pending"
    workshop = "workshop"
    shipped = "shipped"


class Ticket(SQLModel, table=True):
    __tablename__ = "support_tickets"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, index=True)
    rma_number: str = Field(unique=True, index=True)
    customer_number: str = Field(index=True)

    error_category: Optional[str] = Field(default=None, index=True)  # hardware/software/network
    error_type: str = Field(index=True)
    issue_scope: Optional[str] = None
    specific_message: Optional[str] = None
    troubleshooting_steps: Any = Field(default_factory=dict, sa_column=Column(JsonB, nullable=False))
    restart_confirmed: bool = False

    shipping_method: str
    return_address: Optional[str] = None
    alternative_shipping: bool = False
    alternative_address: Optional[str] = None
    alternative_city: Optional[str] = None
    alternative_zip: Optional[str] = None

    contact_person: Optional[str] = None
    contact_title: Optional[str] = None
    contact_email: Optional[str] = None
    display_number: Optional[str] = None
    display_location: Optional[str] = None
    additional_device_affected: bool = False

    status: str = Field(default=TicketStatus.active.value, index=True)  # active/archived
    archived_at: Optional[datetime] = Field(default=None, index=True)

    workflow_status: str = Field(default=WorkflowStatus.pending.value, index=True)  # pending/workshop/shipped
    status_details: Optional[str] = None
    tracking_number: Optional[str] = None

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), index=True)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), index=True)

    def shipping_address(self) -> str:
        if self.alternative_shipping and self.alternative_address:
            city_line = " ".join(p for p in (self.alternative_zip, self.alternative_city) if p)
            return "\n".join(p for p in (self.alternative_address, city_line) if p)
        return self.return_address or ""
