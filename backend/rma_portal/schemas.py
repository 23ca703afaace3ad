"""Request/response bodies. JSON on the wire is camelCase."""

import uuid
from datetime import datetime
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from rma_portal.models.ticket import WorkflowStatus
from rma_portal.wizard.state import WizardState


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    def dump(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class TicketCreate(CamelModel):
    model_config = ConfigDict(extra="forbid")

    rma_number: str = Field(min_length=1)
    customer_number: str = Field(min_length=1)
    error_category: Optional[str] = None
    error_type: str = Field(min_length=1)
    issue_scope: Optional[str] = None
    specific_message: Optional[str] = None
    troubleshooting_steps: dict[str, bool] = Field(default_factory=dict)
    restart_confirmed: bool = False

    shipping_method: str = Field(min_length=1)
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


class TicketOut(TicketCreate):
    model_config = ConfigDict(extra="ignore")

    id: uuid.UUID
    status: str
    archived_at: Optional[datetime] = None
    workflow_status: str
    status_details: Optional[str] = None
    tracking_number: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class TrackingOut(CamelModel):
    rma_number: str
    customer_number: str
    display_number: Optional[str] = None
    display_location: Optional[str] = None
    error_type: str
    shipping_method: str
    status: str
    workflow_status: str
    status_details: Optional[str] = None
    tracking_number: Optional[str] = None
    created_at: datetime


class StatusUpdate(CamelModel):
    status: WorkflowStatus
    status_details: Optional[str] = None
    tracking_number: Optional[str] = None


class CustomerCreate(CamelModel):
    customer_number: str = Field(min_length=1)
    name: Optional[str] = None
    email: Optional[str] = None


class CustomerOut(CamelModel):
    customer_number: str
    name: Optional[str] = None
    email: Optional[str] = None


class SubOption(CamelModel):
    id: str
    label: str


class ErrorTypeCreate(CamelModel):
    error_id: str = Field(min_length=1)
    title: str = Field(min_length=1)
    description: str
    category: str
    icon_name: str = "AlertTriangle"
    video_url: Optional[str] = None
    video_enabled: bool = False
    instructions: Optional[str] = None
    sub_options: list[SubOption] = Field(default_factory=list)
    sub_option_field: str = Field(default="issue_scope", pattern="^(issue_scope|specific_message)$")
    required_checks: list[str] = Field(default_factory=list)
    is_active: bool = True


class ErrorTypeUpdate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    icon_name: Optional[str] = None
    video_url: Optional[str] = None
    video_enabled: Optional[bool] = None
    instructions: Optional[str] = None
    sub_options: Optional[list[SubOption]] = None
    sub_option_field: Optional[str] = Field(default=None, pattern="^(issue_scope|specific_message)$")
    required_checks: Optional[list[str]] = None
    is_active: Optional[bool] = None


class ErrorTypeOut(ErrorTypeCreate):
    id: uuid.UUID


class ActivityLogOut(CamelModel):
    id: uuid.UUID
    timestamp: datetime
    activity_type: str
    user_type: str
    user_id: Optional[str] = None
    description: str
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    metadata: Any = Field(default=None, validation_alias=AliasChoices("meta", "metadata"))
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


# Wizard bodies: the session state travels with every request.


class WizardRequest(CamelModel):
    state: WizardState


class WizardUpdateRequest(WizardRequest):
    updates: dict[str, Any]


class CategoryRequest(WizardRequest):
    category: str


class ErrorSelectionRequest(WizardRequest):
    error_id: str


class SubOptionRequest(WizardRequest):
    option_id: str


class CheckRequest(WizardRequest):
    check_id: str


class ResolutionRequest(WizardRequest):
    resolved: bool


class CustomerNumberRequest(WizardRequest):
    customer_number: str
