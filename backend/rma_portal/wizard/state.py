from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Step(str, Enum):
    error_selection = "error-selection"
    troubleshooting = "troubleshooting"
    customer_number = "customer-number"
    shipping = "shipping"
    submit = "submit"
    resolved = "resolved"
    completed = "completed"


class Event(str, Enum):
    next = "next"
    back = "back"
    submitted = "submitted"


class ValidationStatus(str, Enum):
    idle = "idle"
    pending = "pending"
    valid = "valid"
    invalid = "invalid"


TERMINAL_STEPS = frozenset({Step.resolved, Step.completed})

# Order shown in the step indicator; terminal steps are not part of it.
STEP_SEQUENCE = (
    Step.error_selection,
    Step.troubleshooting,
    Step.customer_number,
    Step.shipping,
    Step.submit,
)


class _Frozen(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )


class ErrorChoice(_Frozen):
    """The part of a catalog entry the wizard needs when an error is picked."""

    error_id: str
    title: str
    category: str
    sub_option_ids: list[str] = Field(default_factory=list)
    sub_option_field: str = "issue_scope"

    @classmethod
    def from_error_type(cls, error_type: Any) -> "ErrorChoice":
        return cls(
            error_id=error_type.error_id,
            title=error_type.title,
            category=error_type.category,
            sub_option_ids=[str(o.get("id")) for o in (error_type.sub_options or []) if o.get("id")],
            sub_option_field=error_type.sub_option_field or "issue_scope",
        )


class SupportFormData(_Frozen):
    # error selection
    category: Optional[str] = None
    selected_error: Optional[str] = None
    error_title: Optional[str] = None
    sub_option_ids: list[str] = Field(default_factory=list)
    sub_option_field: Optional[str] = None
    issue_scope: Optional[str] = None
    specific_message: Optional[str] = None
    restart_confirmed: bool = False

    # troubleshooting
    troubleshooting_steps: dict[str, bool] = Field(default_factory=dict)
    troubleshooting_completed: bool = False
    problem_resolved: Optional[bool] = None

    # customer number; the two keys record which exact input a lookup answered
    customer_number: Optional[str] = None
    validated_customer_number: Optional[str] = None
    rejected_customer_number: Optional[str] = None

    # shipping / contact
    shipping_method: Optional[str] = None
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

    rma_number: Optional[str] = None

    def merge(self, updates: dict[str, Any]) -> "SupportFormData":
        """Overlay ``updates`` (keyed by field name) onto a validated copy."""
        data = self.model_dump()
        data.update(updates)
        return type(self).model_validate(data)


class WizardState(_Frozen):
    step: Step = Step.error_selection
    form: SupportFormData = Field(default_factory=SupportFormData)

    @property
    def is_terminal(self) -> bool:
        return self.step in TERMINAL_STEPS

    def with_form(self, form: SupportFormData) -> "WizardState":
        return self.model_copy(update={"form": form})

    def at(self, step: Step) -> "WizardState":
        return self.model_copy(update={"step": step})
