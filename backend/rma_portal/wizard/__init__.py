from rma_portal.wizard.machine import (
    TRANSITIONS,
    apply_validation_result,
    build_ticket_payload,
    can_create_ticket,
    customer_validation_status,
    enter_customer_number,
    fire,
    mark_submitted,
    next_step,
    previous_step,
    progress,
    record_resolution,
    reset,
    select_category,
    select_error,
    select_sub_option,
    start_session,
    toggle_check,
    update_form_data,
)
from rma_portal.wizard.state import ErrorChoice, Event, Step, SupportFormData, ValidationStatus, WizardState

__all__ = [
    "TRANSITIONS",
    "ErrorChoice",
    "Event",
    "Step",
    "SupportFormData",
    "ValidationStatus",
    "WizardState",
    "apply_validation_result",
    "build_ticket_payload",
    "can_create_ticket",
    "customer_validation_status",
    "enter_customer_number",
    "fire",
    "mark_submitted",
    "next_step",
    "previous_step",
    "progress",
    "record_resolution",
    "reset",
    "select_category",
    "select_error",
    "select_sub_option",
    "start_session",
    "toggle_check",
    "update_form_data",
]
