"""Support wizard state machine.

States are immutable ``WizardState`` values. Every operation takes a state
and returns a new one; nothing here performs I/O. Step changes only happen
through ``fire``, which looks the move up in ``TRANSITIONS``.

Reset policy: picking a different category or a different error type clears
the branch-dependent answers (sub-option, troubleshooting checks,
troubleshooting outcome). Customer, shipping and contact data survive.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from pydantic import ValidationError

from rma_portal.core.errors import InvalidFormDataError, TransitionBlocked, WizardStateError
from rma_portal.wizard.state import (
    STEP_SEQUENCE,
    ErrorChoice,
    Event,
    Step,
    SupportFormData,
    ValidationStatus,
    WizardState,
)

Guard = Callable[[SupportFormData], list[str]]

BRANCH_RESET: dict[str, Any] = {
    "issue_scope": None,
    "specific_message": None,
    "troubleshooting_steps": {},
    "troubleshooting_completed": False,
    "problem_resolved": None,
}

ERROR_RESET: dict[str, Any] = {
    "selected_error": None,
    "error_title": None,
    "sub_option_ids": [],
    "sub_option_field": None,
    **BRANCH_RESET,
}

# Fields a step component may set through update_form_data. Everything else
# is owned by a dedicated operation below.
UPDATABLE_FIELDS = frozenset(
    {
        "restart_confirmed",
        "shipping_method",
        "return_address",
        "alternative_shipping",
        "alternative_address",
        "alternative_city",
        "alternative_zip",
        "contact_person",
        "contact_title",
        "contact_email",
        "display_number",
        "display_location",
        "additional_device_affected",
    }
)


# Guards return the names of unmet requirements; an empty list lets the
# transition through.


def _always(form: SupportFormData) -> list[str]:
    return []


def error_selection_missing(form: SupportFormData) -> list[str]:
    missing = []
    if not form.selected_error:
        missing.append("selected_error")
    if not form.restart_confirmed:
        missing.append("restart_confirmed")
    if form.sub_option_ids and not (form.issue_scope or form.specific_message):
        missing.append("sub_option")
    return missing


def _resolved(form: SupportFormData) -> list[str]:
    return [] if form.problem_resolved is True else ["problem_resolved"]


def _not_resolved(form: SupportFormData) -> list[str]:
    return [] if form.problem_resolved is False else ["problem_resolved"]


def customer_number_missing(form: SupportFormData) -> list[str]:
    if customer_validation_status(form) is ValidationStatus.valid:
        return []
    return ["customer_number"]


def shipping_missing(form: SupportFormData) -> list[str]:
    missing = []
    if not form.shipping_method:
        missing.append("shipping_method")
    if form.alternative_shipping:
        for name in ("alternative_address", "alternative_city", "alternative_zip"):
            if not getattr(form, name):
                missing.append(name)
    elif not form.return_address:
        missing.append("return_address")
    for name in ("contact_person", "contact_email"):
        if not getattr(form, name):
            missing.append(name)
    return missing


def _submittable(form: SupportFormData) -> list[str]:
    missing = [] if form.rma_number else ["rma_number"]
    return missing + ticket_requirements_missing(form)


@dataclass(frozen=True)
class Transition:
    source: Step
    event: Event
    guard: Guard
    target: Step


TRANSITIONS: tuple[Transition, ...] = (
    Transition(Step.error_selection, Event.next, error_selection_missing, Step.troubleshooting),
    Transition(Step.troubleshooting, Event.next, _resolved, Step.resolved),
    Transition(Step.troubleshooting, Event.next, _not_resolved, Step.customer_number),
    Transition(Step.customer_number, Event.next, customer_number_missing, Step.shipping),
    Transition(Step.shipping, Event.next, shipping_missing, Step.submit),
    Transition(Step.submit, Event.submitted, _submittable, Step.completed),
    Transition(Step.troubleshooting, Event.back, _always, Step.error_selection),
    Transition(Step.customer_number, Event.back, _always, Step.troubleshooting),
    Transition(Step.shipping, Event.back, _always, Step.customer_number),
    Transition(Step.submit, Event.back, _always, Step.shipping),
)


def start_session() -> WizardState:
    return WizardState()


def reset() -> WizardState:
    return start_session()


def fire(state: WizardState, event: Event) -> WizardState:
    candidates = [t for t in TRANSITIONS if t.source == state.step and t.event == event]
    if not candidates:
        raise WizardStateError(f"event {event.value!r} is not accepted in step {state.step.value!r}")

    missing: list[str] = []
    for t in candidates:
        unmet = t.guard(state.form)
        if not unmet:
            return state.at(t.target)
        missing.extend(m for m in unmet if m not in missing)
    raise TransitionBlocked(state.step.value, missing)


def next_step(state: WizardState) -> WizardState:
    return fire(state, Event.next)


def previous_step(state: WizardState) -> WizardState:
    return fire(state, Event.back)


def progress(state: WizardState) -> tuple[int, int]:
    """1-based position for the step indicator."""
    if state.is_terminal:
        return len(STEP_SEQUENCE), len(STEP_SEQUENCE)
    return STEP_SEQUENCE.index(state.step) + 1, len(STEP_SEQUENCE)


def _require_step(state: WizardState, *steps: Step) -> None:
    if state.step not in steps:
        allowed = ", ".join(s.value for s in steps)
        raise WizardStateError(f"not allowed in step {state.step.value!r} (expected {allowed})")


def _require_open(state: WizardState) -> None:
    if state.is_terminal:
        raise WizardStateError(f"session already finished in step {state.step.value!r}")


_ALIASES = {field.alias: name for name, field in SupportFormData.model_fields.items() if field.alias}


def update_form_data(state: WizardState, updates: dict[str, Any]) -> WizardState:
    """Merge a partial update from a step component into the form.

    Keys may be field names or their camelCase aliases. Fields not named in
    ``updates`` keep their current value.
    """
    _require_open(state)
    normalized = {_ALIASES.get(key, key): value for key, value in updates.items()}
    unknown = sorted(k for k in normalized if k not in UPDATABLE_FIELDS)
    if unknown:
        raise WizardStateError(f"fields cannot be updated directly: {', '.join(unknown)}")
    try:
        form = state.form.merge(normalized)
    except ValidationError as e:
        locs = {str(err["loc"][0]) for err in e.errors() if err.get("loc")}
        raise InvalidFormDataError(sorted(_ALIASES.get(loc, loc) for loc in locs)) from e
    return state.with_form(form)


def select_category(state: WizardState, category: str) -> WizardState:
    _require_step(state, Step.error_selection)
    if category == state.form.category:
        return state
    return state.with_form(state.form.merge({**ERROR_RESET, "category": category}))


def select_error(state: WizardState, choice: ErrorChoice) -> WizardState:
    _require_step(state, Step.error_selection)
    updates: dict[str, Any] = {
        "category": choice.category,
        "selected_error": choice.error_id,
        "error_title": choice.title,
        "sub_option_ids": list(choice.sub_option_ids),
        "sub_option_field": choice.sub_option_field if choice.sub_option_ids else None,
    }
    if choice.error_id != state.form.selected_error:
        updates.update(BRANCH_RESET)
    return state.with_form(state.form.merge(updates))


def select_sub_option(state: WizardState, option_id: str) -> WizardState:
    _require_step(state, Step.error_selection)
    form = state.form
    if not form.selected_error:
        raise WizardStateError("select an error type first")
    if option_id not in form.sub_option_ids:
        raise WizardStateError(f"unknown sub-option {option_id!r} for {form.selected_error!r}")
    field = form.sub_option_field or "issue_scope"
    other = "specific_message" if field == "issue_scope" else "issue_scope"
    return state.with_form(form.merge({field: option_id, other: None}))


def toggle_check(state: WizardState, check_id: str) -> WizardState:
    _require_step(state, Step.troubleshooting)
    steps = dict(state.form.troubleshooting_steps)
    steps[check_id] = not steps.get(check_id, False)
    return state.with_form(state.form.merge({"troubleshooting_steps": steps}))


def record_resolution(state: WizardState, resolved: bool) -> WizardState:
    _require_step(state, Step.troubleshooting)
    return state.with_form(
        state.form.merge({"troubleshooting_completed": True, "problem_resolved": bool(resolved)})
    )


def customer_validation_status(form: SupportFormData) -> ValidationStatus:
    if not form.customer_number:
        return ValidationStatus.idle
    if form.validated_customer_number == form.customer_number:
        return ValidationStatus.valid
    if form.rejected_customer_number == form.customer_number:
        return ValidationStatus.invalid
    return ValidationStatus.pending


def enter_customer_number(state: WizardState, value: str) -> WizardState:
    _require_step(state, Step.customer_number)
    return state.with_form(state.form.merge({"customer_number": value or None}))


def apply_validation_result(state: WizardState, customer_number: str, valid: bool) -> WizardState:
    """Record a lookup result, unless the input has changed since it was sent."""
    _require_open(state)
    if customer_number != state.form.customer_number:
        return state
    if valid:
        updates = {"validated_customer_number": customer_number, "rejected_customer_number": None}
    else:
        updates = {"validated_customer_number": None, "rejected_customer_number": customer_number}
    return state.with_form(state.form.merge(updates))


def ticket_requirements_missing(form: SupportFormData) -> list[str]:
    missing = error_selection_missing(form)
    missing += _not_resolved(form)
    missing += customer_number_missing(form)
    missing += shipping_missing(form)
    return missing


def can_create_ticket(form: SupportFormData) -> bool:
    return not ticket_requirements_missing(form)


def mark_submitted(state: WizardState, rma_number: str) -> WizardState:
    _require_step(state, Step.submit)
    return fire(state.with_form(state.form.merge({"rma_number": rma_number})), Event.submitted)


def build_ticket_payload(form: SupportFormData, rma_number: str) -> dict[str, Any]:
    missing = ticket_requirements_missing(form)
    if missing:
        raise TransitionBlocked(Step.submit.value, missing)
    return {
        "rma_number": rma_number,
        "customer_number": form.customer_number,
        "error_category": form.category,
        "error_type": form.selected_error,
        "issue_scope": form.issue_scope,
        "specific_message": form.specific_message,
        "troubleshooting_steps": dict(form.troubleshooting_steps),
        "restart_confirmed": form.restart_confirmed,
        "shipping_method": form.shipping_method,
        "return_address": form.return_address,
        "alternative_shipping": form.alternative_shipping,
        "alternative_address": form.alternative_address,
        "alternative_city": form.alternative_city,
        "alternative_zip": form.alternative_zip,
        "contact_person": form.contact_person,
        "contact_title": form.contact_title,
        "contact_email": form.contact_email,
        "display_number": form.display_number,
        "display_location": form.display_location,
        "additional_device_affected": form.additional_device_affected,
    }
