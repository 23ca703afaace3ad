from typing import Callable

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlmodel import Session

from rma_portal.core.errors import (
    InvalidCustomerError,
    InvalidFormDataError,
    RmaGenerationError,
    TicketSubmissionError,
    TransitionBlocked,
    WizardStateError,
)
from rma_portal.db.session import get_session
from rma_portal.metrics.prometheus import customer_validations_total, wizard_transitions_total
from rma_portal.schemas import (
    CategoryRequest,
    CheckRequest,
    CustomerNumberRequest,
    ErrorSelectionRequest,
    ResolutionRequest,
    SubOptionRequest,
    TicketOut,
    WizardRequest,
    WizardUpdateRequest,
)
from rma_portal.services import activity
from rma_portal.services.catalog import get_error_type
from rma_portal.services.submission import submit_wizard
from rma_portal.services.tickets import get_customer
from rma_portal.wizard import machine
from rma_portal.wizard.state import ErrorChoice, Step, WizardState

router = APIRouter(prefix="/wizard", tags=["wizard"])


def _view(state: WizardState) -> dict:
    current, total = machine.progress(state)
    return {
        "state": state.model_dump(mode="json", by_alias=True),
        "step": state.step.value,
        "progress": {"current": current, "total": total},
        "customerValidation": machine.customer_validation_status(state.form).value,
        "canCreateTicket": machine.can_create_ticket(state.form),
    }


def _apply(fn: Callable[[], WizardState]) -> WizardState:
    try:
        return fn()
    except TransitionBlocked as e:
        raise HTTPException(
            status_code=422,
            detail={"message": e.user_message, "step": e.step, "missing": e.missing},
        )
    except InvalidFormDataError as e:
        raise HTTPException(status_code=422, detail={"message": e.user_message, "fields": e.fields})
    except WizardStateError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.post("/start")
def start():
    return _view(machine.start_session())


@router.post("/reset")
def reset():
    # abandoning a session persists nothing
    return _view(machine.reset())


@router.post("/update")
def update(body: WizardUpdateRequest):
    return _view(_apply(lambda: machine.update_form_data(body.state, body.updates)))


@router.post("/select-category")
def select_category(body: CategoryRequest):
    return _view(_apply(lambda: machine.select_category(body.state, body.category)))


@router.post("/select-error")
def select_error(body: ErrorSelectionRequest, session: Session = Depends(get_session)):
    error_type = get_error_type(session, body.error_id)
    if not error_type:
        raise HTTPException(status_code=404, detail="Error type not found")
    choice = ErrorChoice.from_error_type(error_type)
    return _view(_apply(lambda: machine.select_error(body.state, choice)))


@router.post("/select-sub-option")
def select_sub_option(body: SubOptionRequest):
    return _view(_apply(lambda: machine.select_sub_option(body.state, body.option_id)))


@router.post("/toggle-check")
def toggle_check(body: CheckRequest):
    return _view(_apply(lambda: machine.toggle_check(body.state, body.check_id)))


@router.post("/resolution")
def resolution(body: ResolutionRequest, request: Request, session: Session = Depends(get_session)):
    """Answer "did the troubleshooting help?" and move on accordingly."""
    answered = _apply(lambda: machine.record_resolution(body.state, body.resolved))
    state = _advance(answered)
    if state.step is Step.resolved:
        activity.log_resolved_via_tutorial(session, state.form.selected_error or "unknown", request=request)
    return _view(state)


@router.post("/customer-number")
def customer_number(body: CustomerNumberRequest, session: Session = Depends(get_session)):
    state = _apply(lambda: machine.enter_customer_number(body.state, body.customer_number))
    number = state.form.customer_number
    if not number:
        return _view(state)

    valid = get_customer(session, number) is not None
    customer_validations_total.labels(result="valid" if valid else "invalid").inc()
    return _view(machine.apply_validation_result(state, number, valid))


def _advance(state: WizardState) -> WizardState:
    new_state = _apply(lambda: machine.next_step(state))
    wizard_transitions_total.labels(from_step=state.step.value, to_step=new_state.step.value).inc()
    return new_state


@router.post("/next")
def next_step(body: WizardRequest):
    return _view(_advance(body.state))


@router.post("/back")
def back(body: WizardRequest):
    state = _apply(lambda: machine.previous_step(body.state))
    wizard_transitions_total.labels(from_step=body.state.step.value, to_step=state.step.value).inc()
    return _view(state)


@router.post("/submit")
def submit(body: WizardRequest, request: Request, session: Session = Depends(get_session)):
    try:
        result = submit_wizard(session, body.state, request=request)
    except TransitionBlocked as e:
        raise HTTPException(
            status_code=422,
            detail={"message": e.user_message, "step": e.step, "missing": e.missing},
        )
    except InvalidCustomerError as e:
        raise HTTPException(status_code=400, detail=e.user_message)
    except WizardStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except (RmaGenerationError, TicketSubmissionError) as e:
        raise HTTPException(status_code=503, detail=e.user_message)

    wizard_transitions_total.labels(from_step=Step.submit.value, to_step=result.state.step.value).inc()
    view = _view(result.state)
    view["ticket"] = TicketOut.model_validate(result.ticket).dump()
    view["documentUrl"] = f"/support-tickets/{result.ticket.rma_number}/document"
    return view
