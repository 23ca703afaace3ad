import asyncio

import httpx
import pytest

from rma_portal.client import PortalClient
from rma_portal.wizard import machine
from rma_portal.wizard.state import Step, SupportFormData, ValidationStatus, WizardState
from rma_portal.wizard.validation import DebouncedCustomerValidator

KNOWN = {"KD100"}


def _customer_step(number=None):
    return WizardState(step=Step.customer_number, form=SupportFormData(customer_number=number))


class FakeLookup:
    def __init__(self, delay=0.0):
        self.calls = []
        self.delay = delay

    async def __call__(self, value):
        self.calls.append(value)
        await asyncio.sleep(self.delay)
        return value in KNOWN


@pytest.mark.asyncio
async def test_only_latest_input_is_looked_up():
    lookup = FakeLookup()
    validator = DebouncedCustomerValidator(lookup, debounce_seconds=0.05)

    for value in ("K", "KD", "KD1", "KD10", "KD100"):
        validator.submit(value)

    outcome = await validator.settle()
    assert lookup.calls == ["KD100"]
    assert outcome.customer_number == "KD100"
    assert outcome.valid is True


@pytest.mark.asyncio
async def test_in_flight_lookup_is_dropped_when_input_changes():
    lookup = FakeLookup(delay=0.1)
    validator = DebouncedCustomerValidator(lookup, debounce_seconds=0.01)

    validator.submit("KD100")
    await asyncio.sleep(0.05)
    assert lookup.calls == ["KD100"]

    validator.submit("KD1000")
    outcome = await validator.settle()
    assert outcome.customer_number == "KD1000"
    assert outcome.valid is False

    state = outcome.apply(_customer_step("KD1000"))
    assert machine.customer_validation_status(state.form) is ValidationStatus.invalid


@pytest.mark.asyncio
async def test_outcome_for_old_input_does_not_change_state():
    lookup = FakeLookup()
    validator = DebouncedCustomerValidator(lookup, debounce_seconds=0)

    validator.submit("KD100")
    outcome = await validator.settle()

    state = outcome.apply(_customer_step("KD1001"))
    assert machine.customer_validation_status(state.form) is ValidationStatus.pending


@pytest.mark.asyncio
async def test_clearing_the_field_cancels_pending_lookup():
    lookup = FakeLookup()
    validator = DebouncedCustomerValidator(lookup, debounce_seconds=0.05)

    validator.submit("KD100")
    validator.submit("")
    assert await validator.settle() is None
    await asyncio.sleep(0.1)
    assert lookup.calls == []


@pytest.mark.asyncio
async def test_transport_errors_leave_state_untouched():
    async def failing(value):
        raise httpx.ConnectError("connection refused")

    validator = DebouncedCustomerValidator(failing, debounce_seconds=0)
    validator.submit("KD100")
    outcome = await validator.settle()

    assert outcome.valid is None
    assert "connection refused" in outcome.error
    state = _customer_step("KD100")
    assert outcome.apply(state) == state


@pytest.mark.asyncio
async def test_crash_in_superseded_lookup_is_logged(caplog):
    async def lookup(value):
        if value == "KD1":
            raise KeyError(value)
        return value in KNOWN

    validator = DebouncedCustomerValidator(lookup, debounce_seconds=0)
    validator.submit("KD1")
    await asyncio.sleep(0.01)
    validator.submit("KD100")
    outcome = await validator.settle()

    assert outcome.valid is True
    assert any("customer lookup crashed" in r.getMessage() for r in caplog.records)


@pytest.mark.asyncio
async def test_crash_in_latest_lookup_propagates():
    async def lookup(value):
        raise KeyError(value)

    validator = DebouncedCustomerValidator(lookup, debounce_seconds=0)
    validator.submit("KD100")
    with pytest.raises(KeyError):
        await validator.settle()


def _handler(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/customers/KD100/validate":
        return httpx.Response(200, json={"valid": True, "customer": {"customerNumber": "KD100"}})
    if request.url.path.startswith("/customers/"):
        return httpx.Response(200, json={"valid": False})
    if request.url.path == "/rma/generate" and request.method == "POST":
        return httpx.Response(200, json={"rmaNumber": "RMA-2026-654321"})
    if request.url.path == "/support-tickets/RMA-2026-654321/document":
        return httpx.Response(200, content=b"%PDF-1.4", headers={"Content-Type": "application/pdf"})
    return httpx.Response(404, json={"detail": "Not Found"})


@pytest.mark.asyncio
async def test_portal_client():
    async with PortalClient("http://portal.test", transport=httpx.MockTransport(_handler)) as client:
        assert await client.validate_customer("KD100") is True
        assert await client.validate_customer("KD 9") is False
        assert await client.generate_rma() == "RMA-2026-654321"
        assert (await client.download_document("RMA-2026-654321")).startswith(b"%PDF")

        with pytest.raises(httpx.HTTPStatusError):
            await client.download_document("RMA-0000-000000")


@pytest.mark.asyncio
async def test_client_lookup_drives_validator():
    async with PortalClient("http://portal.test", transport=httpx.MockTransport(_handler)) as client:
        validator = DebouncedCustomerValidator(client.validate_customer, debounce_seconds=0)
        validator.submit("KD100")
        outcome = await validator.settle()

    state = outcome.apply(_customer_step("KD100"))
    assert machine.customer_validation_status(state.form) is ValidationStatus.valid
    assert machine.next_step(state).step is Step.shipping
