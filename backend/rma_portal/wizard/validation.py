"""Debounced customer-number validation.

Every keystroke calls ``submit``. Only the latest input is looked up once
typing pauses; a response for an input that has since changed is dropped, so
the outcome always belongs to the string currently in the field.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

import httpx

from rma_portal.wizard.machine import apply_validation_result
from rma_portal.wizard.state import WizardState

logger = logging.getLogger(__name__)

Lookup = Callable[[str], Awaitable[bool]]


@dataclass(frozen=True)
class ValidationOutcome:
    customer_number: str
    valid: Optional[bool]
    error: Optional[str] = None

    def apply(self, state: WizardState) -> WizardState:
        if self.valid is None:
            return state
        return apply_validation_result(state, self.customer_number, self.valid)


class DebouncedCustomerValidator:
    def __init__(self, lookup: Lookup, debounce_seconds: float = 0.3) -> None:
        self._lookup = lookup
        self._debounce = debounce_seconds
        self._latest: Optional[str] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def latest(self) -> Optional[str]:
        return self._latest

    def submit(self, value: str) -> Optional[asyncio.Task]:
        self._latest = value
        if self._task and not self._task.done():
            self._task.cancel()
        if not value:
            self._task = None
            return None
        self._task = asyncio.create_task(self._run(value))
        self._task.add_done_callback(self._log_failure)
        return self._task

    @staticmethod
    def _log_failure(task: asyncio.Task) -> None:
        # retrieves the exception so superseded tasks do not leak it
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("customer lookup crashed: %r", exc)

    async def settle(self) -> Optional[ValidationOutcome]:
        """Wait for the pending lookup of the latest input, if any."""
        task = self._task
        if task is None:
            return None
        await asyncio.wait({task})
        if task.cancelled():
            return None
        return task.result()

    async def _run(self, value: str) -> Optional[ValidationOutcome]:
        await asyncio.sleep(self._debounce)
        try:
            valid = await self._lookup(value)
        except httpx.HTTPError as e:
            logger.warning("customer lookup failed for %r: %s", value, e)
            outcome = ValidationOutcome(value, None, error=str(e))
        else:
            outcome = ValidationOutcome(value, valid)
        if value != self._latest:
            return None
        return outcome
