"""
License activation flow for the POS client.
"""

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Optional, Set, Union

from shared.logging import get_logger
from shared.metrics import MetricsCollector
from shared.errors import LicenseServiceUnavailableError

from .client import LicenseServiceClient
from .models import (
    ActivationOutcome, ActivationResponse, ActivationResult,
    LicenseState, LicenseStatus, LicenseType
)
from .store import EntitlementStateStore


EMPTY_CODE_MESSAGE = "Please enter an activation code"
TRANSPORT_FAILURE_MESSAGE = "Could not activate the license. Please try again."

ActivatedCallback = Callable[[ActivationResult], Union[None, Awaitable[Any]]]


def normalize_code(raw: str) -> str:
    """Trim and uppercase; the code is otherwise forwarded verbatim."""
    return raw.strip().upper()


class ActivationFlow:
    """Submits activation codes and applies successful results."""

    def __init__(
        self,
        client: LicenseServiceClient,
        store: EntitlementStateStore,
        on_activated: Optional[ActivatedCallback] = None,
        metrics: Optional[MetricsCollector] = None
    ):
        self.client = client
        self.store = store
        self.on_activated = on_activated
        self.metrics = metrics
        self.logger = get_logger("pos_client.license.activation")
        self._pending: Set[asyncio.Future] = set()

    async def submit(self, code: str) -> ActivationResult:
        """Submit a code; once sent, the submission runs to completion."""
        normalized = normalize_code(code)
        if not normalized:
            return self._finish(ActivationResult(ActivationOutcome.INVALID_INPUT, EMPTY_CODE_MESSAGE))

        # Shielded so that a navigating-away caller cannot cancel the apply step
        task = asyncio.ensure_future(self._submit(normalized))
        self._pending.add(task)
        task.add_done_callback(self._submission_done)
        return await asyncio.shield(task)

    def _submission_done(self, task: asyncio.Future) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self.logger.error("Activation submission failed", error=str(exc), exc_info=exc)

    async def _submit(self, code: str) -> ActivationResult:
        self.logger.info("Submitting activation code", code_length=len(code))

        try:
            response = await self.client.activate_license(code)
        except LicenseServiceUnavailableError as exc:
            self.logger.warning("Activation request failed", error=exc.message, details=exc.details)
            return self._finish(ActivationResult(ActivationOutcome.TRANSPORT_ERROR, TRANSPORT_FAILURE_MESSAGE))

        if not response.success:
            return self._finish(ActivationResult(ActivationOutcome.REJECTED, response.message))

        state = self._state_from_response(response)
        self.store.set_from_activation(state)
        result = self._finish(ActivationResult(ActivationOutcome.SUCCESS, response.message, state))

        if self.on_activated:
            callback_result = self.on_activated(result)
            if inspect.isawaitable(callback_result):
                await callback_result

        return result

    def _state_from_response(self, response: ActivationResponse) -> LicenseState:
        if response.state is not None:
            return response.state

        previous = self.store.current()
        if response.days_remaining is not None:
            days_remaining = response.days_remaining
        else:
            days_remaining = previous.days_remaining if previous else 0

        return LicenseState(
            status=LicenseStatus.ACTIVE,
            license_type=LicenseType.PAID,
            days_remaining=days_remaining,
            read_only=bool(response.read_only)
        )

    def _finish(self, result: ActivationResult) -> ActivationResult:
        self.logger.info("Activation finished", outcome=result.outcome.value)
        if self.metrics:
            self.metrics.increment_counter("license_activation_total", outcome=result.outcome.value)
        return result
