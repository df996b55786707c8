"""
Background license re-verification for the POS client.
"""

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Optional, Union

from shared.logging import get_logger
from shared.errors import LicenseServiceUnavailableError, LicenseReconcileError

from .models import LicenseState
from .store import EntitlementStateStore


# Fixed by product decision, not a setting.
LICENSE_POLL_INTERVAL_SECONDS = 300.0

ExpiredCallback = Callable[[LicenseState], Union[None, Awaitable[Any]]]


class PeriodicVerifier:
    """Recurring, cancellable refresh of the entitlement store."""

    def __init__(
        self,
        store: EntitlementStateStore,
        is_authenticated: Callable[[], bool],
        on_expired: Optional[ExpiredCallback] = None,
        interval_seconds: float = LICENSE_POLL_INTERVAL_SECONDS
    ):
        self.store = store
        self.is_authenticated = is_authenticated
        self.on_expired = on_expired
        self.interval_seconds = interval_seconds
        self.logger = get_logger("pos_client.license.verifier")

        self.verify_task: Optional[asyncio.Task] = None
        self.running = False

    async def start(self, interval_seconds: Optional[float] = None):
        """Start the timer; a second start while running is ignored."""
        if self.running:
            self.logger.debug("License verifier already running")
            return

        if interval_seconds is not None:
            self.interval_seconds = interval_seconds

        self.running = True
        self.verify_task = asyncio.create_task(self._verify_loop())
        self.logger.info("License verifier started", interval_seconds=self.interval_seconds)

    async def stop(self):
        """Cancel the timer and wait for it to unwind."""
        self.running = False
        if self.verify_task:
            self.verify_task.cancel()
            try:
                await self.verify_task
            except asyncio.CancelledError:
                pass
            self.verify_task = None

        self.logger.info("License verifier stopped")

    async def tick(self) -> Optional[LicenseState]:
        """Run one verification; never raises for backend failures."""
        try:
            state = await self.store.refresh()
        except LicenseReconcileError as exc:
            state = exc.state
        except LicenseServiceUnavailableError as exc:
            self.logger.warning("Background license refresh failed", error=exc.message)
            return None

        if state.is_expired and not self.is_authenticated() and self.on_expired:
            result = self.on_expired(state)
            if inspect.isawaitable(result):
                await result

        return state

    async def _verify_loop(self):
        """Main verification loop."""
        while self.running:
            try:
                await asyncio.sleep(self.interval_seconds)
                await self.tick()
            except asyncio.CancelledError:
                break
            except Exception as e:
                self.logger.error("Error in license verifier loop", error=str(e), exc_info=True)
