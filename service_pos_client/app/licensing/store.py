"""
Entitlement state store for the POS client.

Holds the single cached LicenseState and FirstRunState for the process.
The cached license value is only ever replaced wholesale, through
refresh() or set_from_activation(), so readers never see a partial
update. Once a value has been observed it is never cleared back to
unknown: a failed refresh keeps serving the last known state.
"""

from typing import Callable, List, Optional

from shared.logging import get_logger
from shared.metrics import MetricsCollector
from shared.errors import LicenseServiceUnavailableError, LicenseReconcileError

from .client import LicenseServiceClient
from .models import LicenseState, FirstRunState


LicenseListener = Callable[[LicenseState], None]


class EntitlementStateStore:
    """Process-wide owner of license and first-run state."""

    def __init__(self, client: LicenseServiceClient, metrics: Optional[MetricsCollector] = None):
        self.client = client
        self.metrics = metrics
        self.logger = get_logger("pos_client.license.store")

        self._state: Optional[LicenseState] = None
        self._first_run: Optional[FirstRunState] = None
        self._listeners: List[LicenseListener] = []

    def current(self) -> Optional[LicenseState]:
        """Last known license state, or None while still unknown."""
        return self._state

    @property
    def first_run(self) -> FirstRunState:
        """First-run flag; False until loaded."""
        return self._first_run or FirstRunState(is_first_run=False)

    def subscribe(self, listener: LicenseListener) -> Callable[[], None]:
        """Register a change listener; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    async def refresh(self) -> LicenseState:
        """Query the service, apply the answer, then ask it to reconcile.

        Raises LicenseServiceUnavailableError when the query fails (cache
        untouched) and LicenseReconcileError when only the reconcile call
        fails (cache already updated).
        """
        try:
            state = await self.client.query_license_state()
        except LicenseServiceUnavailableError:
            self._count_refresh("error")
            self.logger.warning(
                "License refresh failed, keeping last known state",
                has_state=self._state is not None
            )
            raise

        self._apply(state, source="refresh")

        try:
            await self.client.reconcile_license_state()
        except LicenseServiceUnavailableError as exc:
            self._count_refresh("reconcile_error")
            self.logger.warning("License reconcile failed", error=exc.message)
            raise LicenseReconcileError(state, details=exc.details)

        self._count_refresh("ok")
        return state

    def set_from_activation(self, state: LicenseState) -> None:
        """Replace the cached state with one returned by a successful activation."""
        self._apply(state, source="activation")

    async def load_first_run(self) -> FirstRunState:
        """Fetch the first-run flag once; falls back to not-first-run on failure."""
        try:
            self._first_run = await self.client.query_first_run()
        except LicenseServiceUnavailableError as exc:
            self.logger.warning("First-run query failed, assuming not first run", error=exc.message)
            self._first_run = FirstRunState(is_first_run=False)
        return self._first_run

    async def mark_first_run_seen(self) -> FirstRunState:
        """Irreversibly flip first-run to False."""
        if not self.first_run.is_first_run:
            return self.first_run

        await self.client.mark_first_run_seen()
        self._first_run = FirstRunState(is_first_run=False)
        self.logger.info("First run marked as seen")
        return self._first_run

    def _apply(self, state: LicenseState, source: str) -> None:
        previous = self._state
        if previous == state:
            self.logger.debug("License state unchanged", source=source)
            return

        self._state = state
        self.logger.info(
            "License state updated",
            source=source,
            status=state.status.value,
            license_type=state.license_type.value,
            days_remaining=state.days_remaining,
            read_only=state.read_only,
            previous_status=previous.status.value if previous else None
        )

        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception as exc:
                self.logger.error("License listener failed", error=str(exc), exc_info=True)

    def _count_refresh(self, result: str) -> None:
        if self.metrics:
            self.metrics.increment_counter("license_refresh_total", result=result)
