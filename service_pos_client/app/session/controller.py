"""
Session view controller for the POS client.

Selects exactly one full-screen view from the license state, the
first-run flag and the authentication state:

    LOADING -> SPLASH | ACTIVATION | LOGIN
    SPLASH -> LOGIN | ACTIVATION
    LOGIN -> APP | ACTIVATION
    APP -> ACTIVATION | LOGIN
    ACTIVATION -> APP | LOGIN

The welcome modal is an overlay on APP, not a view of its own. SPLASH is
entered at most once per process. ACTIVATION always returns to APP when
a user is logged in and to LOGIN otherwise.
"""

import asyncio
import uuid
from typing import Dict, FrozenSet, Optional

from shared.logging import get_logger, set_session_id, set_user_context
from shared.metrics import MetricsCollector
from shared.errors import (
    InvalidTransitionError, LicenseReconcileError, LicenseServiceUnavailableError
)

from ..auth.client import AuthClient
from ..licensing.activation import ActivationFlow
from ..licensing.client import LicenseServiceClient
from ..licensing.gate import EntitlementGate
from ..licensing.models import ActivationResult, LicenseState, SplashBucket
from ..licensing.scheduler import NotificationScheduler
from ..licensing.store import EntitlementStateStore
from ..licensing.verifier import PeriodicVerifier, LICENSE_POLL_INTERVAL_SECONDS
from .models import SessionSnapshot, SessionUser, SessionView


_TRANSITIONS: Dict[SessionView, FrozenSet[SessionView]] = {
    SessionView.LOADING: frozenset({SessionView.SPLASH, SessionView.ACTIVATION, SessionView.LOGIN}),
    SessionView.SPLASH: frozenset({SessionView.LOGIN, SessionView.ACTIVATION}),
    SessionView.LOGIN: frozenset({SessionView.APP, SessionView.ACTIVATION}),
    SessionView.APP: frozenset({SessionView.ACTIVATION, SessionView.LOGIN}),
    SessionView.ACTIVATION: frozenset({SessionView.APP, SessionView.LOGIN}),
}


class SessionViewController:
    """Top-level arbiter of which screen the client shows."""

    def __init__(
        self,
        license_client: LicenseServiceClient,
        auth_client: AuthClient,
        metrics: Optional[MetricsCollector] = None,
        poll_interval_seconds: float = LICENSE_POLL_INTERVAL_SECONDS
    ):
        self.license_client = license_client
        self.auth_client = auth_client
        self.metrics = metrics
        self.logger = get_logger("pos_client.session.controller")

        self.store = EntitlementStateStore(license_client, metrics=metrics)
        self.gate = EntitlementGate(self.store, metrics=metrics)
        self.scheduler = NotificationScheduler()
        self.activation = ActivationFlow(
            license_client,
            self.store,
            on_activated=self.handle_activation,
            metrics=metrics
        )
        self.verifier = PeriodicVerifier(
            self.store,
            is_authenticated=lambda: self.user is not None,
            on_expired=self.offer_activation,
            interval_seconds=poll_interval_seconds
        )

        self.view = SessionView.LOADING
        self.user: Optional[SessionUser] = None
        self.welcome_modal = False
        self._splash_bucket: Optional[SplashBucket] = None
        self._started = False

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    async def start(self) -> SessionSnapshot:
        """Leave LOADING once both startup queries resolve, then start polling."""
        if self._started:
            return self.snapshot()
        self._started = True
        set_session_id(str(uuid.uuid4()))

        results = await asyncio.gather(
            self.store.refresh(),
            self.store.load_first_run(),
            return_exceptions=True
        )
        refresh_result, first_run_result = results
        if isinstance(first_run_result, BaseException):
            raise first_run_result
        if isinstance(refresh_result, LicenseReconcileError):
            self.logger.warning("Startup reconcile failed", error=refresh_result.message)
        elif isinstance(refresh_result, LicenseServiceUnavailableError):
            self.logger.warning("Startup license query failed", error=refresh_result.message)
        elif isinstance(refresh_result, BaseException):
            raise refresh_result

        state = self.store.current()
        self.scheduler.classify_at_startup(state, self.store.first_run)
        bucket = self.scheduler.claim_splash()

        if bucket is not None:
            self._splash_bucket = bucket
            self._transition(SessionView.SPLASH)
        elif state is not None and state.is_expired:
            self._transition(SessionView.ACTIVATION)
        else:
            self._transition(SessionView.LOGIN)

        await self.verifier.start()
        return self.snapshot()

    async def shutdown(self):
        """Process teardown: stop polling for good."""
        await self.verifier.stop()
        self.logger.info("Session controller shut down")

    def continue_from_splash(self) -> SessionSnapshot:
        """Dismiss the splash; it is never shown again in this process."""
        self._require_view(SessionView.SPLASH, SessionView.LOGIN)
        self._splash_bucket = None
        self._transition(SessionView.LOGIN)
        return self.snapshot()

    async def open_activation(self) -> SessionSnapshot:
        """Show the activation form and re-check the license meanwhile."""
        if self.view == SessionView.ACTIVATION:
            return self.snapshot()

        self._splash_bucket = None
        self._transition(SessionView.ACTIVATION)

        try:
            await self.store.refresh()
        except (LicenseServiceUnavailableError, LicenseReconcileError) as exc:
            self.logger.warning("License refresh on activation open failed", error=exc.message)

        return self.snapshot()

    def close_activation(self) -> SessionSnapshot:
        """Leave the activation form without activating."""
        self._require_view(SessionView.ACTIVATION, self._return_view())
        self._transition(self._return_view())
        return self.snapshot()

    async def submit_activation(self, code: str) -> ActivationResult:
        return await self.activation.submit(code)

    def handle_activation(self, result: ActivationResult):
        """Called by the activation flow after a successful activation."""
        if not result.success:
            return
        if self.view == SessionView.ACTIVATION:
            self._transition(self._return_view())
        else:
            self.logger.info("Activation completed outside the activation view", view=self.view.value)

    def offer_activation(self, state: LicenseState):
        """Verifier signal: expired with nobody logged in."""
        if self.view == SessionView.ACTIVATION:
            return
        if self.view != SessionView.LOGIN or self.is_authenticated:
            self.logger.debug("Activation offer ignored", view=self.view.value)
            return
        self.logger.info("Offering activation", status=state.status.value)
        self._transition(SessionView.ACTIVATION)

    async def login(self, username: str, password: str) -> SessionSnapshot:
        self._require_view(SessionView.LOGIN, SessionView.APP)
        user = await self.auth_client.login(username, password)

        self.user = user
        set_user_context(str(user.id))
        self.scheduler.begin_login()
        self.welcome_modal = self.scheduler.claim_welcome_modal(self.store.first_run)
        self._transition(SessionView.APP)
        return self.snapshot()

    async def dismiss_welcome_modal(self, do_not_show_again: bool = False) -> SessionSnapshot:
        """Continue hides it for this login; do-not-show-again hides it for good."""
        if do_not_show_again:
            await self.store.mark_first_run_seen()
        self.welcome_modal = False
        return self.snapshot()

    async def logout(self) -> SessionSnapshot:
        """End the user session and restart the timer for the next one."""
        if self.user is None:
            return self.snapshot()

        self.logger.info("User logged out", user_id=self.user.id)
        await self.verifier.stop()
        self.user = None
        self.welcome_modal = False
        set_user_context(None)
        if self.view != SessionView.LOGIN:
            self._transition(SessionView.LOGIN)
        await self.verifier.start()
        return self.snapshot()

    def snapshot(self) -> SessionSnapshot:
        state = self.store.current()
        can_write = self.gate.can_write()
        return SessionSnapshot(
            view=self.view,
            splash_bucket=self._splash_bucket if self.view == SessionView.SPLASH else None,
            welcome_modal=self.welcome_modal and self.view == SessionView.APP,
            read_only=not can_write,
            can_write=can_write,
            banner=self.gate.banner(),
            license=state,
            user=self.user
        )

    def _return_view(self) -> SessionView:
        return SessionView.APP if self.is_authenticated else SessionView.LOGIN

    def _require_view(self, expected: SessionView, target: SessionView):
        if self.view != expected:
            raise InvalidTransitionError(self.view.value, target.value)

    def _transition(self, target: SessionView):
        source = self.view
        if target not in _TRANSITIONS[source]:
            raise InvalidTransitionError(source.value, target.value)

        self.view = target
        self.logger.info("Session view changed", source=source.value, target=target.value)
        if self.metrics:
            self.metrics.increment_counter(
                "session_transitions_total",
                source=source.value,
                target=target.value
            )
