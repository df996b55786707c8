"""
Integration tests for the license lifecycle against the mock license service.
"""

import pytest
import httpx
from datetime import datetime, timedelta

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from mocks.license_service.server import MockLicenseServer, make_code, parse_code
from service_pos_client.app.auth.client import AuthClient
from service_pos_client.app.licensing.client import LicenseServiceClient
from service_pos_client.app.licensing.models import ActivationOutcome, LicenseStatus, LicenseType, SplashBucket
from service_pos_client.app.session.controller import SessionViewController
from service_pos_client.app.session.models import SessionView
from shared.retry import RetryConfig
from shared.test_helpers import StubDataBackend


class TestLicenseLifecycle:
    """Trial to grace to expiry to activation, end to end."""

    @pytest.fixture
    def clock(self):
        return {"now": datetime(2026, 3, 1, 9, 0, 0)}

    @pytest.fixture
    def server(self, clock):
        server = MockLicenseServer(trial_days=15, now=lambda: clock["now"])
        server.first_run_seen = True
        return server

    @pytest.fixture
    def data_backend(self):
        return StubDataBackend()

    def make_controller(self, server, data_backend):
        license_client = LicenseServiceClient(
            "http://license.local",
            retry_config=RetryConfig(max_attempts=1),
            transport=httpx.ASGITransport(app=server.app)
        )
        auth_client = AuthClient("http://data.local", transport=data_backend.transport())
        return SessionViewController(license_client, auth_client, poll_interval_seconds=3600)

    def test_code_checksum(self):
        code = make_code("M", "AB12", "CD34")

        assert parse_code(code) == "M"
        assert parse_code(code[:-1] + ("0" if code[-1] != "0" else "1")) is None
        assert parse_code("POS-X-AB12-CD34-0000") is None
        assert parse_code("garbage") is None

    @pytest.mark.asyncio
    async def test_trial_grace_expiry_and_activation(self, server, data_backend, clock):
        """Test the full lifecycle of a trial install."""
        controller = self.make_controller(server, data_backend)

        snapshot = await controller.start()
        assert snapshot.view == SessionView.LOGIN
        assert snapshot.license.days_remaining == 15
        assert snapshot.can_write is True

        await controller.login("admin", "secret")

        # Past expiry: the service moves to grace on reconcile, writes stay open
        clock["now"] += timedelta(days=16)
        await controller.verifier.tick()
        await controller.verifier.tick()
        state = controller.store.current()
        assert state.status == LicenseStatus.GRACE
        assert state.days_remaining == -1
        assert controller.gate.can_write() is True
        assert controller.gate.banner().message == "License expired - grace period: 1 day remaining"

        # Past grace: read-only, but the logged-in user stays in the app
        clock["now"] += timedelta(days=5)
        await controller.verifier.tick()
        await controller.verifier.tick()
        assert controller.store.current().status == LicenseStatus.EXPIRED
        assert controller.gate.can_write() is False
        assert controller.view == SessionView.APP

        # Logged out, the next tick offers activation
        await controller.logout()
        await controller.verifier.tick()
        assert controller.view == SessionView.ACTIVATION

        result = await controller.submit_activation(make_code("M", "AB12", "CD34").lower())
        assert result.outcome == ActivationOutcome.SUCCESS
        assert controller.store.current().license_type == LicenseType.PAID
        assert controller.store.current().days_remaining == 30
        assert controller.gate.can_write() is True
        assert controller.view == SessionView.LOGIN

        await controller.shutdown()

    @pytest.mark.asyncio
    async def test_code_is_single_use(self, server, data_backend):
        controller = self.make_controller(server, data_backend)
        await controller.start()
        code = make_code("A", "ZZ99", "QQ11")

        first = await controller.submit_activation(code)
        second = await controller.submit_activation(code)

        assert first.success is True
        assert controller.store.current().days_remaining == 365
        assert second.outcome == ActivationOutcome.REJECTED
        assert second.message == "This code has already been used."
        await controller.shutdown()

    @pytest.mark.asyncio
    async def test_invalid_code_rejected(self, server, data_backend):
        controller = self.make_controller(server, data_backend)
        await controller.start()

        result = await controller.submit_activation("POS-M-AAAA-BBBB-0000")

        assert result.outcome == ActivationOutcome.REJECTED
        assert result.message.startswith("Invalid code")
        assert controller.store.current().license_type == LicenseType.TRIAL
        await controller.shutdown()

    @pytest.mark.asyncio
    async def test_reminder_splash_on_day_seven(self, server, data_backend):
        server.set_days_remaining(7.5)
        controller = self.make_controller(server, data_backend)

        snapshot = await controller.start()

        assert snapshot.view == SessionView.SPLASH
        assert snapshot.splash_bucket == SplashBucket.REMINDER
        await controller.shutdown()

    @pytest.mark.asyncio
    async def test_do_not_show_again_persists(self, server, data_backend):
        """Test the first-run choice survives a restart."""
        server.first_run_seen = False
        controller = self.make_controller(server, data_backend)

        snapshot = await controller.start()
        assert snapshot.splash_bucket == SplashBucket.WELCOME
        controller.continue_from_splash()
        await controller.login("admin", "secret")
        await controller.dismiss_welcome_modal(do_not_show_again=True)
        await controller.shutdown()

        restarted = self.make_controller(server, data_backend)
        snapshot = await restarted.start()
        assert snapshot.view == SessionView.LOGIN
        assert restarted.store.first_run.is_first_run is False
        await restarted.shutdown()

    @pytest.mark.asyncio
    async def test_reconcile_failure_keeps_state(self, server, data_backend):
        server.fail_reconcile = True
        controller = self.make_controller(server, data_backend)

        snapshot = await controller.start()

        assert snapshot.view == SessionView.LOGIN
        assert snapshot.license.status == LicenseStatus.ACTIVE
        await controller.shutdown()
