"""
Unit tests for the entitlement state store.
"""

import asyncio
import pytest
from unittest.mock import AsyncMock, MagicMock

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_pos_client.app.licensing.models import FirstRunState, LicenseState, LicenseStatus, LicenseType
from service_pos_client.app.licensing.store import EntitlementStateStore
from shared.errors import LicenseReconcileError, LicenseServiceUnavailableError
from shared.metrics import MetricsCollector


def make_state(status=LicenseStatus.ACTIVE, days=15, read_only=False, license_type=LicenseType.TRIAL):
    return LicenseState(status=status, license_type=license_type, days_remaining=days, read_only=read_only)


class TestEntitlementStateStore:
    """Test cases for EntitlementStateStore."""

    @pytest.fixture
    def client(self):
        """Create mock license client."""
        client = MagicMock()
        client.query_license_state = AsyncMock(return_value=make_state())
        client.reconcile_license_state = AsyncMock(return_value=None)
        client.query_first_run = AsyncMock(return_value=FirstRunState(is_first_run=True))
        client.mark_first_run_seen = AsyncMock(return_value=None)
        return client

    @pytest.fixture
    def metrics(self):
        return MetricsCollector("test_store")

    @pytest.fixture
    def store(self, client, metrics):
        return EntitlementStateStore(client, metrics=metrics)

    def test_initially_unknown(self, store):
        """Test state is unknown before the first refresh."""
        assert store.current() is None
        assert store.first_run.is_first_run is False

    @pytest.mark.asyncio
    async def test_refresh_applies_then_reconciles(self, store, client, metrics):
        """Test refresh stores the queried value and asks for reconcile."""
        state = await store.refresh()

        assert store.current() == state
        client.query_license_state.assert_awaited_once()
        client.reconcile_license_state.assert_awaited_once()
        assert metrics.get_sample_value("license_refresh_total", {"result": "ok"}) == 1.0

    @pytest.mark.asyncio
    async def test_failed_query_keeps_last_known_state(self, store, client, metrics):
        """Test a failed refresh never clears a cached value."""
        known = await store.refresh()
        client.query_license_state.side_effect = LicenseServiceUnavailableError()

        with pytest.raises(LicenseServiceUnavailableError):
            await store.refresh()

        assert store.current() == known
        assert client.reconcile_license_state.await_count == 1
        assert metrics.get_sample_value("license_refresh_total", {"result": "error"}) == 1.0

    @pytest.mark.asyncio
    async def test_failed_query_before_first_success_stays_unknown(self, store, client):
        """Test unknown stays unknown on failure."""
        client.query_license_state.side_effect = LicenseServiceUnavailableError()

        with pytest.raises(LicenseServiceUnavailableError):
            await store.refresh()

        assert store.current() is None

    @pytest.mark.asyncio
    async def test_reconcile_failure_keeps_applied_state(self, store, client, metrics):
        """Test reconcile failure does not roll back the applied state."""
        expired = make_state(LicenseStatus.EXPIRED, -5, read_only=True)
        client.query_license_state.return_value = expired
        client.reconcile_license_state.side_effect = LicenseServiceUnavailableError()

        with pytest.raises(LicenseReconcileError) as exc_info:
            await store.refresh()

        assert exc_info.value.state == expired
        assert store.current() == expired
        assert metrics.get_sample_value("license_refresh_total", {"result": "reconcile_error"}) == 1.0

    @pytest.mark.asyncio
    async def test_listeners_notified_on_change_only(self, store, client):
        """Test subscribers see each distinct state once."""
        seen = []
        unsubscribe = store.subscribe(seen.append)

        await store.refresh()
        await store.refresh()
        client.query_license_state.return_value = make_state(days=14)
        await store.refresh()

        assert [s.days_remaining for s in seen] == [15, 14]

        unsubscribe()
        client.query_license_state.return_value = make_state(days=13)
        await store.refresh()
        assert len(seen) == 2

    @pytest.mark.asyncio
    async def test_listener_failure_does_not_break_refresh(self, store):
        """Test a raising listener is isolated."""
        def broken(state):
            raise RuntimeError("boom")

        store.subscribe(broken)

        state = await store.refresh()

        assert store.current() == state

    def test_set_from_activation_replaces_state(self, store):
        """Test activation result replaces the cached value wholesale."""
        paid = make_state(days=365, license_type=LicenseType.PAID)

        store.set_from_activation(paid)

        assert store.current() is paid

    @pytest.mark.asyncio
    async def test_load_first_run(self, store):
        """Test first-run flag is loaded."""
        first_run = await store.load_first_run()

        assert first_run.is_first_run is True
        assert store.first_run.is_first_run is True

    @pytest.mark.asyncio
    async def test_load_first_run_failure_defaults_false(self, store, client):
        """Test failed first-run query is treated as not first run."""
        client.query_first_run.side_effect = LicenseServiceUnavailableError()

        first_run = await store.load_first_run()

        assert first_run.is_first_run is False

    @pytest.mark.asyncio
    async def test_mark_first_run_seen_is_irreversible(self, store, client):
        """Test mark-seen flips the flag and is sent once."""
        await store.load_first_run()

        await store.mark_first_run_seen()
        await store.mark_first_run_seen()

        assert store.first_run.is_first_run is False
        client.mark_first_run_seen.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_overlapping_refreshes_last_arrival_wins(self, store, client):
        """Test the response applied last is the one that arrived last."""
        first_reply, second_reply = asyncio.Event(), asyncio.Event()
        replies = [(first_reply, make_state(days=5)), (second_reply, make_state(days=4))]

        async def query():
            reply, state = replies.pop(0)
            await reply.wait()
            return state

        client.query_license_state.side_effect = query

        first = asyncio.create_task(store.refresh())
        second = asyncio.create_task(store.refresh())
        await asyncio.sleep(0)

        second_reply.set()
        await second
        assert store.current().days_remaining == 4

        first_reply.set()
        await first
        assert store.current().days_remaining == 5
