"""
Unit tests for the entitlement gate and license banner.
"""

import pytest
from unittest.mock import MagicMock

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_pos_client.app.licensing.gate import (
    EntitlementGate, READ_ONLY_NOTICE, build_banner, requires_write
)
from service_pos_client.app.licensing.models import BannerSeverity, LicenseState, LicenseStatus, LicenseType
from shared.errors import LicenseReadOnlyError
from shared.metrics import MetricsCollector


def make_state(status=LicenseStatus.ACTIVE, days=15, read_only=False, license_type=LicenseType.TRIAL):
    return LicenseState(status=status, license_type=license_type, days_remaining=days, read_only=read_only)


class TestEntitlementGate:
    """Test cases for EntitlementGate."""

    @pytest.fixture
    def store(self):
        store = MagicMock()
        store.current.return_value = None
        return store

    @pytest.fixture
    def metrics(self):
        return MetricsCollector("test_gate")

    @pytest.fixture
    def gate(self, store, metrics):
        return EntitlementGate(store, metrics=metrics)

    def test_unknown_state_denies(self, gate):
        """Test the gate fails closed before the first query."""
        assert gate.can_write() is False

    def test_active_allows(self, gate, store):
        store.current.return_value = make_state()
        assert gate.can_write() is True

    def test_grace_without_read_only_allows(self, gate, store):
        """Test grace status alone does not lock writes."""
        store.current.return_value = make_state(LicenseStatus.GRACE, -1)
        assert gate.can_write() is True

    def test_read_only_flag_is_authoritative(self, gate, store):
        """Test write access follows read_only, not status."""
        store.current.return_value = make_state(LicenseStatus.ACTIVE, 5, read_only=True)
        assert gate.can_write() is False

        store.current.return_value = make_state(LicenseStatus.EXPIRED, -10, read_only=False)
        assert gate.can_write() is True

    def test_require_write_raises_with_notice(self, gate, store, metrics):
        """Test denied actions raise and are counted."""
        store.current.return_value = make_state(LicenseStatus.EXPIRED, -5, read_only=True)

        with pytest.raises(LicenseReadOnlyError) as exc_info:
            gate.require_write("inventory.update_product")

        assert exc_info.value.message == READ_ONLY_NOTICE
        assert exc_info.value.details == {"action": "inventory.update_product"}
        assert metrics.get_sample_value(
            "license_gate_denials_total", {"action": "inventory.update_product"}
        ) == 1.0

    def test_require_write_passes(self, gate, store):
        store.current.return_value = make_state()
        gate.require_write("sales.create_sale")

    @pytest.mark.asyncio
    async def test_decorator_blocks_before_call(self, gate, store):
        """Test the decorated body never runs when denied."""
        calls = []

        class Module:
            def __init__(self, gate):
                self.gate = gate

            @requires_write("test.save")
            async def save(self, value):
                calls.append(value)
                return value

        module = Module(gate)
        store.current.return_value = make_state(LicenseStatus.EXPIRED, -4, read_only=True)

        with pytest.raises(LicenseReadOnlyError):
            await module.save(1)
        assert calls == []

        store.current.return_value = make_state()
        assert await module.save(2) == 2
        assert calls == [2]


class TestBuildBanner:
    """Test cases for build_banner."""

    def test_no_banner_when_unknown(self):
        assert build_banner(None) is None

    def test_no_banner_when_far_from_expiry(self):
        assert build_banner(make_state(days=4)) is None

    def test_trial_expiring_warning(self):
        banner = build_banner(make_state(days=3))

        assert banner.severity == BannerSeverity.WARNING
        assert banner.message == "Your trial expires in 3 days"
        assert banner.days == 3

    def test_paid_singular_day(self):
        banner = build_banner(make_state(days=1, license_type=LicenseType.PAID))
        assert banner.message == "Your license expires in 1 day"

    def test_grace_warning(self):
        banner = build_banner(make_state(LicenseStatus.GRACE, -2))

        assert banner.severity == BannerSeverity.WARNING
        assert banner.message == "License expired - grace period: 2 days remaining"
        assert banner.days == 2

    def test_expired_error(self):
        banner = build_banner(make_state(LicenseStatus.EXPIRED, -5, read_only=True))

        assert banner.severity == BannerSeverity.ERROR
        assert banner.message == "License expired - read-only mode active"

    def test_no_expiring_banner_without_days(self):
        """Test an active state with no day count does not claim 0 days left."""
        assert build_banner(make_state(days=0, license_type=LicenseType.PAID)) is None
        assert build_banner(make_state(days=-1)) is None
