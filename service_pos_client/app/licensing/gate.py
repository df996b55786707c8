"""
Entitlement gate for the POS client.

Every mutating entry point in every feature module asks the gate first.
The gate forwards the license service's read_only flag; it does not
derive write access from status. Before the first successful query it
denies (fail-closed).
"""

import functools
from typing import Any, Awaitable, Callable, Optional

from shared.logging import get_logger
from shared.metrics import MetricsCollector
from shared.errors import LicenseReadOnlyError

from .models import BannerSeverity, LicenseBanner, LicenseState, LicenseStatus, LicenseType
from .store import EntitlementStateStore


READ_ONLY_NOTICE = "Activate your license to make changes"

BANNER_DAYS_THRESHOLD = 3


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def build_banner(state: Optional[LicenseState]) -> Optional[LicenseBanner]:
    """Banner for a license snapshot; None when nothing needs showing."""
    if state is None:
        return None

    if state.status == LicenseStatus.ACTIVE and state.days_remaining > BANNER_DAYS_THRESHOLD:
        return None

    if state.status == LicenseStatus.EXPIRED:
        return LicenseBanner(
            severity=BannerSeverity.ERROR,
            message="License expired - read-only mode active",
            days=state.days_remaining
        )

    if state.status == LicenseStatus.GRACE:
        grace_days = abs(state.days_remaining)
        return LicenseBanner(
            severity=BannerSeverity.WARNING,
            message=f"License expired - grace period: {_plural(grace_days, 'day')} remaining",
            days=grace_days
        )

    # Active with no days left means the day count is unknown or stale
    if state.days_remaining <= 0:
        return None

    subject = "trial" if state.license_type == LicenseType.TRIAL else "license"
    return LicenseBanner(
        severity=BannerSeverity.WARNING,
        message=f"Your {subject} expires in {_plural(state.days_remaining, 'day')}",
        days=state.days_remaining
    )


class EntitlementGate:
    """Client-side write gate; advisory, not a security boundary."""

    def __init__(self, store: EntitlementStateStore, metrics: Optional[MetricsCollector] = None):
        self.store = store
        self.metrics = metrics
        self.logger = get_logger("pos_client.license.gate")

    def can_write(self) -> bool:
        state = self.store.current()
        if state is None:
            return False
        return not state.read_only

    def require_write(self, action: str) -> None:
        """Raise LicenseReadOnlyError unless writes are allowed."""
        if self.can_write():
            return

        state = self.store.current()
        self.logger.info(
            "Write blocked by entitlement gate",
            action=action,
            status=state.status.value if state else "unknown"
        )
        if self.metrics:
            self.metrics.increment_counter("license_gate_denials_total", action=action)
        raise LicenseReadOnlyError(READ_ONLY_NOTICE, details={"action": action})

    def banner(self) -> Optional[LicenseBanner]:
        return build_banner(self.store.current())


def requires_write(action: str) -> Callable:
    """Decorator for async feature-module methods that mutate data.

    The decorated object must expose the gate as ``self.gate``.
    """

    def decorator(func: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Any]]:
        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs) -> Any:
            self.gate.require_write(action)
            return await func(self, *args, **kwargs)

        return wrapper

    return decorator
