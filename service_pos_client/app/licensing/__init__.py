"""
Entitlement lifecycle package for the POS client.

Tracks trial/grace/expired license status, keeps it in sync with the
license service, decides which one-time interstitials to surface, and
gates write operations across every feature module.

Modules of interest:
- models: License state value types and UI-facing results.
- client: HTTP client for the license service operations.
- store: The single owner of cached license and first-run state.
- verifier: Cancellable periodic refresh.
- scheduler: Once-per-launch splash and per-login welcome modal rules.
- gate: can_write predicate, banner, and the requires_write decorator.
- activation: Code submission and post-activation state update.
"""

from .models import (
    LicenseStatus, LicenseType, LicenseState, FirstRunState, SplashBucket,
    ActivationOutcome, ActivationResult, LicenseBanner, BannerSeverity
)
from .client import LicenseServiceClient
from .store import EntitlementStateStore
from .verifier import PeriodicVerifier, LICENSE_POLL_INTERVAL_SECONDS
from .scheduler import NotificationScheduler, classify_splash
from .gate import EntitlementGate, requires_write, READ_ONLY_NOTICE
from .activation import ActivationFlow, normalize_code

__all__ = [
    "LicenseStatus", "LicenseType", "LicenseState", "FirstRunState", "SplashBucket",
    "ActivationOutcome", "ActivationResult", "LicenseBanner", "BannerSeverity",
    "LicenseServiceClient", "EntitlementStateStore", "PeriodicVerifier",
    "LICENSE_POLL_INTERVAL_SECONDS", "NotificationScheduler", "classify_splash",
    "EntitlementGate", "requires_write", "READ_ONLY_NOTICE",
    "ActivationFlow", "normalize_code",
]
