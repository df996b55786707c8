"""
Interstitial scheduling for the POS client.

Two independent interstitials exist:

- the splash screen, chosen once per process start from the license
  snapshot taken while loading; a refresh later in the session never
  re-evaluates it, so crossing a day boundary does not interrupt an
  open session;
- the welcome modal, shown after login while the install is still on
  its first run, at most once per login.
"""

from typing import Dict, Optional

from shared.logging import get_logger

from .models import FirstRunState, LicenseState, LicenseStatus, SplashBucket


_DAY_BUCKETS: Dict[int, SplashBucket] = {
    7: SplashBucket.REMINDER,
    3: SplashBucket.URGENT,
    2: SplashBucket.URGENT,
    1: SplashBucket.FINAL,
}


def classify_splash(license_state: Optional[LicenseState], first_run: FirstRunState) -> Optional[SplashBucket]:
    """Pick the single splash bucket for a launch, or None."""
    if first_run.is_first_run:
        return SplashBucket.WELCOME

    if license_state is None:
        return None

    if license_state.days_remaining == 0 and license_state.status == LicenseStatus.EXPIRED:
        return SplashBucket.EXPIRED_NOTICE

    return _DAY_BUCKETS.get(license_state.days_remaining)


class NotificationScheduler:
    """Guards the once-per-process splash and the per-login welcome modal."""

    def __init__(self):
        self.logger = get_logger("pos_client.license.scheduler")
        self._classified = False
        self._bucket: Optional[SplashBucket] = None
        self._splash_claimed = False
        self._welcome_shown_this_login = False

    @property
    def splash_bucket(self) -> Optional[SplashBucket]:
        return self._bucket

    def classify_at_startup(self, license_state: Optional[LicenseState], first_run: FirstRunState) -> Optional[SplashBucket]:
        """Classify the startup snapshot; later calls return the first answer."""
        if self._classified:
            self.logger.warning("Splash already classified for this process", bucket=self._bucket)
            return self._bucket

        self._classified = True
        self._bucket = classify_splash(license_state, first_run)
        self.logger.info(
            "Startup splash classified",
            bucket=self._bucket.value if self._bucket else None,
            first_run=first_run.is_first_run,
            days_remaining=license_state.days_remaining if license_state else None
        )
        return self._bucket

    def claim_splash(self) -> Optional[SplashBucket]:
        """Return the bucket the first time it is asked for, then None."""
        if self._splash_claimed or self._bucket is None:
            return None
        self._splash_claimed = True
        return self._bucket

    def begin_login(self):
        """Reset per-login modal bookkeeping."""
        self._welcome_shown_this_login = False

    def claim_welcome_modal(self, first_run: FirstRunState) -> bool:
        """True when the welcome modal should be layered over the app now."""
        if not first_run.is_first_run or self._welcome_shown_this_login:
            return False
        self._welcome_shown_this_login = True
        return True
