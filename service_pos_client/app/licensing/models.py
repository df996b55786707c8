"""
License data models for the POS client.
"""

from typing import Optional
from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class LicenseStatus(str, Enum):
    """License lifecycle status as reported by the license service."""
    ACTIVE = "ACTIVE"
    GRACE = "GRACE"
    EXPIRED = "EXPIRED"


class LicenseType(str, Enum):
    """License types."""
    TRIAL = "TRIAL"
    PAID = "PAID"


class SplashBucket(str, Enum):
    """Full-screen interstitial selected once per launch."""
    WELCOME = "welcome"
    REMINDER = "reminder"
    URGENT = "urgent"
    FINAL = "final"
    EXPIRED_NOTICE = "expired_notice"


class BannerSeverity(str, Enum):
    """Banner severity tiers."""
    WARNING = "warning"
    ERROR = "error"


class ActivationOutcome(str, Enum):
    """How an activation submission ended."""
    SUCCESS = "success"
    REJECTED = "rejected"
    INVALID_INPUT = "invalid_input"
    TRANSPORT_ERROR = "transport_error"


class LicenseState(BaseModel):
    """Snapshot of the license; replaced wholesale, never mutated."""

    model_config = ConfigDict(frozen=True)

    status: LicenseStatus
    license_type: LicenseType
    days_remaining: int = Field(..., description="Negative once past expiry")
    read_only: bool = Field(..., description="Authoritative write lock from the license service")

    @property
    def is_expired(self) -> bool:
        return self.status == LicenseStatus.EXPIRED


class ActivationResponse(BaseModel):
    """Raw activation answer from the license service."""
    success: bool
    message: str = ""
    read_only: Optional[bool] = None
    days_remaining: Optional[int] = None
    state: Optional[LicenseState] = None


@dataclass(frozen=True)
class FirstRunState:
    """Whether the one-time welcome has not been dismissed for good yet."""
    is_first_run: bool


@dataclass(frozen=True)
class ActivationResult:
    """Result of an activation submission as seen by the UI."""
    outcome: ActivationOutcome
    message: str
    state: Optional[LicenseState] = None

    @property
    def success(self) -> bool:
        return self.outcome == ActivationOutcome.SUCCESS

    @property
    def read_only(self) -> bool:
        return bool(self.state and self.state.read_only)


class LicenseBanner(BaseModel):
    """Passive status banner shown inside the application."""
    severity: BannerSeverity
    message: str
    days: int
