"""
Session view models for the POS client.
"""

from typing import Optional
from enum import Enum

from pydantic import BaseModel, Field

from ..licensing.models import LicenseBanner, LicenseState, SplashBucket


class SessionView(str, Enum):
    """Mutually exclusive full-screen views."""
    LOADING = "loading"
    SPLASH = "splash"
    ACTIVATION = "activation"
    LOGIN = "login"
    APP = "app"


class SessionUser(BaseModel):
    """Authenticated user as returned by the data service."""
    id: int
    username: str
    full_name: str = ""
    role_id: int


class SessionSnapshot(BaseModel):
    """Everything the UI needs to render the current screen."""
    view: SessionView
    splash_bucket: Optional[SplashBucket] = Field(None, description="Set only while the splash is displayed")
    welcome_modal: bool = Field(False, description="Welcome modal layered over the app")
    read_only: bool = Field(True, description="App shown in reduced read-only mode")
    can_write: bool = False
    banner: Optional[LicenseBanner] = None
    license: Optional[LicenseState] = None
    user: Optional[SessionUser] = None
