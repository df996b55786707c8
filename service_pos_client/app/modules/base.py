"""
Common plumbing for POS feature modules.
"""

from typing import Callable, Optional

from shared.logging import get_logger
from shared.errors import AuthenticationError, AuthorizationError

from ..licensing.gate import EntitlementGate
from ..session.models import SessionUser
from .data_client import DataServiceClient
from .permissions import ModuleKey, has_permission


CurrentUserProvider = Callable[[], Optional[SessionUser]]


class FeatureModule:
    """Base for a business module; subclasses set module_key."""

    module_key: ModuleKey

    def __init__(self, data_client: DataServiceClient, gate: EntitlementGate,
                 current_user: CurrentUserProvider):
        self.data_client = data_client
        self.gate = gate
        self.current_user = current_user
        self.logger = get_logger(f"pos_client.modules.{self.module_key.value}")

    def _require_access(self) -> SessionUser:
        user = self.current_user()
        if user is None:
            raise AuthenticationError("Login required")
        if not has_permission(user.role_id, self.module_key):
            self.logger.info("Module access denied", user_id=user.id, role_id=user.role_id)
            raise AuthorizationError(
                f"No access to {self.module_key.value}",
                details={"module": self.module_key.value, "role_id": user.role_id}
            )
        return user
