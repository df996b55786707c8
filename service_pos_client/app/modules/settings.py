"""
Settings module: user administration.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..licensing.gate import requires_write
from .base import FeatureModule
from .permissions import ModuleKey


class UserInput(BaseModel):
    username: str = Field(..., min_length=1)
    full_name: str = Field(..., min_length=1)
    role_id: int
    password: Optional[str] = Field(None, min_length=4)
    active: bool = True


class StoreSettingsInput(BaseModel):
    """Store details printed on receipts."""
    store_name: str = Field(..., min_length=1)
    address: str = ""
    phone: str = ""
    email: str = ""
    tax_id: str = ""
    receipt_message: str = ""


class SettingsModule(FeatureModule):
    """Administrator-only settings."""

    module_key = ModuleKey.SETTINGS

    async def list_users(self) -> List[Dict[str, Any]]:
        self._require_access()
        return await self.data_client.get("/users")

    @requires_write("settings.create_user")
    async def create_user(self, user_input: UserInput) -> Dict[str, Any]:
        self._require_access()
        self.logger.info("Creating user", username=user_input.username)
        return await self.data_client.post("/users", user_input.model_dump(exclude_none=True))

    @requires_write("settings.update_user")
    async def update_user(self, user_id: int, user_input: UserInput) -> Dict[str, Any]:
        self._require_access()
        self.logger.info("Updating user", target_user_id=user_id)
        return await self.data_client.put(f"/users/{user_id}", user_input.model_dump(exclude_none=True))

    async def get_store_settings(self) -> Dict[str, Any]:
        self._require_access()
        return await self.data_client.get("/settings/store")

    @requires_write("settings.update_store")
    async def update_store_settings(self, store: StoreSettingsInput) -> Dict[str, Any]:
        """Replace the single store configuration record."""
        self._require_access()
        self.logger.info("Updating store settings", store_name=store.store_name)
        return await self.data_client.put("/settings/store", store.model_dump())
