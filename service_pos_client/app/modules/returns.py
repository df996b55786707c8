"""
Returns module.
"""

from typing import Any, Dict, List
from urllib.parse import quote

from pydantic import BaseModel, Field

from ..licensing.gate import requires_write
from .base import FeatureModule
from .permissions import ModuleKey


class ReturnLine(BaseModel):
    product_id: int
    quantity: int = Field(..., gt=0)


class ReturnInput(BaseModel):
    sale_id: int
    reason: str = Field(..., min_length=1)
    lines: List[ReturnLine] = Field(..., min_length=1)


class ReturnsModule(FeatureModule):
    """Processing of customer returns."""

    module_key = ModuleKey.RETURNS

    async def list_returns(self) -> List[Dict[str, Any]]:
        self._require_access()
        return await self.data_client.get("/returns")

    @requires_write("returns.create_return")
    async def create_return(self, return_input: ReturnInput) -> Dict[str, Any]:
        user = self._require_access()
        payload = return_input.model_dump()
        payload["user_id"] = user.id
        self.logger.info("Processing return", sale_id=return_input.sale_id, user_id=user.id)
        return await self.data_client.post("/returns", payload)

    async def find_sale(self, folio: str) -> Dict[str, Any]:
        """Completed sale with its lines, looked up by receipt folio."""
        self._require_access()
        return await self.data_client.get(f"/sales/by-folio/{quote(folio.strip(), safe='')}")
