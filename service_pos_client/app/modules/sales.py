"""
Sales module (point of sale).
"""

from typing import Any, Dict, List, Optional
from urllib.parse import quote

from pydantic import BaseModel, Field

from ..licensing.gate import requires_write
from .base import FeatureModule
from .permissions import ModuleKey


class SaleLine(BaseModel):
    product_id: int
    quantity: int = Field(..., gt=0)
    unit_price: float = Field(..., ge=0)
    discount_percent: float = Field(0, ge=0, le=100)


class SaleInput(BaseModel):
    """Sale payload; the cashier is taken from the session."""
    lines: List[SaleLine] = Field(..., min_length=1)
    payment_method: str = "cash"
    amount_received: Optional[float] = Field(None, ge=0)
    customer_name: Optional[str] = None


class SalesModule(FeatureModule):
    """Point of sale."""

    module_key = ModuleKey.SALES

    async def list_sales(self, date_from: Optional[str] = None,
                         date_to: Optional[str] = None) -> List[Dict[str, Any]]:
        self._require_access()
        params = {k: v for k, v in {"from": date_from, "to": date_to}.items() if v}
        return await self.data_client.get("/sales", params=params or None)

    async def find_product_by_code(self, code: str) -> Dict[str, Any]:
        """Active product by its scan code, for adding to the ticket."""
        self._require_access()
        return await self.data_client.get(f"/products/by-code/{quote(code.strip(), safe='')}")

    @requires_write("sales.create_sale")
    async def create_sale(self, sale: SaleInput) -> Dict[str, Any]:
        user = self._require_access()
        payload = sale.model_dump()
        payload["user_id"] = user.id
        self.logger.info("Registering sale", lines=len(sale.lines), user_id=user.id)
        return await self.data_client.post("/sales", payload)
