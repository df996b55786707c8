"""
Inventory module: products and categories.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..licensing.gate import requires_write
from .base import FeatureModule
from .permissions import ModuleKey


class ProductInput(BaseModel):
    """Product create/update payload."""
    code: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    price: float = Field(..., ge=0)
    stock: int = Field(0, ge=0)
    min_stock: int = Field(0, ge=0)
    category_id: int
    discount_percent: float = Field(0, ge=0, le=100)


class CategoryInput(BaseModel):
    """Category create/update payload."""
    name: str = Field(..., min_length=1)
    description: Optional[str] = None


class InventoryModule(FeatureModule):
    """Product and category management."""

    module_key = ModuleKey.INVENTORY

    async def list_products(self, search: Optional[str] = None,
                            category_id: Optional[int] = None) -> List[Dict[str, Any]]:
        self._require_access()
        params: Dict[str, Any] = {}
        if search:
            params["search"] = search
        if category_id is not None:
            params["category_id"] = category_id
        return await self.data_client.get("/products", params=params or None)

    async def low_stock_products(self) -> List[Dict[str, Any]]:
        self._require_access()
        return await self.data_client.get("/products/low-stock")

    @requires_write("inventory.create_product")
    async def create_product(self, product: ProductInput) -> Dict[str, Any]:
        user = self._require_access()
        self.logger.info("Creating product", code=product.code, user_id=user.id)
        return await self.data_client.post("/products", product.model_dump())

    @requires_write("inventory.update_product")
    async def update_product(self, product_id: int, product: ProductInput) -> Dict[str, Any]:
        user = self._require_access()
        self.logger.info("Updating product", product_id=product_id, user_id=user.id)
        return await self.data_client.put(f"/products/{product_id}", product.model_dump())

    async def list_categories(self) -> List[Dict[str, Any]]:
        self._require_access()
        return await self.data_client.get("/categories")

    @requires_write("inventory.create_category")
    async def create_category(self, category: CategoryInput) -> Dict[str, Any]:
        self._require_access()
        return await self.data_client.post("/categories", category.model_dump())

    @requires_write("inventory.update_category")
    async def update_category(self, category_id: int, category: CategoryInput) -> Dict[str, Any]:
        self._require_access()
        return await self.data_client.put(f"/categories/{category_id}", category.model_dump())
