"""
Reporting module. Read-only, so never gated by the license.
"""

from typing import Any, Dict, List, Optional

from .base import FeatureModule
from .permissions import ModuleKey


class ReportingModule(FeatureModule):
    """Sales reports."""

    module_key = ModuleKey.REPORTING

    async def sales_summary(self, date_from: Optional[str] = None,
                            date_to: Optional[str] = None) -> Dict[str, Any]:
        self._require_access()
        params = {k: v for k, v in {"from": date_from, "to": date_to}.items() if v}
        return await self.data_client.get("/reports/sales-summary", params=params or None)

    async def top_products(self, limit: int = 10) -> List[Dict[str, Any]]:
        self._require_access()
        return await self.data_client.get("/reports/top-products", params={"limit": limit})

    async def sales_today(self) -> List[Dict[str, Any]]:
        self._require_access()
        return await self.data_client.get("/reports/sales-today")

    async def stats_with_returns(self, date_from: str, date_to: str) -> Dict[str, Any]:
        """Sales totals for the range with returned amounts netted out."""
        self._require_access()
        return await self.data_client.get(
            "/reports/stats-with-returns",
            params={"from": date_from, "to": date_to}
        )
