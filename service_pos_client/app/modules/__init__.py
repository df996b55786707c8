"""
Feature modules package for the POS client.

Each business module (sales, inventory, reporting, returns, settings) is
a thin async facade over the data service. Modules enforce two checks
independently of each other and of the backend:

- role permissions, from the static table in permissions;
- the entitlement gate, on every mutating entry point.
"""

from .data_client import DataServiceClient
from .inventory import InventoryModule
from .sales import SalesModule
from .returns import ReturnsModule
from .settings import SettingsModule
from .reporting import ReportingModule

__all__ = [
    "DataServiceClient",
    "InventoryModule",
    "SalesModule",
    "ReturnsModule",
    "SettingsModule",
    "ReportingModule",
]
