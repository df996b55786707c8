"""
Role to module permission table.
"""

from enum import Enum, IntEnum
from typing import Dict, FrozenSet, Optional


class ModuleKey(str, Enum):
    """Business modules of the POS client."""
    SALES = "sales"
    INVENTORY = "inventory"
    REPORTING = "reporting"
    RETURNS = "returns"
    SETTINGS = "settings"


class Role(IntEnum):
    """Role ids as stored by the data service."""
    ADMINISTRATOR = 1
    CASHIER = 2
    STOCK_KEEPER = 3


ROLE_PERMISSIONS: Dict[int, FrozenSet[ModuleKey]] = {
    Role.ADMINISTRATOR: frozenset(ModuleKey),
    Role.CASHIER: frozenset({ModuleKey.SALES, ModuleKey.REPORTING}),
    Role.STOCK_KEEPER: frozenset({ModuleKey.INVENTORY}),
}


def has_permission(role_id: Optional[int], module: ModuleKey) -> bool:
    """Unknown roles get nothing."""
    if role_id is None:
        return False
    return module in ROLE_PERMISSIONS.get(role_id, frozenset())


def allowed_modules(role_id: Optional[int]) -> FrozenSet[ModuleKey]:
    if role_id is None:
        return frozenset()
    return ROLE_PERMISSIONS.get(role_id, frozenset())
