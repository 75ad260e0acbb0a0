from inventory.data.context import StorageContext
from inventory.data.database import Base, DatabaseState, StoreDatabase
from inventory.data.inventory_database import InventoryDatabase
from inventory.data.cart_database import CartDatabase
from inventory.data.live_query import LiveQuery

__all__ = [
    "StorageContext",
    "Base",
    "DatabaseState",
    "StoreDatabase",
    "InventoryDatabase",
    "CartDatabase",
    "LiveQuery",
]
