"""Product inventory and shopping cart stores backed by SQLite."""

from inventory.data import CartDatabase, InventoryDatabase, StorageContext
from inventory.domain import (
    Cart,
    ConstraintViolation,
    OnConflict,
    Product,
    StorageError,
    StorageInitError,
)

__all__ = [
    "CartDatabase",
    "InventoryDatabase",
    "StorageContext",
    "Cart",
    "Product",
    "OnConflict",
    "StorageError",
    "StorageInitError",
    "ConstraintViolation",
]
