from inventory.domain.errors import StorageError, StorageInitError, ConstraintViolation
from inventory.domain.schemas import OnConflict, Product, Cart

__all__ = [
    "StorageError",
    "StorageInitError",
    "ConstraintViolation",
    "OnConflict",
    "Product",
    "Cart",
]
