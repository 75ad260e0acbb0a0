# inventory/domain/schemas.py
from enum import Enum

from pydantic import BaseModel, Field, ConfigDict


class OnConflict(str, Enum):
    """What insert does when the primary key already exists."""

    REJECT = "reject"
    REPLACE = "replace"
    IGNORE = "ignore"

    @classmethod
    def parse(cls, value: "OnConflict | str") -> "OnConflict":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            allowed = ", ".join(p.value for p in cls)
            raise ValueError(f"Unknown conflict policy {value!r}, expected one of: {allowed}") from None


class Product(BaseModel):
    """Inventory item (fruit/vegetable)."""

    id: int = Field(..., description="Primary key, assigned by the caller")
    name: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    category: str

    model_config = ConfigDict(from_attributes=True)


class Cart(BaseModel):
    """Line item added to the shopping cart."""

    id: int = Field(..., description="Primary key, assigned by the caller")
    name: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    quantity: int = Field(1, ge=1)

    model_config = ConfigDict(from_attributes=True)
