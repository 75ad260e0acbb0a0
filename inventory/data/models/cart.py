# inventory/data/models/cart.py
from sqlalchemy import Column, Integer, Text, REAL

from inventory.data.database import Base


class CartModel(Base):
    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(Text, nullable=False)
    price = Column(REAL, nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
