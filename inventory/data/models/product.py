# inventory/data/models/product.py
from sqlalchemy import Column, Integer, Text, REAL

from inventory.data.database import Base


class ProductModel(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(Text, nullable=False)
    price = Column(REAL, nullable=False)
    category = Column(Text, nullable=False)
