# import all models so they register in Base.metadata
from inventory.data.models.product import ProductModel
from inventory.data.models.cart import CartModel

__all__ = ["ProductModel", "CartModel"]
