from inventory.repos.base_repo import BaseRepo
from inventory.repos.product_repo import ProductRepo
from inventory.repos.cart_repo import CartRepo

__all__ = ["BaseRepo", "ProductRepo", "CartRepo"]
