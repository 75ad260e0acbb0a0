# inventory/repos/cart_repo.py
from inventory.data.models.cart import CartModel
from inventory.domain.schemas import Cart
from inventory.repos.base_repo import BaseRepo


class CartRepo(BaseRepo[Cart]):
    model = CartModel
    entity = Cart
