# inventory/data/cart_database.py
from inventory.data.database import StoreDatabase
from inventory.data.models.cart import CartModel
from inventory.repos.cart_repo import CartRepo


class CartDatabase(StoreDatabase):
    """Cart store (file ``cart_database``)."""

    name = "cart_database"
    VERSION = 1
    tables = (CartModel.__table__,)

    def _create_repos(self) -> None:
        self._cart_repo = CartRepo(self, self.on_conflict)

    def cart_repo(self) -> CartRepo:
        return self._cart_repo
