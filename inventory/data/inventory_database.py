# inventory/data/inventory_database.py
from inventory.data.database import StoreDatabase
from inventory.data.models.product import ProductModel
from inventory.repos.product_repo import ProductRepo


class InventoryDatabase(StoreDatabase):
    """Product store (file ``inventory_database``)."""

    name = "inventory_database"
    VERSION = 1
    tables = (ProductModel.__table__,)

    def _create_repos(self) -> None:
        self._product_repo = ProductRepo(self, self.on_conflict)

    def product_repo(self) -> ProductRepo:
        return self._product_repo
