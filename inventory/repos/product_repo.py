# inventory/repos/product_repo.py
from inventory.data.models.product import ProductModel
from inventory.domain.schemas import Product
from inventory.repos.base_repo import BaseRepo


class ProductRepo(BaseRepo[Product]):
    model = ProductModel
    entity = Product
