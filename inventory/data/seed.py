# inventory/data/seed.py
from inventory.domain.schemas import Product
from inventory.repos.product_repo import ProductRepo
from inventory.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_PRODUCTS = (
    Product(id=1, name="Apples", price=1.0, category="fruit"),
    Product(id=2, name="Bananas", price=0.50, category="fruit"),
    Product(id=3, name="Oranges", price=1.20, category="fruit"),
    Product(id=4, name="Carrots", price=0.80, category="vegetable"),
    Product(id=5, name="Tomatoes", price=2.10, category="vegetable"),
)


async def seed_inventory(repo: ProductRepo, products=DEFAULT_PRODUCTS) -> int:
    # not forcing: only seed if empty
    if await repo.get_all().first():
        logger.info("Inventory already populated, skipping seed")
        return 0
    for product in products:
        await repo.insert(product)
    logger.info(f"Seeded {len(products)} products")
    return len(products)
