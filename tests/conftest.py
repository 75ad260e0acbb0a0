import pytest

from inventory.data import CartDatabase, InventoryDatabase, StorageContext
from inventory.domain.schemas import Cart, Product


@pytest.fixture
def product1():
    return Product(id=1, name="Apples", price=1.0, category="fruit")


@pytest.fixture
def product2():
    return Product(id=2, name="Bananas", price=0.50, category="fruit")


@pytest.fixture
def cart_item1():
    return Cart(id=1, name="Apples", price=1.0, quantity=3)


@pytest.fixture
def cart_item2():
    return Cart(id=2, name="Bananas", price=0.50, quantity=1)


@pytest.fixture
def inventory_db():
    """In-memory product store, fresh for every test."""
    db = InventoryDatabase.in_memory(on_conflict="reject")
    yield db
    db.close()


@pytest.fixture
def product_repo(inventory_db):
    return inventory_db.product_repo()


@pytest.fixture
def cart_db():
    """In-memory cart store, fresh for every test."""
    db = CartDatabase.in_memory(on_conflict="reject")
    yield db
    db.close()


@pytest.fixture
def cart_repo(cart_db):
    return cart_db.cart_repo()


@pytest.fixture
def storage_context(tmp_path):
    return StorageContext(tmp_path / "data")


@pytest.fixture(autouse=True)
def reset_registries():
    """Process-wide instances must not leak between tests."""
    yield
    InventoryDatabase._reset_instance()
    CartDatabase._reset_instance()
