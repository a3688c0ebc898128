from decimal import Decimal

import pytest

from core.db import Database
from models.menu_item import MenuItem


@pytest.fixture()
def database(tmp_path):
    """Fresh file-backed SQLite database per test."""
    db = Database(f"sqlite:///{tmp_path / 'canteen.db'}", pool_size=5, max_overflow=10, pool_timeout=5)
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture()
def add_item(database):
    """Factory: insert a menu item and return its id."""

    def _add(name="Item", price="100.00", available_quantity=10, is_available=True, category="Meals"):
        with database.transaction() as db:
            item = MenuItem(
                name=name,
                category=category,
                price=Decimal(price),
                available_quantity=available_quantity,
                is_available=is_available,
            )
            db.add(item)
            db.flush()
            return item.id

    return _add


@pytest.fixture()
def menu(add_item):
    return {
        "thali": add_item("Veg Thali", "150.00", 10),
        "biryani": add_item("Chicken Biryani", "300.00", 5),
    }


@pytest.fixture()
def stock_of(database):
    def _stock(item_id):
        with database.session() as db:
            return db.get(MenuItem, item_id).available_quantity

    return _stock


@pytest.fixture()
def set_price(database):
    def _set(item_id, price):
        with database.transaction() as db:
            db.get(MenuItem, item_id).price = Decimal(price)

    return _set
