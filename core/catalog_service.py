from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from core.errors import NotFound
from models.menu_item import MenuItem


@dataclass(frozen=True)
class CatalogEntry:
    item_id: int
    name: str
    price: Decimal
    available_quantity: int
    is_available: bool


class CatalogReader:
    """Read-only price and stock lookups against the menu.

    Takes no locks. Inside a transaction the reads are as strong as the
    transaction's isolation level.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_item(self, item_id: int) -> CatalogEntry:
        row = self.db.execute(
            select(
                MenuItem.id,
                MenuItem.name,
                MenuItem.price,
                MenuItem.available_quantity,
                MenuItem.is_available,
            ).where(MenuItem.id == item_id)
        ).first()
        if row is None:
            raise NotFound(f"Menu item {item_id} not found", item_id=item_id)
        return CatalogEntry(
            item_id=row.id,
            name=row.name,
            price=Decimal(row.price),
            available_quantity=row.available_quantity,
            is_available=bool(row.is_available),
        )


def list_menu(db: Session):
    """Available menu items ordered by category, then name."""
    return db.query(MenuItem).filter(MenuItem.is_available.is_(True)).order_by(
        MenuItem.category, MenuItem.name
    ).all()


def list_menu_by_category(db: Session, category: str):
    """Available items of one category, ordered by name."""
    return db.query(MenuItem).filter(
        MenuItem.is_available.is_(True), MenuItem.category == category
    ).order_by(MenuItem.name).all()


def get_menu_item(db: Session, item_id: int) -> MenuItem:
    item = db.query(MenuItem).filter(MenuItem.id == item_id).first()
    if not item:
        raise NotFound(f"Menu item {item_id} not found", item_id=item_id)
    return item
