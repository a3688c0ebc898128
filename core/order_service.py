from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

import structlog
from sqlalchemy import update
from sqlalchemy.orm import Session, selectinload

from core.catalog_service import CatalogReader
from core.db import Database
from core.errors import InsufficientStock, NotFound
from core.logger import log_action
from core.order_builder import OrderBuild, build_order, check_entry, lookup, price_line, to_money
from core.order_state import OrderStatus, advance
from models.menu_item import MenuItem
from models.order import Order, OrderItem

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class OrderReceipt:
    order_id: int
    total_amount: Decimal
    status: str


def create_order(database: Database, user_id: int, items, special_instructions: Optional[str] = None) -> OrderReceipt:
    """Place an order: advisory check, then one serializable transaction.

    Either the order, all its lines and the stock decrements are committed
    together, or nothing is.
    """
    with database.session() as db:
        build = build_order(CatalogReader(db), user_id, items, special_instructions)

    with database.transaction() as db:
        receipt = _persist_order(db, build)

    logger.info("Order placed", order_id=receipt.order_id, user_id=user_id, total=str(receipt.total_amount))
    return receipt


def _persist_order(db: Session, build: OrderBuild) -> OrderReceipt:
    catalog = CatalogReader(db)

    # Re-check every line against current prices and stock
    requested = defaultdict(int)
    lines = []
    for line in build.lines:
        entry = lookup(catalog, line.item_id)
        requested[line.item_id] += line.quantity
        check_entry(entry, requested[line.item_id])
        lines.append(price_line(entry, line.quantity))

    for item_id, quantity in requested.items():
        reserve_stock(db, item_id, quantity)

    total = to_money(sum((line.subtotal for line in lines), Decimal("0")))
    order = Order(
        user_id=build.user_id,
        status=OrderStatus.PENDING.value,
        total_amount=total,
        special_instructions=build.special_instructions,
    )
    db.add(order)
    db.flush()  # get order.id

    db.add_all([
        OrderItem(
            order_id=order.id,
            item_id=line.item_id,
            quantity=line.quantity,
            unit_price=line.unit_price,
            subtotal=line.subtotal,
        )
        for line in lines
    ])
    log_action(db, build.user_id, f"Placed order #{order.id} ({len(lines)} items, total {total})", order_id=order.id)
    db.flush()
    return OrderReceipt(order_id=order.id, total_amount=total, status=order.status)


def reserve_stock(db: Session, item_id: int, quantity: int):
    """Decrement stock, but only if enough is left at write time."""
    result = db.execute(
        update(MenuItem)
        .where(MenuItem.id == item_id, MenuItem.available_quantity >= quantity)
        .values(available_quantity=MenuItem.available_quantity - quantity)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise InsufficientStock(item_id, requested=quantity)


def release_stock(db: Session, item_id: int, quantity: int):
    db.execute(
        update(MenuItem)
        .where(MenuItem.id == item_id)
        .values(available_quantity=MenuItem.available_quantity + quantity)
        .execution_options(synchronize_session=False)
    )


def _find_order(db: Session, user_id: int, order_id: int, with_items: bool = False) -> Order:
    query = db.query(Order).filter(Order.id == order_id, Order.user_id == user_id)
    if with_items:
        query = query.options(selectinload(Order.items))
    order = query.first()
    if not order:
        raise NotFound(f"Order {order_id} not found", order_id=order_id)
    return order


def get_order(database: Database, user_id: int, order_id: int) -> Order:
    """Order with its line items, only if it belongs to ``user_id``."""
    with database.session() as db:
        return _find_order(db, user_id, order_id, with_items=True)


def list_orders(database: Database, user_id: int):
    """All orders of a user, newest first."""
    with database.session() as db:
        return (
            db.query(Order)
            .filter(Order.user_id == user_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .all()
        )


def cancel_order(database: Database, user_id: int, order_id: int) -> Order:
    """Cancel a pending order and put its reserved stock back on the menu."""
    with database.transaction() as db:
        order = _find_order(db, user_id, order_id, with_items=True)
        advance(db, order, OrderStatus.CANCELLED)
        for item in order.items:
            release_stock(db, item.item_id, item.quantity)
        log_action(db, user_id, f"Cancelled order #{order.id}", order_id=order.id)

    logger.info("Order cancelled", order_id=order_id, user_id=user_id)
    return order
