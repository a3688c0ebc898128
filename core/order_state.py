"""Order status rules.

    pending --(billing)--> confirmed
    pending --(cancel)---> cancelled

``confirmed`` and ``cancelled`` are terminal.
"""
from enum import Enum

from sqlalchemy import update
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import set_committed_value

from core.errors import ConflictFailure, InvalidTransition
from models.order import Order


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: set(),
    OrderStatus.CANCELLED: set(),
}


def can_transition(current, target) -> bool:
    return OrderStatus(target) in TRANSITIONS[OrderStatus(current)]


def is_terminal(status) -> bool:
    return not TRANSITIONS[OrderStatus(status)]


def ensure_transition(order: Order, target: OrderStatus):
    if not can_transition(order.status, target):
        raise InvalidTransition(
            f"Order {order.id} is {order.status} and cannot become {OrderStatus(target).value}",
            order_id=order.id,
            status=order.status,
        )


def advance(db: Session, order: Order, target: OrderStatus):
    """Move ``order`` to ``target`` inside the caller's transaction.

    The update only matches while the row still holds the status read
    earlier in the same transaction; if another transaction changed it
    first, nothing is written and ConflictFailure is raised.
    """
    ensure_transition(order, target)
    result = db.execute(
        update(Order)
        .where(Order.id == order.id, Order.status == order.status)
        .values(status=OrderStatus(target).value)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise ConflictFailure(f"Order {order.id} was modified concurrently", order_id=order.id)
    set_committed_value(order, "status", OrderStatus(target).value)
