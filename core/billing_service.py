from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

import structlog
from sqlalchemy.orm import Session

from core.db import Database
from core.errors import NotFound, ValidationFailure
from core.logger import log_action
from core.order_state import OrderStatus, advance, ensure_transition
from models.billing import Billing
from models.order import Order

logger = structlog.get_logger(__name__)

PAYMENT_COMPLETED = "completed"


@dataclass(frozen=True)
class BillingReceipt:
    bill_id: int
    order_id: int
    amount: Decimal
    payment_status: str


def create_billing(database: Database, user_id: int, order_id: int, payment_method: str,
                   transaction_id: Optional[str] = None) -> BillingReceipt:
    """
    Pay for a pending order.

    The bill is written and the order confirmed in one transaction; the
    amount is always the order's own total.
    """
    if not isinstance(payment_method, str) or not payment_method.strip():
        raise ValidationFailure("payment_method is required")
    if transaction_id is not None and not isinstance(transaction_id, str):
        raise ValidationFailure("transaction_id must be text")

    with database.transaction() as db:
        order = _find_payable_order(db, user_id, order_id)
        # Claim the order first; a concurrent payer then matches no row
        advance(db, order, OrderStatus.CONFIRMED)
        now = datetime.utcnow()
        bill = Billing(
            order_id=order.id,
            user_id=user_id,
            amount=order.total_amount,
            payment_method=payment_method.strip(),
            payment_status=PAYMENT_COMPLETED,
            transaction_id=transaction_id or None,
            paid_at=now,
            created_at=now,
        )
        db.add(bill)
        db.flush()  # get bill.id
        log_action(db, user_id, f"Paid order #{order.id} ({bill.amount} via {bill.payment_method})", order_id=order.id)
        receipt = BillingReceipt(
            bill_id=bill.id,
            order_id=order.id,
            amount=Decimal(order.total_amount),
            payment_status=bill.payment_status,
        )

    logger.info("Payment recorded", bill_id=receipt.bill_id, order_id=order_id, user_id=user_id)
    return receipt


def _find_payable_order(db: Session, user_id: int, order_id: int) -> Order:
    order = db.query(Order).filter(Order.id == order_id, Order.user_id == user_id).first()
    if not order:
        raise NotFound(f"Order {order_id} not found", order_id=order_id)
    ensure_transition(order, OrderStatus.CONFIRMED)
    return order


def get_billing(database: Database, user_id: int, bill_id: int) -> Billing:
    with database.session() as db:
        bill = db.query(Billing).filter(Billing.id == bill_id, Billing.user_id == user_id).first()
        if not bill:
            raise NotFound(f"Bill {bill_id} not found", bill_id=bill_id)
        return bill


def list_billings(database: Database, user_id: int):
    """Bills of a user, newest first."""
    with database.session() as db:
        return (
            db.query(Billing)
            .filter(Billing.user_id == user_id)
            .order_by(Billing.created_at.desc(), Billing.id.desc())
            .all()
        )
