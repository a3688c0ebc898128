import pytest

from core.errors import ConflictFailure, InvalidTransition
from core.order_service import cancel_order, create_order, get_order
from core.order_state import OrderStatus, advance, can_transition, ensure_transition, is_terminal
from models.order import Order

USER = 1


class TestTransitions:
    @pytest.mark.parametrize(
        "current, target, allowed",
        [
            ("pending", "confirmed", True),
            ("pending", "cancelled", True),
            ("confirmed", "cancelled", False),
            ("confirmed", "pending", False),
            ("cancelled", "confirmed", False),
            ("cancelled", "pending", False),
            ("pending", "pending", False),
        ],
    )
    def test_can_transition(self, current, target, allowed):
        assert can_transition(current, target) is allowed

    def test_terminal_states(self):
        assert not is_terminal(OrderStatus.PENDING)
        assert is_terminal(OrderStatus.CONFIRMED)
        assert is_terminal("cancelled")

    def test_ensure_transition_raises(self):
        order = Order(id=3, status="confirmed")
        with pytest.raises(InvalidTransition) as info:
            ensure_transition(order, OrderStatus.CANCELLED)
        assert info.value.details["status"] == "confirmed"


class TestAdvance:
    def test_advance_updates_status(self, database, menu):
        receipt = create_order(database, USER, [(menu["thali"], 1)])
        with database.transaction() as db:
            order = db.get(Order, receipt.order_id)
            advance(db, order, OrderStatus.CONFIRMED)
            assert order.status == "confirmed"
        assert get_order(database, USER, receipt.order_id).status == "confirmed"

    def test_stale_status_is_a_conflict(self, database, menu):
        receipt = create_order(database, USER, [(menu["thali"], 1)])
        with pytest.raises(ConflictFailure):
            with database.transaction() as db:
                order = db.get(Order, receipt.order_id)
                # another request cancels the order after it was read here
                cancel_order(database, USER, receipt.order_id)
                advance(db, order, OrderStatus.CONFIRMED)
        assert get_order(database, USER, receipt.order_id).status == "cancelled"
