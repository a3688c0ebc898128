"""Integration tests for the HTTP routes via TestClient."""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from core.config import Settings
from core.db import Database
from main import create_app
from models.menu_item import MenuItem

HEADERS = {"X-User-Id": "42"}


@pytest.fixture()
def client(tmp_path):
    url = f"sqlite:///{tmp_path / 'api.db'}"
    seed = Database(url)
    seed.create_all()
    with seed.transaction() as db:
        db.add_all([
            MenuItem(name="Veg Thali", category="Meals", price=Decimal("150.00"), available_quantity=10),
            MenuItem(name="Chicken Biryani", category="Meals", price=Decimal("300.00"), available_quantity=1),
            MenuItem(name="Old Special", category="Meals", price=Decimal("90.00"), available_quantity=5, is_available=False),
            MenuItem(name="Masala Chai", category="Beverages", price=Decimal("20.00"), available_quantity=50),
            MenuItem(name="Cold Coffee", category="Beverages", price=Decimal("80.00"), available_quantity=20),
        ])
    seed.dispose()

    app = create_app(Settings(database_url=url, log_level="WARNING"))
    with TestClient(app) as client:
        yield client


def _place(client, items):
    return client.post("/api/orders", json={"items": items}, headers=HEADERS)


def test_health(client):
    assert client.get("/health").json()["status"] == "ok"


def test_menu_lists_available_items(client):
    response = client.get("/api/menu")
    assert response.status_code == 200
    assert [m["name"] for m in response.json()] == ["Cold Coffee", "Masala Chai", "Chicken Biryani", "Veg Thali"]
    assert client.get("/api/menu/999").status_code == 404


def test_order_pay_cancel_scenario(client):
    response = _place(client, [{"item_id": 1, "quantity": 2}, {"item_id": 2, "quantity": 1}])
    assert response.status_code == 201
    created = response.json()
    assert Decimal(created["total_amount"]) == Decimal("600.00")
    assert created["status"] == "pending"
    order_id = created["order_id"]

    response = client.post(
        "/api/billing", json={"order_id": order_id, "payment_method": "cash"}, headers=HEADERS
    )
    assert response.status_code == 201
    bill = response.json()
    assert Decimal(bill["amount"]) == Decimal("600.00")
    assert bill["payment_status"] == "completed"

    order = client.get(f"/api/orders/{order_id}", headers=HEADERS).json()
    assert order["status"] == "confirmed"
    assert sum(Decimal(i["subtotal"]) for i in order["items"]) == Decimal(order["total_amount"])

    response = client.put(f"/api/orders/{order_id}/cancel", headers=HEADERS)
    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "invalid_transition"

    response = client.post(
        "/api/billing", json={"order_id": order_id, "payment_method": "cash"}, headers=HEADERS
    )
    assert response.status_code == 409

    bills = client.get("/api/billing", headers=HEADERS).json()
    assert len(bills) == 1
    assert client.get(f"/api/billing/{bill['bill_id']}", headers=HEADERS).status_code == 200
    assert client.get(f"/api/billing/{bill['bill_id']}", headers={"X-User-Id": "7"}).status_code == 404


def test_insufficient_stock(client):
    response = _place(client, [{"item_id": 2, "quantity": 2}])
    assert response.status_code == 409
    detail = response.json()["detail"]
    assert detail["code"] == "insufficient_stock"
    assert detail["item_id"] == 2
    assert client.get("/api/orders", headers=HEADERS).json() == []


def test_unavailable_item_and_bad_quantity(client):
    response = _place(client, [{"item_id": 3, "quantity": 1}])
    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "item_unavailable"

    response = _place(client, [{"item_id": 1, "quantity": 0}])
    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "validation_failure"

    assert _place(client, []).status_code == 400


def test_cancel_and_list(client):
    first = _place(client, [{"item_id": 1, "quantity": 1}]).json()["order_id"]
    second = _place(client, [{"item_id": 1, "quantity": 3}]).json()["order_id"]

    response = client.put(f"/api/orders/{first}/cancel", headers=HEADERS)
    assert response.status_code == 200

    orders = client.get("/api/orders", headers=HEADERS).json()
    assert [(o["id"], o["status"]) for o in orders] == [(second, "pending"), (first, "cancelled")]
    assert client.get(f"/api/orders/{first}", headers={"X-User-Id": "7"}).status_code == 404


def test_requires_user_header(client):
    assert client.get("/api/orders").status_code == 401
    assert client.get("/api/orders", headers={"X-User-Id": "abc"}).status_code == 401


def test_menu_by_category(client):
    response = client.get("/api/menu/category/Meals")
    assert response.status_code == 200
    assert [m["name"] for m in response.json()] == ["Chicken Biryani", "Veg Thali"]

    drinks = client.get("/api/menu/category/Beverages").json()
    assert [m["name"] for m in drinks] == ["Cold Coffee", "Masala Chai"]
    assert client.get("/api/menu/category/Desserts").json() == []


@pytest.mark.parametrize(
    "items",
    [
        [{"item_id": 1, "quantity": 2.5}],
        [{"item_id": "x", "quantity": 1}],
        [{"item_id": 1}],
    ],
)
def test_malformed_items_share_validation_shape(client, items):
    response = _place(client, items)
    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["code"] == "validation_failure"
    assert detail["errors"]
    assert client.get("/api/orders", headers=HEADERS).json() == []


def test_malformed_billing_request(client):
    response = client.post("/api/billing", json={"order_id": "abc"}, headers=HEADERS)
    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "validation_failure"
