# tests/test_backend.py
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from app import database
from app.main import app
from app.database import ORDERS, PAYMENTS

client = TestClient(app)

@pytest.fixture(autouse=True)
def reset(monkeypatch):
    monkeypatch.setattr(database, "PAYMENT_DELAY", 0)
    client.post("/reset")

def register(sku="SKU-1", quantity=5, price=10.0, **extra):
    r = client.post("/api/inventory", json={"skuCode": sku, "quantity": quantity, "price": price, **extra})
    assert r.status_code == 201
    return r.json()

def test_inventory_crud():
    p = register(name="Tst", category="Books", brand="Acme", originalPrice=12.0)
    assert client.get("/api/inventory").json() == [p]
    assert client.get("/api/inventory/SKU-1").json()["name"] == "Tst"

    r = client.put(f"/api/inventory/{p['id']}", json={**p, "quantity": 9})
    assert r.status_code == 200
    assert r.json()["quantity"] == 9

    assert client.delete(f"/api/inventory/{p['id']}").status_code == 204
    assert client.get("/api/inventory").json() == []
    assert client.get("/api/inventory/SKU-1").status_code == 404

def test_duplicate_sku_rejected():
    register()
    r = client.post("/api/inventory", json={"skuCode": "SKU-1", "quantity": 1})
    assert r.status_code == 409

def test_order_decrements_stock_and_records_payment():
    register(quantity=5, price=10.0)
    r = client.post("/api/orders", json={"orderNumber": "ORD-1", "skuCode": "SKU-1", "quantity": 2},
                    headers={"Idempotency-Key": "ORD-1:SKU-1"})
    assert r.status_code == 201
    assert r.json()["status"] == "PENDING"
    assert client.get("/api/inventory/SKU-1").json()["quantity"] == 3

    payments = client.get("/api/payments/ORD-1").json()
    assert len(payments) == 1
    assert payments[0]["paymentStatus"] == "COMPLETED"
    assert payments[0]["amount"] == 20.0
    assert client.get("/api/payments/ORD-UNKNOWN").json() == []

def test_replayed_idempotency_key_is_not_applied_twice():
    register(quantity=5)
    body = {"orderNumber": "ORD-2", "skuCode": "SKU-1", "quantity": 1}
    first = client.post("/api/orders", json=body, headers={"Idempotency-Key": "k1"}).json()
    second = client.post("/api/orders", json=body, headers={"Idempotency-Key": "k1"}).json()
    assert first["id"] == second["id"]
    assert client.get("/api/inventory/SKU-1").json()["quantity"] == 4
    assert len(ORDERS) == 1
    assert len(PAYMENTS) == 1

def test_insufficient_stock_and_unknown_sku():
    register(quantity=1)
    r = client.post("/api/orders", json={"orderNumber": "ORD-3", "skuCode": "SKU-1", "quantity": 2})
    assert r.status_code == 409
    r = client.post("/api/orders", json={"orderNumber": "ORD-3", "skuCode": "NOPE", "quantity": 1})
    assert r.status_code == 404
    r = client.post("/api/orders", json={"orderNumber": "ORD-3", "skuCode": "SKU-1", "quantity": 0})
    assert r.status_code == 400
    assert client.get("/api/payments/ORD-3").json() == []

def test_sales_analytics_windows():
    register(quantity=10, price=10.0)
    for n, qty in [(1, 2), (2, 1), (3, 3)]:
        client.post("/api/orders", json={"orderNumber": f"ORD-{n}", "skuCode": "SKU-1", "quantity": qty})
    now = datetime.now(timezone.utc)
    by_number = {o["orderNumber"]: o for o in ORDERS.values()}
    by_number["ORD-2"]["orderTime"] = now - timedelta(days=20)
    by_number["ORD-3"]["orderTime"] = now - timedelta(days=400)

    week = client.get("/api/orders/analytics/sales", params={"period": "week"}).json()
    assert week == {"period": "week", "count": 1, "revenue": 20.0}
    month = client.get("/api/orders/analytics/sales", params={"period": "month"}).json()
    assert (month["count"], month["revenue"]) == (2, 30.0)
    year = client.get("/api/orders/analytics/sales", params={"period": "year"}).json()
    assert year["count"] == 2
    assert client.get("/api/orders/analytics/sales").json()["period"] == "week"
    assert client.get("/api/orders/analytics/sales", params={"period": "decade"}).status_code == 400
