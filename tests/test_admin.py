# tests/test_admin.py
import httpx
import pytest
from fastapi.testclient import TestClient

from app import database
from app.main import app
from sdk.admin import AdminClient

def make_admin(monkeypatch):
    monkeypatch.setattr(database, "PAYMENT_DELAY", 0)
    admin = AdminClient(base_url="http://testserver", api_key="ops", session=TestClient(app))
    admin.reset()
    return admin

def test_create_list_update_delete(monkeypatch):
    admin = make_admin(monkeypatch)
    created = admin.create_product("SKU-1", 4, name="Lamp", brand="Acme", price=19.5, ignored="x")
    assert created["skuCode"] == "SKU-1"
    assert "ignored" not in created

    updated = admin.update_product(created["id"], price=17.0)
    assert updated["price"] == 17.0
    assert updated["name"] == "Lamp"
    assert updated["quantity"] == 4

    assert [p["skuCode"] for p in admin.list_products()] == ["SKU-1"]
    assert admin.get_product("SKU-1")["price"] == 17.0

    admin.delete_product(created["id"])
    assert admin.list_products() == []
    assert admin.get_product("SKU-1") is None

def test_bearer_header_is_configured(monkeypatch):
    admin = make_admin(monkeypatch)
    assert admin.session.headers["Authorization"] == "Bearer ops"

def test_payment_status_lookup(monkeypatch):
    admin = make_admin(monkeypatch)
    admin.create_product("SKU-2", 2, price=5.0)
    admin.session.post("http://testserver/api/orders",
                       json={"orderNumber": "ORD-5", "skuCode": "SKU-2", "quantity": 1})
    records = admin.payment_status("ORD-5")
    assert [r["paymentStatus"] for r in records] == ["COMPLETED"]

def test_sales_analytics(monkeypatch):
    admin = make_admin(monkeypatch)
    admin.create_product("SKU-3", 5, price=4.0)
    admin.session.post("http://testserver/api/orders",
                       json={"orderNumber": "ORD-6", "skuCode": "SKU-3", "quantity": 3})
    assert admin.sales_analytics("month") == {"period": "month", "count": 1, "revenue": 12.0}
    with pytest.raises(httpx.HTTPStatusError):
        admin.sales_analytics("decade")
