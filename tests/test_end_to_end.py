# tests/test_end_to_end.py
import asyncio

import httpx
import pytest
from fastapi.testclient import TestClient

from app import database
from app.database import ORDERS
from app.main import app
from storefront.config import StoreSettings
from storefront.models import Failed, Submitted
from storefront.payments import PollState
from storefront.storefront import Storefront

client = TestClient(app)

@pytest.fixture(autouse=True)
def seeded(monkeypatch):
    monkeypatch.setattr(database, "PAYMENT_DELAY", 0)
    client.post("/reset")
    for sku, name, brand, category, price, qty in [
        ("NK-1", "Air Runner", "Nike", "Shoes", 120.0, 5),
        ("BK-1", "Fluent Python", "O'Reilly", "Books", 45.0, 1),
    ]:
        client.post("/api/inventory", json={"skuCode": sku, "name": name, "brand": brand,
                                            "category": category, "price": price, "quantity": qty})

def open_store(**overrides):
    settings = StoreSettings(api_url="http://test", api_token="secret", poll_interval=0, **overrides)
    return Storefront.open(settings.session(transport=httpx.ASGITransport(app=app)), settings)

def test_full_checkout_refreshes_stock():
    async def scenario():
        async with open_store() as store:
            await store.load()
            store.add_to_cart("NK-1")
            store.add_to_cart("NK-1")
            store.add_to_cart("BK-1")
            result = await store.place_order()
            state = await store.poller.wait()
            stock = {p.sku: p.quantity for p in store.snapshot}
            return store.status, result, state, stock

    status, result, state, stock = asyncio.run(scenario())
    assert isinstance(result, Submitted)
    assert state is PollState.RESOLVED
    assert status == f"Order {result.order_number}: Payment COMPLETED"
    assert stock == {"NK-1": 3, "BK-1": 0}
    lines = [o for o in ORDERS.values() if o["orderNumber"] == result.order_number]
    assert [(o["skuCode"], o["quantity"]) for o in lines] == [("NK-1", 2), ("BK-1", 1)]

def test_partial_failure_then_retry_of_remainder():
    async def scenario():
        async with open_store() as store:
            await store.load()
            store.add_to_cart("NK-1")
            store.add_to_cart("BK-1")
            store.add_to_cart("BK-1")
            failed = await store.place_order()
            cart_after_failure = store.cart.lines()

            # operator restocks, then the shopper retries
            database._find_by_sku("BK-1")["quantity"] = 10
            retried = await store.retry_failed()
            await store.poller.wait()
            return failed, cart_after_failure, retried

    failed, cart_after_failure, retried = asyncio.run(scenario())
    assert isinstance(failed, Failed)
    assert failed.reason == "HTTP 409: insufficient_stock:BK-1"
    assert [line.sku for line in failed.accepted] == ["NK-1"]
    assert len(cart_after_failure) == 2
    assert isinstance(retried, Submitted)
    lines = [o for o in ORDERS.values() if o["orderNumber"] == failed.order_number]
    assert [o["skuCode"] for o in lines] == ["NK-1", "BK-1"]

def test_bearer_token_is_sent():
    seen = []

    async def handler(request: httpx.Request):
        seen.append(request.headers.get("Authorization"))
        return httpx.Response(200, json=[])

    async def scenario():
        settings = StoreSettings(api_url="http://test", api_token="secret")
        async with Storefront.open(settings.session(transport=httpx.MockTransport(handler)), settings) as store:
            return await store.load()

    assert asyncio.run(scenario()) is True
    assert seen == ["Bearer secret"]

def test_unreachable_backend_is_not_fatal():
    async def handler(request: httpx.Request):
        raise httpx.ConnectError("refused", request=request)

    async def scenario():
        settings = StoreSettings(api_url="http://test", poll_interval=0, poll_attempts=2)
        async with Storefront.open(settings.session(transport=httpx.MockTransport(handler)), settings) as store:
            loaded = await store.load()
            return loaded, store.status

    loaded, status = asyncio.run(scenario())
    assert loaded is False
    assert status is None

def test_non_json_catalog_body_keeps_the_snapshot():
    inventory = [[{"id": 1, "skuCode": "NK-1", "price": 120.0, "quantity": 5}]]

    async def handler(request: httpx.Request):
        path = request.url.path
        if path.endswith("/inventory"):
            if inventory:
                return httpx.Response(200, json=inventory.pop())
            return httpx.Response(200, text="<html>gateway</html>")
        if path.endswith("/orders"):
            return httpx.Response(201, json={"id": 1})
        return httpx.Response(200, json=[{"orderNumber": path.rsplit("/", 1)[-1], "paymentStatus": "COMPLETED"}])

    async def scenario():
        settings = StoreSettings(api_url="http://test", poll_interval=0)
        async with Storefront.open(settings.session(transport=httpx.MockTransport(handler)), settings) as store:
            assert await store.load() is True
            reloaded = await store.load()
            store.add_to_cart("NK-1")
            result = await store.place_order()
            state = await store.poller.wait()
            return reloaded, result, state, store.status, [p.sku for p in store.snapshot]

    reloaded, result, state, status, skus = asyncio.run(scenario())
    assert reloaded is False
    assert state is PollState.RESOLVED
    assert status == f"Order {result.order_number}: Payment COMPLETED"
    assert skus == ["NK-1"]

def test_concurrent_replays_of_one_key_place_one_order():
    async def scenario():
        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as http:
            body = {"orderNumber": "ORD-R", "skuCode": "NK-1", "quantity": 2}
            headers = {"Idempotency-Key": "ORD-R:NK-1"}
            return await asyncio.gather(*[http.post("/api/orders", json=body, headers=headers)
                                          for _ in range(5)])

    responses = asyncio.run(scenario())
    assert [r.status_code for r in responses] == [201] * 5
    assert len({r.json()["id"] for r in responses}) == 1
    assert [o["skuCode"] for o in ORDERS.values()] == ["NK-1"]
    assert client.get("/api/inventory/NK-1").json()["quantity"] == 3
