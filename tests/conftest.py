# tests/conftest.py
import asyncio

import httpx
import pytest

from storefront.models import PaymentRecord, Product


def make_products():
    return [
        Product(sku="NK-1", name="Air Runner", brand="Nike", category="Shoes", price=120.0, quantity=5),
        Product(sku="BK-1", name="Fluent Python", brand="O'Reilly", category="Books", price=45.0, quantity=3),
        Product(sku="BK-2", name="Nike: The Story", brand="Scribner", category="Books", price=20.0, quantity=0),
        Product(sku="MISC", name="Gift Card", quantity=100),
    ]


def http_error(status: int, detail: str, url: str = "http://test/api/orders") -> httpx.HTTPStatusError:
    request = httpx.Request("POST", url)
    response = httpx.Response(status, json={"detail": detail}, request=request)
    return httpx.HTTPStatusError(f"HTTP {status}", request=request, response=response)


class FakeCatalogService:
    def __init__(self, products=None, fail=False):
        self.products = list(products if products is not None else make_products())
        self.fail = fail
        self.calls = 0

    async def list_all(self):
        self.calls += 1
        await asyncio.sleep(0)
        if self.fail:
            raise httpx.ConnectError("catalog down")
        return list(self.products)


class FakeOrderService:
    """Records every call and whether two calls ever overlapped."""

    def __init__(self, fail_on=()):
        self.fail_on = set(fail_on)
        self.calls = []
        self.events = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def create(self, order_number, sku, quantity, idempotency_key=None):
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        self.events.append(("start", sku))
        try:
            await asyncio.sleep(0)
            self.calls.append({"orderNumber": order_number, "skuCode": sku,
                               "quantity": quantity, "idempotencyKey": idempotency_key})
            if sku in self.fail_on:
                raise http_error(409, f"insufficient_stock:{sku}")
            return {"orderNumber": order_number, "skuCode": sku, "quantity": quantity, "status": "PENDING"}
        finally:
            self.events.append(("end", sku))
            self.in_flight -= 1


class FakePaymentService:
    """
    Plays back `script`, one entry per call: a list of status strings or an
    exception to raise. Once the script runs out every call returns [].
    """

    def __init__(self, script=()):
        self.script = list(script)
        self.calls = []

    async def status(self, order_number):
        self.calls.append(order_number)
        if not self.script:
            return []
        step = self.script.pop(0)
        if isinstance(step, Exception):
            raise step
        return [PaymentRecord(orderNumber=order_number, paymentStatus=s) for s in step]


@pytest.fixture
def products():
    return make_products()


@pytest.fixture
def catalog_service():
    return FakeCatalogService()


@pytest.fixture
def order_service():
    return FakeOrderService()
