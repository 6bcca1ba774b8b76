"""
Async clients for the three backend services the storefront talks to:
- Catalog service (inventory listing)
- Order service (per-sku order creation)
- Payment service (status lookup by order number)
Each class wraps one protocol concern and logs failures before re-raising;
callers decide whether a failure is fatal.
"""

import logging
from typing import List, Optional, Dict, Any

import httpx

from .models import Product, PaymentRecord

log = logging.getLogger(__name__)


class CatalogService:
    """Reads the full product list. No paging or query parameters."""

    def __init__(self, http: httpx.AsyncClient):
        self.http = http

    async def list_all(self) -> List[Product]:
        """
        Fetches every product from the catalog service.
        Returns:
            list[Product]: The catalog in backend order.
        Raises:
            httpx.HTTPError: On transport errors or a 4xx/5xx response.
        """
        try:
            response = await self.http.get("/inventory")
            response.raise_for_status()
        except httpx.HTTPError as e:
            log.error(f"Catalog fetch failed: {e}")
            raise
        return [Product.model_validate(item) for item in response.json()]


class OrderService:
    """Creates one order resource per cart line."""

    def __init__(self, http: httpx.AsyncClient):
        self.http = http

    async def create(self, order_number: str, sku: str, quantity: int,
                     idempotency_key: Optional[str] = None) -> Dict[str, Any]:
        """
        Submits a single order line.
        Args:
            order_number (str): Identifier shared by every line of one checkout.
            sku (str): Product being ordered.
            quantity (int): Requested quantity (> 0).
            idempotency_key (str): Sent as `Idempotency-Key` so a resubmitted line is not duplicated.
        Returns:
            dict: The order resource created by the backend.
        Raises:
            httpx.HTTPStatusError: If the service rejects the line (4xx/5xx).
            httpx.TransportError: If the service cannot be reached.
        """
        payload = {"orderNumber": order_number, "skuCode": sku, "quantity": quantity}
        headers = {"Idempotency-Key": idempotency_key} if idempotency_key else None
        try:
            response = await self.http.post("/orders", json=payload, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            log.warning(f"[Order: {order_number}] Line {sku} rejected (HTTP {e.response.status_code}).")
            raise
        except httpx.HTTPError as e:
            log.error(f"[Order: {order_number}] Order service unreachable for line {sku}: {e}")
            raise
        return response.json()


class PaymentService:
    """Looks up payment records; an empty list means 'not yet known'."""

    def __init__(self, http: httpx.AsyncClient):
        self.http = http

    async def status(self, order_number: str) -> List[PaymentRecord]:
        response = await self.http.get(f"/payments/{order_number}")
        response.raise_for_status()
        return [PaymentRecord.model_validate(item) for item in response.json()]
