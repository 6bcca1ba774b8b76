import asyncio
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any, List
from fastapi import HTTPException

from . import database
from .core import ProductIn, OrderIn, _make_product_dict
from .database import (
    PRODUCTS, ORDERS, PAYMENTS, IDEMPOTENCY,
    _LOCKS, _get_lock, _next_id, _find_by_sku
)

# This file contains the core logic for all API endpoints.

log = logging.getLogger(__name__)

# Inventory endpoints
async def list_inventory_logic() -> List[Dict[str, Any]]:
    return list(PRODUCTS.values())

async def get_inventory_logic(sku: str):
    p = _find_by_sku(sku)
    if not p:
        raise HTTPException(status_code=404, detail=f"SKU not found: {sku}")
    return p

async def create_inventory_logic(payload: ProductIn):
    if payload.quantity < 0:
        raise HTTPException(status_code=400, detail="quantity must be >= 0")
    if _find_by_sku(payload.skuCode):
        raise HTTPException(status_code=409, detail=f"duplicate sku: {payload.skuCode}")
    pid = _next_id()
    PRODUCTS[pid] = _make_product_dict(pid, payload)
    log.info("Adding new product: %s", payload.skuCode)
    return PRODUCTS[pid]

async def update_inventory_logic(product_id: int, payload: ProductIn):
    existing = PRODUCTS.get(product_id)
    if not existing:
        raise HTTPException(status_code=404, detail=f"Product not found ID: {product_id}")
    if payload.quantity < 0:
        raise HTTPException(status_code=400, detail="quantity must be >= 0")
    other = _find_by_sku(payload.skuCode)
    if other and other["id"] != product_id:
        raise HTTPException(status_code=409, detail=f"duplicate sku: {payload.skuCode}")
    PRODUCTS[product_id] = _make_product_dict(product_id, payload)
    log.info("Updating product ID: %s", product_id)
    return PRODUCTS[product_id]

async def delete_inventory_logic(product_id: int):
    PRODUCTS.pop(product_id, None)
    log.info("Deleting product ID: %s", product_id)

# Orders: one order resource per sku, grouped by orderNumber
async def place_order_logic(payload: OrderIn, idempotency_key: Optional[str]):
    keys = [f"product:{payload.skuCode}"]
    if idempotency_key:
        keys.append(f"idempotency:{idempotency_key}")
    locks = [_get_lock(k) for k in sorted(keys)]
    for l in locks:
        await l.acquire()

    try:
        if idempotency_key:
            prev = IDEMPOTENCY.get(idempotency_key)
            if prev is not None:
                return prev, False

        if payload.quantity <= 0:
            raise HTTPException(status_code=400, detail="quantity must be > 0")

        prod = _find_by_sku(payload.skuCode)
        if not prod:
            raise HTTPException(status_code=404, detail=f"SKU not found: {payload.skuCode}")

        if prod["quantity"] < payload.quantity:
            raise HTTPException(status_code=409, detail=f"insufficient_stock:{payload.skuCode}")
        prod["quantity"] -= payload.quantity

        oid = _next_id()
        order = {
            "id": oid,
            "orderNumber": payload.orderNumber,
            "skuCode": payload.skuCode,
            "price": prod.get("price"),
            "quantity": payload.quantity,
            "status": "PENDING",
            "orderTime": datetime.now(timezone.utc),
        }
        ORDERS[oid] = order
        if idempotency_key:
            IDEMPOTENCY[idempotency_key] = order
        log.info("Order saved for %s (sku %s)", payload.orderNumber, payload.skuCode)
        return order, True
    finally:
        for l in reversed(locks):
            l.release()

async def settle_payment_logic(order: Dict[str, Any]):
    # Runs after the order response has been sent.
    await asyncio.sleep(database.PAYMENT_DELAY)
    amount = (order.get("price") or 0) * order["quantity"]
    PAYMENTS.append({
        "id": uuid.uuid4().hex,
        "orderNumber": order["orderNumber"],
        "amount": amount,
        "paymentStatus": "COMPLETED",
        "transactionTime": datetime.now(timezone.utc),
    })
    order["status"] = "PAID"
    log.info("Payment saved for order: %s", order["orderNumber"])

# Payments
async def payment_status_logic(order_number: str) -> List[Dict[str, Any]]:
    return [p for p in PAYMENTS if p["orderNumber"] == order_number]

# Analytics
SALES_PERIODS = {"week": 7, "month": 30, "year": 365}

async def sales_analytics_logic(period: str) -> Dict[str, Any]:
    days = SALES_PERIODS.get(period)
    if days is None:
        raise HTTPException(status_code=400, detail=f"unknown period: {period}")
    since = datetime.now(timezone.utc) - timedelta(days=days)
    recent = [o for o in ORDERS.values() if o["orderTime"] >= since]
    revenue = sum((o.get("price") or 0) * o["quantity"] for o in recent)
    return {"period": period, "count": len(recent), "revenue": round(revenue, 2)}

# Utility: reset (for tests/demo)
async def reset_all_logic():
    PRODUCTS.clear()
    ORDERS.clear()
    PAYMENTS.clear()
    IDEMPOTENCY.clear()
    _LOCKS.clear()
    return {"status": "reset"}
