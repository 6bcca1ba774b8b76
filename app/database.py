import asyncio
import itertools
import os
from typing import Dict, Any, List

# This file holds all the in-memory data stores and concurrency locks.

PRODUCTS: Dict[int, Dict[str, Any]] = {}
ORDERS: Dict[int, Dict[str, Any]] = {}
PAYMENTS: List[Dict[str, Any]] = []
IDEMPOTENCY: Dict[str, Dict[str, Any]] = {}
_LOCKS: Dict[str, asyncio.Lock] = {}
_IDS = itertools.count(1)

# Seconds between order acceptance and the payment record showing up.
PAYMENT_DELAY = float(os.environ.get("PAYMENT_DELAY", "1.0"))

def _get_lock(key: str) -> asyncio.Lock:
    if key not in _LOCKS:
        _LOCKS[key] = asyncio.Lock()
    return _LOCKS[key]

def _next_id() -> int:
    return next(_IDS)

def _find_by_sku(sku: str):
    for p in PRODUCTS.values():
        if p["skuCode"] == sku:
            return p
    return None
