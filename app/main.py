# app/main.py
from fastapi import FastAPI, BackgroundTasks, Header
from fastapi.middleware.cors import CORSMiddleware
from typing import Optional, List

from .core import ProductIn, OrderIn
from .models import Product, Order, Payment
from .logic import (
    list_inventory_logic, get_inventory_logic, create_inventory_logic,
    update_inventory_logic, delete_inventory_logic, place_order_logic,
    settle_payment_logic, payment_status_logic, sales_analytics_logic, reset_all_logic
)

app = FastAPI(title="quantum-store backend (in-memory demo)")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------
# Inventory (catalog) endpoints
# ---------------------------
@app.get("/api/inventory", response_model=List[Product])
async def list_inventory():
    return await list_inventory_logic()

@app.get("/api/inventory/{sku}", response_model=Product)
async def get_inventory(sku: str):
    return await get_inventory_logic(sku)

@app.post("/api/inventory", status_code=201, response_model=Product)
async def create_inventory(payload: ProductIn):
    return await create_inventory_logic(payload)

@app.put("/api/inventory/{product_id}", response_model=Product)
async def update_inventory(product_id: int, payload: ProductIn):
    return await update_inventory_logic(product_id, payload)

@app.delete("/api/inventory/{product_id}", status_code=204)
async def delete_inventory(product_id: int):
    await delete_inventory_logic(product_id)

# ---------------------------
# Order endpoints
# ---------------------------
@app.post("/api/orders", status_code=201, response_model=Order)
async def place_order(
    payload: OrderIn,
    background: BackgroundTasks,
    idempotency_key: Optional[str] = Header(None),
):
    order, created = await place_order_logic(payload, idempotency_key)
    if created:
        background.add_task(settle_payment_logic, order)
    return order

@app.get("/api/orders/analytics/sales")
async def sales_analytics(period: str = "week"):
    return await sales_analytics_logic(period)

# ---------------------------
# Payment endpoints
# ---------------------------
@app.get("/api/payments/{order_number}", response_model=List[Payment])
async def payment_status(order_number: str):
    return await payment_status_logic(order_number)

@app.post("/reset")
async def reset_all():
    return await reset_all_logic()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8080)
