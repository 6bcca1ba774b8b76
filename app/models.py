# app/models.py
from datetime import datetime
from pydantic import BaseModel
from typing import Optional

class Product(BaseModel):
    id: int
    skuCode: str
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    originalPrice: Optional[float] = None
    imageUrl: Optional[str] = None
    category: Optional[str] = None
    brand: Optional[str] = None
    rating: Optional[float] = None
    reviewCount: Optional[int] = None
    quantity: int = 0

class Order(BaseModel):
    id: int
    orderNumber: str
    skuCode: str
    price: Optional[float] = None
    quantity: int
    status: str = "PENDING"
    orderTime: datetime

class Payment(BaseModel):
    id: str
    orderNumber: str
    amount: float
    paymentStatus: str
    transactionTime: datetime
