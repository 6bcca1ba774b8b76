from pydantic import BaseModel
from typing import Optional, Dict, Any

class ProductIn(BaseModel):
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

class OrderIn(BaseModel):
    orderNumber: str
    skuCode: str
    quantity: int

def _make_product_dict(product_id: int, p: ProductIn) -> Dict[str, Any]:
    return {"id": product_id, **p.model_dump()}
