# storefront/models.py
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Union

class Product(BaseModel):
    """Read-only client copy of a catalog entry."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: Optional[int] = None
    sku: str = Field(alias="skuCode")
    name: Optional[str] = None
    brand: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    original_price: Optional[float] = Field(default=None, alias="originalPrice")
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    rating: Optional[float] = None
    review_count: Optional[int] = Field(default=None, alias="reviewCount")
    quantity: int = 0

    @property
    def in_stock(self) -> bool:
        return self.quantity > 0

class CartLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    sku: str
    quantity: int

class PaymentRecord(BaseModel):
    """Status entry reported by the payment service. Status is opaque."""
    model_config = ConfigDict(populate_by_name=True)

    order_number: str = Field(alias="orderNumber")
    status: str = Field(alias="paymentStatus")
    amount: Optional[float] = None
    transaction_time: Optional[datetime] = Field(default=None, alias="transactionTime")

# Submission results
class Submitted(BaseModel):
    order_number: str
    lines: List[CartLine]

class Failed(BaseModel):
    order_number: str
    reason: str
    accepted: List[CartLine] = Field(default_factory=list)
    remaining: List[CartLine] = Field(default_factory=list)

SubmissionResult = Union[Submitted, Failed]
