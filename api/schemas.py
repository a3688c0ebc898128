from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class MenuItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    price: Decimal
    available_quantity: int
    is_available: bool
    image_url: Optional[str] = None


class OrderItemRequest(BaseModel):
    item_id: int
    quantity: int


class CreateOrderRequest(BaseModel):
    items: List[OrderItemRequest]
    special_instructions: Optional[str] = None


class OrderCreated(BaseModel):
    order_id: int
    total_amount: Decimal
    status: str


class OrderItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    item_id: int
    quantity: int
    unit_price: Decimal
    subtotal: Decimal


class OrderSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    status: str
    total_amount: Decimal
    created_at: datetime
    delivery_date: Optional[datetime] = None
    special_instructions: Optional[str] = None


class OrderRead(OrderSummary):
    items: List[OrderItemRead]


class CreateBillingRequest(BaseModel):
    order_id: int
    payment_method: str
    transaction_id: Optional[str] = None


class BillingCreated(BaseModel):
    bill_id: int
    order_id: int
    amount: Decimal
    payment_status: str


class BillingRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    order_id: int
    amount: Decimal
    payment_method: str
    payment_status: str
    transaction_id: Optional[str] = None
    paid_at: Optional[datetime] = None
    created_at: datetime


class StatusResponse(BaseModel):
    status: str = "ok"
    message: Optional[str] = None
