from pydantic import BaseModel, Field
from typing import List, Optional
from decimal import Decimal
from datetime import datetime
from enum import Enum

MAX_QUANTITY = 10_000

class OrderStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PREPARING = "PREPARING"
    OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"

class OrderItemIn(BaseModel):
    menu_item_id: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=1, le=MAX_QUANTITY)

class OrderCreate(BaseModel):
    items: List[OrderItemIn] = Field(..., min_length=1)

class OrderLineOut(BaseModel):
    id: str
    menu_item_id: str
    menu_item_name: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal

class OrderOut(BaseModel):
    id: str
    user_id: str
    items: List[OrderLineOut]
    total: Decimal
    status: OrderStatus
    created_at: datetime
    updated_at: Optional[datetime] = None
