from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from decimal import Decimal
from datetime import datetime

class MenuItemCreate(BaseModel):
    """Body for both create (POST) and full replace (PUT)."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    category: str = Field(..., min_length=1)
    available: bool = True

class MenuItemOut(BaseModel):
    id: str
    name: str
    price: Decimal
    category: str
    available: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
