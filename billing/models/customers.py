# billing/models/customers.py

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, EmailStr


class CustomerOut(BaseModel):
    id: int
    name: str
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    gstin: Optional[str] = None
    state: Optional[str] = None
    outstanding_balance: Decimal

    class Config:
        from_attributes = True


class ProductOut(BaseModel):
    id: int
    name: str
    hsn_code: Optional[str] = None
    unit: str
    price: Decimal
    gst_rate: Decimal
    stock: Decimal
    low_stock_threshold: Decimal
    is_low_stock: bool
    is_active: bool

    class Config:
        from_attributes = True
