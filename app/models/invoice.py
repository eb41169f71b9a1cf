"""
Invoice models.

Line items carry a snapshot of the product name taken when the invoice is
written, so later product renames never change an issued invoice.
Amounts are plain floats in a single currency.
"""

from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import List
from app.models.base import PyObjectId, StrId


class InvoiceItem(BaseModel):
    """One invoice line: quantity x rate = amount."""
    product_id: PyObjectId
    name_snapshot: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=1)
    rate: float = Field(..., ge=0)
    amount: float = Field(..., ge=0)


class InvoiceCreate(BaseModel):
    """Invoice creation schema."""
    customer_id: PyObjectId
    items: List[InvoiceItem] = Field(..., min_length=1)
    total_amount: float = Field(..., ge=0)
    paid_amount: float = Field(0, ge=0)
    due_amount: float = Field(..., ge=0)
    invoice_date: datetime


class InvoiceUpdate(InvoiceCreate):
    """Invoice update schema (full replacement of the editable fields)."""
    pass


class InvoiceInDB(BaseModel):
    """Invoice database schema."""
    id: PyObjectId = Field(alias="_id")
    invoice_number: str
    customer_id: PyObjectId
    items: List[InvoiceItem] = []
    total_amount: float
    paid_amount: float = 0
    due_amount: float
    invoice_date: datetime
    created_by: PyObjectId
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(
        populate_by_name=True,
        from_attributes=True,
        arbitrary_types_allowed=True
    )

    @property
    def _id(self) -> PyObjectId:
        return self.id


class InvoiceItemResponse(BaseModel):
    product_id: StrId
    name_snapshot: str
    quantity: int
    rate: float
    amount: float

    model_config = ConfigDict(from_attributes=True)


class InvoiceResponse(BaseModel):
    """Invoice response schema."""
    id: StrId
    invoice_number: str
    customer_id: StrId
    items: List[InvoiceItemResponse]
    total_amount: float
    paid_amount: float
    due_amount: float
    invoice_date: datetime
    created_by: StrId
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(
        populate_by_name=True,
        from_attributes=True
    )
