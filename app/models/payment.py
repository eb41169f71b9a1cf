from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from app.models.base import PyObjectId, StrId


class PaymentCreate(BaseModel):
    """Payment recorded against an invoice."""
    invoice_id: PyObjectId
    amount: float = Field(..., ge=0.01)
    payment_date: datetime


class PaymentInDB(BaseModel):
    """Payment database schema."""
    id: PyObjectId = Field(alias="_id")
    invoice_id: PyObjectId
    amount: float
    payment_date: datetime
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


class PaymentResponse(BaseModel):
    """Payment response schema."""
    id: StrId
    invoice_id: StrId
    amount: float
    payment_date: datetime
    created_by: StrId
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(
        populate_by_name=True,
        from_attributes=True
    )
