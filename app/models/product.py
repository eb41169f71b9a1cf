from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import Optional
from app.models.base import PyObjectId, StrId


class ProductBase(BaseModel):
    """Base product schema."""
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    unit_price: float = Field(..., ge=0)
    stock_quantity: Optional[int] = Field(None, ge=0)
    unit: str = Field(..., min_length=1, max_length=20)  # e.g. pcs, kg, liters
    min_stock_alert: Optional[int] = Field(None, ge=0)
    registration_number: Optional[str] = None
    registration_valid_upto: Optional[datetime] = None


class ProductCreate(ProductBase):
    """Product creation schema."""
    pass


class ProductUpdate(BaseModel):
    """Product update schema."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    unit_price: Optional[float] = Field(None, ge=0)
    stock_quantity: Optional[int] = Field(None, ge=0)
    unit: Optional[str] = Field(None, min_length=1, max_length=20)
    min_stock_alert: Optional[int] = Field(None, ge=0)
    registration_number: Optional[str] = None
    registration_valid_upto: Optional[datetime] = None


class ProductResponse(BaseModel):
    """Product response schema. Stock may be negative, so no bounds here."""
    id: StrId
    name: str
    description: Optional[str] = None
    unit_price: float
    stock_quantity: Optional[int] = None
    unit: str
    min_stock_alert: Optional[int] = None
    registration_number: Optional[str] = None
    registration_valid_upto: Optional[datetime] = None
    created_by: StrId
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(
        populate_by_name=True,
        from_attributes=True
    )


class ProductInDB(BaseModel):
    """Product database schema."""
    id: PyObjectId = Field(alias="_id")
    name: str
    description: Optional[str] = None
    unit_price: float
    # Stock is decremented per invoice without a floor, so it may go negative
    stock_quantity: Optional[int] = None
    unit: str
    min_stock_alert: Optional[int] = None
    registration_number: Optional[str] = None
    registration_valid_upto: Optional[datetime] = None
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

    def is_low_stock(self) -> bool:
        """Stock has fallen below the alert threshold."""
        if self.stock_quantity is None or self.min_stock_alert is None:
            return False
        return self.stock_quantity < self.min_stock_alert
