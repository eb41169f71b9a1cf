from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import Optional
from app.models.base import PyObjectId, StrId


class CustomerBase(BaseModel):
    """Base customer schema."""
    name: str = Field(..., min_length=1, max_length=200)
    area: str = Field(..., min_length=1, max_length=200)
    role: str = Field(..., min_length=1, max_length=50)  # e.g. dealer, vendor


class CustomerCreate(CustomerBase):
    """Customer creation schema."""
    pass


class CustomerUpdate(BaseModel):
    """Customer update schema."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    area: Optional[str] = Field(None, min_length=1, max_length=200)
    role: Optional[str] = Field(None, min_length=1, max_length=50)


class CustomerResponse(CustomerBase):
    """Customer response schema."""
    id: StrId
    created_by: StrId
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(
        populate_by_name=True,
        from_attributes=True
    )


class CustomerInDB(BaseModel):
    """Customer database schema."""
    id: PyObjectId = Field(alias="_id")
    name: str
    area: str
    role: str
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
