from pydantic import BaseModel, EmailStr, Field, ConfigDict
from datetime import datetime
from enum import Enum
from typing import Optional
from app.models.base import PyObjectId, StrId


class UserRole(str, Enum):
    ADMIN = "admin"
    ACCOUNTANT = "accountant"
    MANAGER = "manager"


class UserBase(BaseModel):
    """Base user schema."""
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    role: UserRole = UserRole.ACCOUNTANT


class UserCreate(UserBase):
    """User creation schema."""
    password: str = Field(..., min_length=6)


class UserUpdate(BaseModel):
    """User update schema. A blank password keeps the current one."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    role: Optional[UserRole] = None
    password: Optional[str] = None


class UserResponse(BaseModel):
    """User response schema (never carries the password hash)."""
    id: StrId
    name: str
    email: str
    role: UserRole
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(
        populate_by_name=True,
        from_attributes=True
    )


class UserInDB(BaseModel):
    """User database schema."""
    id: PyObjectId = Field(alias="_id")
    name: str
    email: str
    password_hash: str
    role: UserRole = UserRole.ACCOUNTANT
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(
        populate_by_name=True,
        from_attributes=True,
        arbitrary_types_allowed=True
    )

    @property
    def _id(self) -> PyObjectId:
        """Alias for id to match MongoDB naming."""
        return self.id
