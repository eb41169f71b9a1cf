import math
from typing import List

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from app.models.customer import CustomerResponse
from app.models.invoice import InvoiceResponse
from app.models.payment import PaymentResponse
from app.models.product import ProductResponse
from app.models.user import UserResponse


class Pagination(BaseModel):
    """Page metadata returned with every list."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    page: int
    limit: int
    total: int
    total_pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, total_pages=math.ceil(total / limit) if limit else 0)


class UserList(BaseModel):
    users: List[UserResponse]
    pagination: Pagination


class CustomerList(BaseModel):
    customers: List[CustomerResponse]
    pagination: Pagination


class ProductList(BaseModel):
    products: List[ProductResponse]
    pagination: Pagination


class InvoiceList(BaseModel):
    invoices: List[InvoiceResponse]
    pagination: Pagination


class PaymentList(BaseModel):
    payments: List[PaymentResponse]
    pagination: Pagination


class ImportResult(BaseModel):
    message: str
    imported: int


class MessageResponse(BaseModel):
    message: str
