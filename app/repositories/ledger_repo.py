"""
Ledger store - read-only access the ledger needs to customers, invoices
and payments.

LedgerStore is the seam the ledger service depends on. MongoLedgerStore
delegates to the collection repositories and turns driver failures into
StoreUnavailable, so nothing above this module sees pymongo errors.
"""

from typing import List, Protocol

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from app.core.exceptions import InvalidQuery, StoreUnavailable
from app.models.customer import CustomerInDB
from app.models.invoice import InvoiceInDB
from app.models.ledger import InvoiceFilter, PaymentFilter
from app.models.payment import PaymentInDB
from app.repositories.customer_repo import CustomerRepository
from app.repositories.invoice_repo import InvoiceRepository
from app.repositories.payment_repo import PaymentRepository


class LedgerStore(Protocol):
    async def find_customers_by_area(self, area: str) -> List[CustomerInDB]:
        ...

    async def find_invoices(self, invoice_filter: InvoiceFilter) -> List[InvoiceInDB]:
        ...

    async def find_payments(self, payment_filter: PaymentFilter) -> List[PaymentInDB]:
        ...


def _check_ids(ids: List[str], label: str) -> None:
    for value in ids:
        if not ObjectId.is_valid(value):
            raise InvalidQuery(f"Invalid {label}: {value}")


class MongoLedgerStore:
    """LedgerStore backed by the MongoDB collections."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.customers = CustomerRepository(db)
        self.invoices = InvoiceRepository(db)
        self.payments = PaymentRepository(db)

    async def find_customers_by_area(self, area: str) -> List[CustomerInDB]:
        try:
            return await self.customers.find_by_area(area)
        except PyMongoError as e:
            raise StoreUnavailable(f"customer lookup failed: {e}") from e

    async def find_invoices(self, invoice_filter: InvoiceFilter) -> List[InvoiceInDB]:
        _check_ids(invoice_filter.customer_ids, "customerId")
        if invoice_filter.created_by:
            _check_ids([invoice_filter.created_by], "createdBy")
        try:
            return await self.invoices.find_invoices(invoice_filter)
        except PyMongoError as e:
            raise StoreUnavailable(f"invoice lookup failed: {e}") from e

    async def find_payments(self, payment_filter: PaymentFilter) -> List[PaymentInDB]:
        try:
            return await self.payments.find_payments(payment_filter)
        except PyMongoError as e:
            raise StoreUnavailable(f"payment lookup failed: {e}") from e
