from motor.motor_asyncio import AsyncIOMotorDatabase, AsyncIOMotorClientSession
from datetime import datetime, timezone
from typing import List, Optional

from app.models.base import to_object_id
from app.models.ledger import DateRange, PaymentFilter
from app.models.payment import PaymentCreate, PaymentInDB
from app.utils.query import date_range_query, page_window


class PaymentRepository:
    """Payment database operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["payments"]

    async def create_payment(
        self,
        payment_data: PaymentCreate,
        created_by: str,
        session: Optional[AsyncIOMotorClientSession] = None
    ) -> PaymentInDB:
        now = datetime.now(timezone.utc)
        payment_dict = {
            "invoice_id": payment_data.invoice_id,
            "amount": payment_data.amount,
            "payment_date": payment_data.payment_date,
            "created_by": to_object_id(created_by),
            "created_at": now,
            "updated_at": now
        }

        result = await self.collection.insert_one(payment_dict, session=session)
        payment_dict["_id"] = result.inserted_id
        return PaymentInDB(**payment_dict)

    async def list_payments(
        self,
        invoice_id: str = "",
        page: int = 1,
        limit: int = 10
    ) -> tuple[list[PaymentInDB], int]:
        """List payments, latest payment date first."""
        query: dict = {}
        if invoice_id:
            query["invoice_id"] = to_object_id(invoice_id)

        skip, limit = page_window(page, limit)
        cursor = self.collection.find(query).sort("payment_date", -1).skip(skip).limit(limit)
        docs = await cursor.to_list(None)
        total = await self.collection.count_documents(query)
        return [PaymentInDB(**doc) for doc in docs], total

    async def find_payments(self, payment_filter: PaymentFilter) -> List[PaymentInDB]:
        """Payments against a set of invoices, oldest first."""
        query: dict = {
            "invoice_id": {"$in": [to_object_id(iid) for iid in payment_filter.invoice_ids]}
        }
        if payment_filter.created_by:
            query["created_by"] = to_object_id(payment_filter.created_by)
        bounds = date_range_query(payment_filter.date_range)
        if bounds:
            query["payment_date"] = bounds

        cursor = self.collection.find(query).sort("payment_date", 1)
        return [PaymentInDB(**doc) for doc in await cursor.to_list(None)]

    async def find_in_range(self, date_range: DateRange) -> List[PaymentInDB]:
        """Payments dated within the range, newest first."""
        query: dict = {}
        bounds = date_range_query(date_range)
        if bounds:
            query["payment_date"] = bounds
        cursor = self.collection.find(query).sort("payment_date", -1)
        return [PaymentInDB(**doc) for doc in await cursor.to_list(None)]
