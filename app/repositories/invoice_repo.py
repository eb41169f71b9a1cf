"""
InvoiceRepository - invoices and their stored payment totals.

paid_amount/due_amount live on the invoice document. They are set when
the invoice is written and moved by record_payment; the ledger summary
reads them as the source of truth.
"""

from motor.motor_asyncio import AsyncIOMotorDatabase, AsyncIOMotorClientSession
from datetime import datetime, timezone
from typing import Dict, List, Optional

from app.models.base import to_object_id
from app.models.invoice import InvoiceCreate, InvoiceUpdate, InvoiceInDB
from app.models.ledger import DateRange, InvoiceFilter
from app.utils.invoice_validation import MONEY_TOLERANCE
from app.utils.query import date_range_query, page_window


class InvoiceRepository:
    """Invoice database operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["invoices"]

    async def create_invoice(
        self,
        invoice_data: InvoiceCreate,
        invoice_number: str,
        created_by: str,
        session: Optional[AsyncIOMotorClientSession] = None
    ) -> InvoiceInDB:
        """Insert an invoice under the given number."""
        now = datetime.now(timezone.utc)
        invoice_dict = invoice_data.model_dump()
        invoice_dict.update({
            "invoice_number": invoice_number,
            "created_by": to_object_id(created_by),
            "created_at": now,
            "updated_at": now
        })

        result = await self.collection.insert_one(invoice_dict, session=session)
        invoice_dict["_id"] = result.inserted_id
        return InvoiceInDB(**invoice_dict)

    async def list_invoices(
        self,
        customer_id: str = "",
        date_range: DateRange = DateRange(),
        page: int = 1,
        limit: int = 10
    ) -> tuple[list[InvoiceInDB], int]:
        """List invoices newest first."""
        query: dict = {}
        if customer_id:
            query["customer_id"] = to_object_id(customer_id)
        bounds = date_range_query(date_range)
        if bounds:
            query["invoice_date"] = bounds

        skip, limit = page_window(page, limit)
        cursor = self.collection.find(query).sort("created_at", -1).skip(skip).limit(limit)
        docs = await cursor.to_list(None)
        total = await self.collection.count_documents(query)
        return [InvoiceInDB(**doc) for doc in docs], total

    async def get_invoice(self, invoice_id: str) -> InvoiceInDB | None:
        oid = to_object_id(invoice_id)
        if oid is None:
            return None
        doc = await self.collection.find_one({"_id": oid})
        if doc:
            return InvoiceInDB(**doc)
        return None

    async def update_invoice(self, invoice_id: str, update_data: InvoiceUpdate) -> InvoiceInDB | None:
        """Replace the editable fields of an invoice. Stock is not re-adjusted."""
        oid = to_object_id(invoice_id)
        if oid is None:
            return None

        updates = update_data.model_dump()
        updates["updated_at"] = datetime.now(timezone.utc)
        result = await self.collection.find_one_and_update(
            {"_id": oid},
            {"$set": updates},
            return_document=True
        )
        if result:
            return InvoiceInDB(**result)
        return None

    async def delete_invoice(self, invoice_id: str) -> bool:
        oid = to_object_id(invoice_id)
        if oid is None:
            return False
        result = await self.collection.delete_one({"_id": oid})
        return result.deleted_count > 0

    async def record_payment(
        self,
        invoice_id,
        amount: float,
        session: Optional[AsyncIOMotorClientSession] = None
    ) -> bool:
        """
        Move amount from due to paid on the invoice.

        Only matches while the invoice still owes at least amount, so two
        concurrent payments cannot both spend the same due balance. Returns
        False when the invoice is gone or owes less.
        """
        result = await self.collection.update_one(
            {
                "_id": to_object_id(invoice_id),
                "due_amount": {"$gte": amount - MONEY_TOLERANCE}
            },
            {
                "$inc": {"paid_amount": amount, "due_amount": -amount},
                "$set": {"updated_at": datetime.now(timezone.utc)}
            },
            session=session
        )
        return result.modified_count > 0

    async def find_invoices(self, invoice_filter: InvoiceFilter) -> List[InvoiceInDB]:
        """Invoices for a set of customers, oldest first."""
        query: dict = {
            "customer_id": {"$in": [to_object_id(cid) for cid in invoice_filter.customer_ids]}
        }
        if invoice_filter.created_by:
            query["created_by"] = to_object_id(invoice_filter.created_by)
        bounds = date_range_query(invoice_filter.date_range)
        if bounds:
            query["invoice_date"] = bounds

        cursor = self.collection.find(query).sort("invoice_date", 1)
        return [InvoiceInDB(**doc) for doc in await cursor.to_list(None)]

    async def find_in_range(self, date_range: DateRange) -> List[InvoiceInDB]:
        """Invoices dated within the range, newest first."""
        query: dict = {}
        bounds = date_range_query(date_range)
        if bounds:
            query["invoice_date"] = bounds
        cursor = self.collection.find(query).sort("invoice_date", -1)
        return [InvoiceInDB(**doc) for doc in await cursor.to_list(None)]

    async def recent_invoices(self, limit: int = 5) -> List[InvoiceInDB]:
        cursor = self.collection.find({}).sort("created_at", -1).limit(limit)
        return [InvoiceInDB(**doc) for doc in await cursor.to_list(None)]

    async def totals(self) -> Dict[str, float]:
        """Sum of total, paid and due amounts across all invoices."""
        result = await self.collection.aggregate([
            {
                "$group": {
                    "_id": None,
                    "total_amount": {"$sum": "$total_amount"},
                    "paid_amount": {"$sum": "$paid_amount"},
                    "due_amount": {"$sum": "$due_amount"}
                }
            }
        ]).to_list(None)

        if not result:
            return {"total_amount": 0.0, "paid_amount": 0.0, "due_amount": 0.0}
        return {
            "total_amount": result[0]["total_amount"],
            "paid_amount": result[0]["paid_amount"],
            "due_amount": result[0]["due_amount"]
        }

    async def customer_ids(self) -> list:
        """Distinct customers that have at least one invoice."""
        return await self.collection.distinct("customer_id")

    async def count_invoices(self) -> int:
        return await self.collection.count_documents({})
