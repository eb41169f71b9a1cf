from motor.motor_asyncio import AsyncIOMotorDatabase
from datetime import datetime, timezone
from typing import Iterable

from app.models.base import to_object_id
from app.models.customer import CustomerCreate, CustomerUpdate, CustomerInDB
from app.utils.query import contains_ci, page_window


class CustomerRepository:
    """Customer database operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["customers"]

    def _customer_doc(self, customer_data: CustomerCreate, created_by: str) -> dict:
        now = datetime.now(timezone.utc)
        return {
            "name": customer_data.name,
            "area": customer_data.area,
            "role": customer_data.role,
            "created_by": to_object_id(created_by),
            "created_at": now,
            "updated_at": now
        }

    async def create_customer(self, customer_data: CustomerCreate, created_by: str) -> CustomerInDB:
        """Create a new customer."""
        customer_dict = self._customer_doc(customer_data, created_by)
        result = await self.collection.insert_one(customer_dict)
        customer_dict["_id"] = result.inserted_id
        return CustomerInDB(**customer_dict)

    async def insert_many(self, customers: Iterable[CustomerCreate], created_by: str) -> int:
        """Bulk insert already-validated customers; returns the inserted count."""
        docs = [self._customer_doc(customer, created_by) for customer in customers]
        if not docs:
            return 0
        result = await self.collection.insert_many(docs)
        return len(result.inserted_ids)

    async def list_customers(
        self,
        search: str = "",
        area: str = "",
        page: int = 1,
        limit: int = 10
    ) -> tuple[list[CustomerInDB], int]:
        """List customers newest first, filtered by name and area substrings."""
        query: dict = {}
        if search:
            query["name"] = contains_ci(search)
        if area:
            query["area"] = contains_ci(area)

        skip, limit = page_window(page, limit)
        cursor = self.collection.find(query).sort("created_at", -1).skip(skip).limit(limit)
        docs = await cursor.to_list(None)
        total = await self.collection.count_documents(query)
        return [CustomerInDB(**doc) for doc in docs], total

    async def list_all(self) -> list[CustomerInDB]:
        cursor = self.collection.find({}).sort("created_at", -1)
        return [CustomerInDB(**doc) for doc in await cursor.to_list(None)]

    async def find_by_area(self, area: str) -> list[CustomerInDB]:
        """Customers whose area contains the given text, ignoring case."""
        cursor = self.collection.find({"area": contains_ci(area)})
        return [CustomerInDB(**doc) for doc in await cursor.to_list(None)]

    async def names_by_id(self, customer_ids: Iterable) -> dict[str, str]:
        """Map of customer id (as string) to name."""
        oids = [oid for oid in (to_object_id(cid) for cid in customer_ids) if oid is not None]
        if not oids:
            return {}
        cursor = self.collection.find({"_id": {"$in": oids}}, {"name": 1})
        return {str(doc["_id"]): doc["name"] for doc in await cursor.to_list(None)}

    async def get_customer(self, customer_id: str) -> CustomerInDB | None:
        """Get a customer by id."""
        oid = to_object_id(customer_id)
        if oid is None:
            return None
        doc = await self.collection.find_one({"_id": oid})
        if doc:
            return CustomerInDB(**doc)
        return None

    async def update_customer(self, customer_id: str, update_data: CustomerUpdate) -> CustomerInDB | None:
        """Update a customer."""
        oid = to_object_id(customer_id)
        if oid is None:
            return None

        updates = update_data.model_dump(exclude_unset=True, exclude_none=True)
        if not updates:
            return await self.get_customer(customer_id)

        updates["updated_at"] = datetime.now(timezone.utc)
        result = await self.collection.find_one_and_update(
            {"_id": oid},
            {"$set": updates},
            return_document=True
        )
        if result:
            return CustomerInDB(**result)
        return None

    async def delete_customer(self, customer_id: str) -> bool:
        """Delete a customer."""
        oid = to_object_id(customer_id)
        if oid is None:
            return False
        result = await self.collection.delete_one({"_id": oid})
        return result.deleted_count > 0

    async def count_customers(self, query: dict | None = None) -> int:
        return await self.collection.count_documents(query or {})
