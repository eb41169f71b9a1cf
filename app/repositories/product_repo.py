from motor.motor_asyncio import AsyncIOMotorDatabase, AsyncIOMotorClientSession
from datetime import datetime, timezone
from typing import Iterable, Optional

from app.models.base import to_object_id
from app.models.product import ProductCreate, ProductUpdate, ProductInDB
from app.utils.query import contains_ci, page_window


class ProductRepository:
    """Product database operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["products"]

    def _product_doc(self, product_data: ProductCreate, created_by: str) -> dict:
        now = datetime.now(timezone.utc)
        doc = product_data.model_dump()
        doc.update({
            "created_by": to_object_id(created_by),
            "created_at": now,
            "updated_at": now
        })
        return doc

    async def create_product(self, product_data: ProductCreate, created_by: str) -> ProductInDB:
        """Create a new product."""
        product_dict = self._product_doc(product_data, created_by)
        result = await self.collection.insert_one(product_dict)
        product_dict["_id"] = result.inserted_id
        return ProductInDB(**product_dict)

    async def insert_many(self, products: Iterable[ProductCreate], created_by: str) -> int:
        docs = [self._product_doc(product, created_by) for product in products]
        if not docs:
            return 0
        result = await self.collection.insert_many(docs)
        return len(result.inserted_ids)

    async def list_products(
        self,
        search: str = "",
        page: int = 1,
        limit: int = 10
    ) -> tuple[list[ProductInDB], int]:
        """List products newest first, optionally filtered by name."""
        query: dict = {}
        if search:
            query["name"] = contains_ci(search)

        skip, limit = page_window(page, limit)
        cursor = self.collection.find(query).sort("created_at", -1).skip(skip).limit(limit)
        docs = await cursor.to_list(None)
        total = await self.collection.count_documents(query)
        return [ProductInDB(**doc) for doc in docs], total

    async def list_all(self) -> list[ProductInDB]:
        cursor = self.collection.find({}).sort("created_at", -1)
        return [ProductInDB(**doc) for doc in await cursor.to_list(None)]

    async def get_product(self, product_id: str) -> ProductInDB | None:
        oid = to_object_id(product_id)
        if oid is None:
            return None
        doc = await self.collection.find_one({"_id": oid})
        if doc:
            return ProductInDB(**doc)
        return None

    async def update_product(self, product_id: str, update_data: ProductUpdate) -> ProductInDB | None:
        oid = to_object_id(product_id)
        if oid is None:
            return None

        updates = update_data.model_dump(exclude_unset=True)
        if not updates:
            return await self.get_product(product_id)

        updates["updated_at"] = datetime.now(timezone.utc)
        result = await self.collection.find_one_and_update(
            {"_id": oid},
            {"$set": updates},
            return_document=True
        )
        if result:
            return ProductInDB(**result)
        return None

    async def delete_product(self, product_id: str) -> bool:
        oid = to_object_id(product_id)
        if oid is None:
            return False
        result = await self.collection.delete_one({"_id": oid})
        return result.deleted_count > 0

    async def adjust_stock(
        self,
        product_id,
        delta: int,
        session: Optional[AsyncIOMotorClientSession] = None
    ) -> bool:
        """Add delta (negative to decrement) to a product's stock count.

        Products without a numeric stock_quantity do not track stock and
        are left alone.
        """
        result = await self.collection.update_one(
            {"_id": to_object_id(product_id), "stock_quantity": {"$type": "number"}},
            {
                "$inc": {"stock_quantity": delta},
                "$set": {"updated_at": datetime.now(timezone.utc)}
            },
            session=session
        )
        return result.modified_count > 0

    async def low_stock(self) -> list[ProductInDB]:
        """Products whose stock has fallen below their alert threshold."""
        cursor = self.collection.find({
            "$expr": {"$lt": ["$stock_quantity", "$min_stock_alert"]}
        })
        products = [ProductInDB(**doc) for doc in await cursor.to_list(None)]
        # $lt treats a missing field as lower than any number
        return [product for product in products if product.is_low_stock()]

    async def count_products(self) -> int:
        return await self.collection.count_documents({})
