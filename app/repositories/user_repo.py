from motor.motor_asyncio import AsyncIOMotorDatabase
from datetime import datetime, timezone
from app.models.base import to_object_id
from app.models.user import UserCreate, UserUpdate, UserInDB
from app.core.security import hash_password
from app.utils.query import page_window

class UserRepository:
    """User database operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["users"]

    async def create_user(self, user_data: UserCreate) -> UserInDB:
        """Create a new user."""
        user_dict = {
            "name": user_data.name,
            "email": user_data.email,
            "password_hash": hash_password(user_data.password),
            "role": user_data.role.value,
            "created_at": datetime.now(timezone.utc),
            "updated_at": datetime.now(timezone.utc)
        }

        result = await self.collection.insert_one(user_dict)
        user_dict["_id"] = result.inserted_id
        return UserInDB(**user_dict)

    async def get_user_by_email(self, email: str) -> UserInDB | None:
        """Get user by email."""
        user = await self.collection.find_one({"email": email})
        if user:
            return UserInDB(**user)
        return None

    async def get_user_by_id(self, user_id: str) -> UserInDB | None:
        """Get user by ID."""
        oid = to_object_id(user_id)
        if oid is None:
            return None
        user = await self.collection.find_one({"_id": oid})
        if user:
            return UserInDB(**user)
        return None

    async def list_users(self, page: int, limit: int) -> tuple[list[UserInDB], int]:
        """List users newest first, one page at a time."""
        skip, limit = page_window(page, limit)
        cursor = self.collection.find({}).sort("created_at", -1).skip(skip).limit(limit)
        docs = await cursor.to_list(None)
        total = await self.collection.count_documents({})
        return [UserInDB(**doc) for doc in docs], total

    async def update_user(self, user_id: str, update_data: UserUpdate) -> UserInDB | None:
        """Update user. A blank password leaves the stored hash untouched."""
        oid = to_object_id(user_id)
        if oid is None:
            return None

        updates = update_data.model_dump(exclude_unset=True, exclude_none=True, exclude={"password"})
        if "role" in updates:
            updates["role"] = updates["role"].value
        if update_data.password and update_data.password.strip():
            updates["password_hash"] = hash_password(update_data.password)

        updates["updated_at"] = datetime.now(timezone.utc)
        result = await self.collection.find_one_and_update(
            {"_id": oid},
            {"$set": updates},
            return_document=True
        )
        if result:
            return UserInDB(**result)
        return None

    async def delete_user(self, user_id: str) -> bool:
        """Delete user."""
        oid = to_object_id(user_id)
        if oid is None:
            return False
        result = await self.collection.delete_one({"_id": oid})
        return result.deleted_count > 0

    async def count_users(self) -> int:
        return await self.collection.count_documents({})
