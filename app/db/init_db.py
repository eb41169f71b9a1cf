import logging

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.config import settings
from app.models.user import UserCreate, UserInDB, UserRole
from app.repositories.user_repo import UserRepository

logger = logging.getLogger(__name__)


async def ensure_admin(db: AsyncIOMotorDatabase) -> UserInDB | None:
    """
    Create the first admin account when the users collection is empty.

    Runs only when ADMIN_PASSWORD is configured. Returns the created user,
    or None when nothing was done.
    """
    if not settings.ADMIN_PASSWORD:
        return None

    repo = UserRepository(db)
    if await repo.count_users() > 0:
        return None

    admin = await repo.create_user(
        UserCreate(
            name=settings.ADMIN_NAME,
            email=settings.ADMIN_EMAIL,
            password=settings.ADMIN_PASSWORD,
            role=UserRole.ADMIN,
        )
    )
    logger.info(f"Created initial admin account {admin.email}")
    return admin
