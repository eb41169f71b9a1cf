from fastapi import APIRouter, HTTPException, Depends, Query, status

from app.core.auth import require_roles
from app.core.config import settings
from app.db.mongo import get_db
from app.models.user import UserCreate, UserUpdate, UserResponse, UserRole
from app.repositories.user_repo import UserRepository
from app.schemas.common import MessageResponse, Pagination, UserList

router = APIRouter()

admin_only = require_roles(UserRole.ADMIN)


@router.get("", response_model=UserList)
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    current_user: UserResponse = Depends(admin_only),
    db = Depends(get_db)
):
    """List users (admin only). Password hashes are never returned."""
    repo = UserRepository(db)
    users, total = await repo.list_users(page, limit)
    return UserList(
        users=[UserResponse.model_validate(user) for user in users],
        pagination=Pagination.build(page, limit, total)
    )


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    current_user: UserResponse = Depends(admin_only),
    db = Depends(get_db)
):
    """Create a user account (admin only)."""
    repo = UserRepository(db)

    existing_user = await repo.get_user_by_email(user_data.email)
    if existing_user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered"
        )

    user = await repo.create_user(user_data)
    return UserResponse.model_validate(user)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    current_user: UserResponse = Depends(admin_only),
    db = Depends(get_db)
):
    repo = UserRepository(db)
    user = await repo.get_user_by_id(user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserResponse.model_validate(user)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    user_data: UserUpdate,
    current_user: UserResponse = Depends(admin_only),
    db = Depends(get_db)
):
    """Update a user. Leave password blank to keep the current one."""
    repo = UserRepository(db)

    if user_data.email:
        existing_user = await repo.get_user_by_email(user_data.email)
        if existing_user and str(existing_user._id) != user_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email already registered"
            )

    user = await repo.update_user(user_id, user_data)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserResponse.model_validate(user)


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: str,
    current_user: UserResponse = Depends(admin_only),
    db = Depends(get_db)
):
    if user_id == current_user.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot delete your own account"
        )

    repo = UserRepository(db)
    deleted = await repo.delete_user(user_id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return MessageResponse(message="User deleted successfully")
