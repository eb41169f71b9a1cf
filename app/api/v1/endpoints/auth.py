import logging
from fastapi import APIRouter, HTTPException, status, Depends
from app.models.user import UserResponse
from app.db.mongo import get_db
from app.repositories.user_repo import UserRepository
from app.core.auth import create_access_token, get_current_user
from app.core.security import verify_password
from app.schemas.auth import LoginRequest, TokenResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", response_model=TokenResponse)
async def login(credentials: LoginRequest, db = Depends(get_db)):
    """Login with email and password."""
    user_repo = UserRepository(db)

    user = await user_repo.get_user_by_email(credentials.email)
    if not user or not verify_password(credentials.password, user.password_hash):
        logger.info(f"Failed login for {credentials.email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password"
        )

    access_token = create_access_token(str(user._id), user.role.value)

    return TokenResponse(
        access_token=access_token,
        token_type="bearer",
        user=UserResponse.model_validate(user)
    )


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: UserResponse = Depends(get_current_user)):
    """Get current user details."""
    return current_user
