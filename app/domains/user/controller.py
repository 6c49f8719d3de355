"""User controller endpoints."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_current_user, get_db
from app.domains.user.service import UserService
from app.schemas.base import ResponseSchema
from app.schemas.user import UserCreateRequest, UserResponse
from models.user import User

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=ResponseSchema, status_code=status.HTTP_201_CREATED)
async def create_user(user_data: UserCreateRequest, db: AsyncSession = Depends(get_db)):
    """Register a new user with an email and a password."""
    user_service = UserService(db)
    user = await user_service.create_user(user_data.email, user_data.password)

    return ResponseSchema(
        status="success",
        message="User created successfully",
        data=UserResponse.model_validate(user).model_dump(mode="json"),
    )


@router.get("/me", response_model=ResponseSchema)
async def get_me(current_user: User = Depends(get_current_user)):
    """Get the user behind the X-Token header."""
    return ResponseSchema(
        status="success",
        message="User retrieved successfully",
        data=UserResponse.model_validate(current_user).model_dump(mode="json"),
    )
