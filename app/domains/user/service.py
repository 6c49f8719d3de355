# app/domains/user/service.py
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import MAX_PASSWORD_BYTES, hash_password
from app.exceptions.base import StorageFaultError, ValidationError
from models import User


class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user_by_email(self, email: str) -> Optional[User]:
        """Get a user by email."""
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def get_user_by_id(self, user_id: UUID) -> Optional[User]:
        """Get a user by ID."""
        return await self.db.get(User, user_id)

    async def create_user(self, email: Optional[str], password: Optional[str]) -> User:
        """Register a new user."""
        if not email:
            raise ValidationError("Missing email")
        if not password:
            raise ValidationError("Missing password")
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError("Password too long")
        if await self.get_user_by_email(email):
            raise ValidationError("Already exist")

        user = User(email=email, password_hash=hash_password(password))

        try:
            self.db.add(user)
            await self.db.commit()
            await self.db.refresh(user)
            return user
        except IntegrityError as e:
            # Lost a race against a concurrent registration
            await self.db.rollback()
            raise ValidationError("Already exist") from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StorageFaultError(f"Failed to create user: {str(e)}") from e
