"""Sign-in and sign-out."""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import verify_password
from app.domains.auth.cache import CredentialCache
from app.exceptions.base import UnauthenticatedError
from models import User

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, db: AsyncSession, cache: CredentialCache):
        self.db = db
        self.cache = cache

    async def verify_credentials(self, email: str, password: str) -> Optional[UUID]:
        """Return the id of the user with these credentials, or None."""
        if not email or not password:
            return None
        result = await self.db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()
        if user is None or not verify_password(password, user.password_hash):
            return None
        return user.id

    async def connect(self, email: str, password: str) -> str:
        """Check the credentials and open a session, returning its token."""
        user_id = await self.verify_credentials(email, password)
        if user_id is None:
            logger.info("Rejected sign-in attempt")
            raise UnauthenticatedError()
        return await self.cache.issue(user_id)

    async def disconnect(self, token: str) -> None:
        await self.cache.revoke(token)
