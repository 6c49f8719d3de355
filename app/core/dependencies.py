# app/core/dependencies.py
import logging
from collections.abc import AsyncGenerator
from typing import Optional
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import APIKeyHeader
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.resources import AppResources
from app.domains.auth.access import authenticate
from app.domains.auth.cache import CredentialCache
from app.domains.file.service import FileService
from app.exceptions.base import UnauthenticatedError
from models import User

logger = logging.getLogger(__name__)

token_header = APIKeyHeader(name="X-Token", auto_error=False)


def get_resources(request: Request) -> AppResources:
    return request.app.state.resources


async def get_db(resources: AppResources = Depends(get_resources)) -> AsyncGenerator[AsyncSession, None]:
    async with resources.database.session() as session:
        yield session


def get_credential_cache(resources: AppResources = Depends(get_resources)) -> CredentialCache:
    return resources.cache


def get_file_service(
    resources: AppResources = Depends(get_resources),
    db: AsyncSession = Depends(get_db),
) -> FileService:
    return FileService(
        db,
        resources.blobs,
        resources.thumbnails,
        thumbnail_widths=tuple(settings.thumbnail_widths),
        max_file_size=settings.max_file_size,
    )


async def get_current_user(
    request: Request,
    token: Optional[str] = Depends(token_header),
    cache: CredentialCache = Depends(get_credential_cache),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the user behind the X-Token header.

    Raises:
        UnauthenticatedError: If the token is missing, expired, or its user is gone
    """
    user_id = await authenticate(cache, token)
    user = await db.get(User, user_id)
    if user is None:
        logger.warning("Session points at unknown user %s", user_id)
        raise UnauthenticatedError()

    request.state.user_id = user.id
    return user


async def get_current_user_id(user: User = Depends(get_current_user)) -> UUID:
    return user.id


async def get_optional_user_id(
    token: Optional[str] = Depends(token_header),
    cache: CredentialCache = Depends(get_credential_cache),
) -> Optional[UUID]:
    """Get the caller's id if a valid token was sent, otherwise None.

    Used for endpoints that also serve anonymous callers.
    """
    return await cache.lookup(token)
