"""Session controller endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Response, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_credential_cache, get_current_user, get_db, token_header
from app.domains.auth.cache import CredentialCache
from app.domains.auth.service import AuthService
from app.exceptions.base import UnauthenticatedError
from app.schemas.base import ResponseSchema
from app.schemas.user import TokenResponse
from models.user import User

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])
basic_auth = HTTPBasic(auto_error=False)


@router.get("/connect", response_model=ResponseSchema)
async def connect(
    credentials: Optional[HTTPBasicCredentials] = Depends(basic_auth),
    cache: CredentialCache = Depends(get_credential_cache),
    db: AsyncSession = Depends(get_db),
):
    """Exchange HTTP Basic credentials for an X-Token valid for 24 hours."""
    if credentials is None:
        raise UnauthenticatedError()

    token = await AuthService(db, cache).connect(credentials.username, credentials.password)
    return ResponseSchema(
        status="success",
        message="Connected",
        data=TokenResponse(token=token).model_dump(),
    )


@router.get("/disconnect", status_code=status.HTTP_204_NO_CONTENT)
async def disconnect(
    _current_user: User = Depends(get_current_user),
    token: Optional[str] = Depends(token_header),
    cache: CredentialCache = Depends(get_credential_cache),
    db: AsyncSession = Depends(get_db),
):
    """Revoke the X-Token used for this request."""
    await AuthService(db, cache).disconnect(token)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
