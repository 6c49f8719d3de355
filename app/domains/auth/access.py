"""Access control for file records.

Reading a private file someone else owns is reported exactly like reading a
file that does not exist. Writing is owner-only; a non-owner that can see the
file (because it is public) gets a 403, everyone else a 404.
"""

from enum import Enum
from typing import Optional
from uuid import UUID

from app.domains.auth.cache import CredentialCache
from app.exceptions.base import ForbiddenError, NotFoundError, UnauthenticatedError
from models import File


class Intent(str, Enum):
    read = "read"
    write = "write"


async def authenticate(cache: CredentialCache, token: Optional[str]) -> UUID:
    """Resolve the caller behind ``token`` or raise :class:`UnauthenticatedError`."""
    user_id = await cache.lookup(token)
    if user_id is None:
        raise UnauthenticatedError()
    return user_id


def authorize(user_id: Optional[UUID], record: File, intent: Intent) -> bool:
    is_owner = user_id is not None and record.user_id == user_id
    if intent == Intent.write:
        return is_owner
    return bool(record.is_public) or is_owner


def ensure_readable(user_id: Optional[UUID], record: Optional[File]) -> File:
    if record is None or not authorize(user_id, record, Intent.read):
        raise NotFoundError()
    return record


def ensure_writable(user_id: Optional[UUID], record: Optional[File]) -> File:
    record = ensure_readable(user_id, record)
    if not authorize(user_id, record, Intent.write):
        raise ForbiddenError()
    return record
