"""Redis-backed session tokens.

This is the only code that reads or writes session keys. A token maps to the
string form of a user id under ``auth_<token>`` and expires on its own after
the configured time-to-live.
"""

import logging
from typing import Optional
from uuid import UUID

import redis.asyncio as redis
from redis.exceptions import RedisError

from app.core.config import Settings
from app.core.security import generate_token
from app.exceptions.base import StorageFaultError

logger = logging.getLogger(__name__)

TOKEN_KEY_PREFIX = "auth_"
DEFAULT_TTL_SECONDS = 24 * 60 * 60


class CredentialCache:
    """Issues, resolves and revokes opaque session tokens."""

    def __init__(self, client: redis.Redis, ttl_seconds: int = DEFAULT_TTL_SECONDS):
        self.client = client
        self.ttl_seconds = ttl_seconds

    @classmethod
    def from_settings(cls, settings: Settings) -> "CredentialCache":
        client = redis.from_url(
            settings.redis_url,
            decode_responses=True,
            socket_timeout=settings.redis_socket_timeout,
            socket_connect_timeout=settings.redis_socket_timeout,
        )
        return cls(client, ttl_seconds=settings.session_ttl_seconds)

    @staticmethod
    def _make_key(token: str) -> str:
        return f"{TOKEN_KEY_PREFIX}{token}"

    async def issue(self, user_id: UUID) -> str:
        """Create a token for ``user_id`` that lives for the configured TTL."""
        token = generate_token()
        try:
            await self.client.set(self._make_key(token), str(user_id), ex=self.ttl_seconds)
        except RedisError as e:
            logger.error("Failed to store session for user %s: %s", user_id, str(e))
            raise StorageFaultError("Session store unavailable") from e
        logger.info("Issued session for user %s", user_id)
        return token

    async def lookup(self, token: Optional[str]) -> Optional[UUID]:
        """Return the user id behind ``token``, or None if it is unknown or expired."""
        if not token:
            return None
        try:
            value = await self.client.get(self._make_key(token))
        except RedisError as e:
            logger.error("Failed to read session: %s", str(e))
            raise StorageFaultError("Session store unavailable") from e
        if value is None:
            return None
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        try:
            return UUID(value)
        except ValueError:
            logger.warning("Discarding malformed session entry")
            return None

    async def revoke(self, token: Optional[str]) -> None:
        """Delete ``token``. Unknown or already revoked tokens are ignored."""
        if not token:
            return
        try:
            deleted = await self.client.delete(self._make_key(token))
        except RedisError as e:
            logger.error("Failed to revoke session: %s", str(e))
            raise StorageFaultError("Session store unavailable") from e
        if deleted:
            logger.info("Revoked session")

    async def is_alive(self) -> bool:
        try:
            return bool(await self.client.ping())
        except RedisError as e:
            logger.warning("Redis health check failed: %s", str(e))
            return False

    async def close(self) -> None:
        await self.client.aclose()
