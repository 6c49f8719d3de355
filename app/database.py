# python
"""Database engine and session utilities.

The catalog and the user table live behind a single :class:`Database` handle.
It is constructed once at startup, handed to whoever needs sessions, checked
with :meth:`Database.is_alive` and disposed at shutdown.
"""
import logging

from sqlalchemy import func, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.config import Settings
from models import Base, File, User

logger = logging.getLogger(__name__)


class Database:
    """Owns the async engine and the session factory."""

    def __init__(
        self,
        url: str,
        echo: bool = False,
        command_timeout: float | None = None,
        pool_size: int | None = None,
        max_overflow: int | None = None,
    ):
        engine_kwargs: dict = {"echo": echo, "pool_pre_ping": True}
        if url.startswith("postgresql+asyncpg"):
            # asyncpg applies this to every statement
            engine_kwargs["connect_args"] = {"command_timeout": command_timeout}
            if pool_size is not None:
                engine_kwargs["pool_size"] = pool_size
            if max_overflow is not None:
                engine_kwargs["max_overflow"] = max_overflow
            if command_timeout is not None:
                engine_kwargs["pool_timeout"] = command_timeout
        elif url.startswith("sqlite") and command_timeout is not None:
            engine_kwargs["connect_args"] = {"timeout": command_timeout}

        self.url = url
        self.engine = create_async_engine(url, **engine_kwargs)
        self.session_factory = async_sessionmaker(bind=self.engine, expire_on_commit=False)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.database_url,
            echo=settings.debug,
            command_timeout=settings.db_command_timeout,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
        )

    def session(self) -> AsyncSession:
        return self.session_factory()

    async def create_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def is_alive(self) -> bool:
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except (SQLAlchemyError, OSError) as e:
            logger.warning("Database health check failed: %s", str(e))
            return False

    async def count_users(self) -> int:
        async with self.session() as session:
            result = await session.execute(select(func.count(User.id)))
            return result.scalar() or 0

    async def count_files(self) -> int:
        async with self.session() as session:
            result = await session.execute(select(func.count(File.id)))
            return result.scalar() or 0

    async def dispose(self) -> None:
        await self.engine.dispose()
