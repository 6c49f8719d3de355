# tests/conftest.py
import os

# Set up test environment variables BEFORE any other imports
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("THUMBNAIL_BACKEND", "local")
os.environ.setdefault("THUMBNAIL_BACKOFF_SECONDS", "0")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import time
from typing import Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.core.resources import AppResources
from app.database import Database
from app.domains.auth.cache import CredentialCache
from app.domains.file.service import FileService
from app.domains.file.storage import BlobStore
from app.domains.thumbnail.queue import LocalThumbnailPool
from app.domains.thumbnail.service import ThumbnailService
from app.main import app
from tests.factories import DEFAULT_PASSWORD, FileFactory, UserFactory, make_image_bytes


class InMemoryRedis:
    """Stand-in for the subset of ``redis.asyncio.Redis`` the credential cache uses.

    Expiry follows a clock that tests move forward with :meth:`advance`.
    """

    def __init__(self):
        self.store: dict[str, tuple[str, Optional[float]]] = {}
        self.offset = 0.0
        self.closed = False

    def now(self) -> float:
        return time.monotonic() + self.offset

    def advance(self, seconds: float) -> None:
        self.offset += seconds

    async def set(self, name, value, ex=None):
        expires_at = self.now() + ex if ex is not None else None
        self.store[name] = (str(value), expires_at)
        return True

    async def get(self, name):
        entry = self.store.get(name)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and self.now() >= expires_at:
            del self.store[name]
            return None
        return value

    async def delete(self, *names):
        deleted = 0
        for name in names:
            if await self.get(name) is not None:
                deleted += 1
            self.store.pop(name, None)
        return deleted

    async def ping(self):
        return True

    async def aclose(self):
        self.closed = True


# Store fixtures
@pytest.fixture
def fake_redis():
    """In-memory TTL store."""
    return InMemoryRedis()


@pytest.fixture
def credential_cache(fake_redis):
    """Credential cache over the in-memory TTL store."""
    return CredentialCache(fake_redis, ttl_seconds=24 * 60 * 60)


@pytest_asyncio.fixture
async def database(tmp_path):
    """A fresh SQLite database per test."""
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", command_timeout=5)
    await db.create_all()
    try:
        yield db
    finally:
        await db.dispose()


@pytest_asyncio.fixture
async def test_db(database):
    """Create a test database session."""
    async with database.session() as session:
        yield session


@pytest.fixture
def blob_store(tmp_path):
    """Blob store in a temporary directory."""
    root = tmp_path / "blobs"
    root.mkdir()
    return BlobStore(root, timeout=5)


@pytest.fixture
def thumbnail_service(database, blob_store):
    return ThumbnailService(database, blob_store, max_attempts=3, backoff_seconds=0)


@pytest_asyncio.fixture
async def thumbnail_pool(thumbnail_service):
    """Running local worker pool."""
    pool = LocalThumbnailPool(thumbnail_service, workers=2, max_pending=10)
    await pool.start()
    try:
        yield pool
    finally:
        await pool.stop()


@pytest.fixture
def file_service(test_db, blob_store, thumbnail_pool):
    return FileService(test_db, blob_store, thumbnail_pool, max_file_size=1024 * 1024)


@pytest.fixture
def resources(database, credential_cache, blob_store, thumbnail_pool):
    return AppResources(
        database=database,
        cache=credential_cache,
        blobs=blob_store,
        thumbnails=thumbnail_pool,
    )


@pytest_asyncio.fixture
async def client(resources):
    """Create a test client wired to the test resources."""
    app.state.resources = resources
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.state.resources = None


# User fixtures
@pytest_asyncio.fixture
async def test_user(test_db):
    """Create a test user."""
    user = UserFactory.build(email="test@example.com")
    test_db.add(user)
    await test_db.commit()
    await test_db.refresh(user)
    return user


@pytest_asyncio.fixture
async def test_user_2(test_db):
    """Create a second test user."""
    user = UserFactory.build(email="test2@example.com")
    test_db.add(user)
    await test_db.commit()
    await test_db.refresh(user)
    return user


@pytest.fixture
def test_password():
    return DEFAULT_PASSWORD


@pytest_asyncio.fixture
async def auth_headers(credential_cache, test_user):
    """X-Token header of the first test user."""
    token = await credential_cache.issue(test_user.id)
    return {"X-Token": token}


@pytest_asyncio.fixture
async def auth_headers_2(credential_cache, test_user_2):
    """X-Token header of the second test user."""
    token = await credential_cache.issue(test_user_2.id)
    return {"X-Token": token}


# File fixtures
@pytest_asyncio.fixture
async def test_folder(test_db, test_user):
    """Create a folder at the root of the first test user."""
    folder = FileFactory.build(user_id=test_user.id, name="Documents", kind="folder")
    test_db.add(folder)
    await test_db.commit()
    await test_db.refresh(folder)
    return folder


@pytest.fixture
def png_bytes():
    return make_image_bytes()
