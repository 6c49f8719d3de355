"""Long-lived client handles shared by request handlers and workers."""

import logging
from dataclasses import dataclass
from pathlib import Path

from app.core.config import Settings, ThumbnailBackendEnum
from app.database import Database
from app.domains.auth.cache import CredentialCache
from app.domains.file.storage import BlobStore
from app.domains.thumbnail.queue import CeleryThumbnailQueue, LocalThumbnailPool, ThumbnailQueue
from app.domains.thumbnail.service import ThumbnailService

logger = logging.getLogger(__name__)


@dataclass
class AppResources:
    database: Database
    cache: CredentialCache
    blobs: BlobStore
    thumbnails: ThumbnailQueue

    async def status(self) -> dict[str, bool]:
        return {
            "redis": await self.cache.is_alive(),
            "db": await self.database.is_alive(),
        }

    async def start(self) -> None:
        await self.thumbnails.start()

    async def close(self) -> None:
        await self.thumbnails.stop()
        await self.cache.close()
        await self.database.dispose()


def build_thumbnail_queue(settings: Settings, database: Database, blobs: BlobStore) -> ThumbnailQueue:
    if settings.thumbnail_backend == ThumbnailBackendEnum.celery:
        return CeleryThumbnailQueue()
    service = ThumbnailService(
        database,
        blobs,
        widths=settings.thumbnail_widths,
        max_attempts=settings.thumbnail_max_attempts,
        backoff_seconds=settings.thumbnail_backoff_seconds,
    )
    return LocalThumbnailPool(
        service, workers=settings.thumbnail_workers, max_pending=settings.thumbnail_queue_size
    )


def build_resources(settings: Settings) -> AppResources:
    Path(settings.storage_folder).mkdir(parents=True, exist_ok=True)
    database = Database.from_settings(settings)
    blobs = BlobStore.from_settings(settings)
    resources = AppResources(
        database=database,
        cache=CredentialCache.from_settings(settings),
        blobs=blobs,
        thumbnails=build_thumbnail_queue(settings, database, blobs),
    )
    logger.info(
        "Resources ready (storage=%s, thumbnails=%s)",
        settings.storage_folder,
        settings.thumbnail_backend.value,
    )
    return resources
