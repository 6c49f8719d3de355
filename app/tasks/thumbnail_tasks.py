"""Celery tasks for thumbnail generation."""

import asyncio
import logging
from typing import Any
from uuid import UUID

from app.celery_app import celery_app
from app.core.config import settings
from app.database import Database
from app.domains.file.storage import BlobStore
from app.domains.thumbnail.service import ThumbnailJob, ThumbnailService
from models import ThumbnailStatus

logger = logging.getLogger(__name__)


@celery_app.task(name="app.tasks.thumbnail_tasks.generate_thumbnails_task", bind=True)
def generate_thumbnails_task(self, file_id: str, locator: str) -> dict[str, Any]:
    """Generate the thumbnail set of one image file.

    Write retries happen inside :class:`ThumbnailService`, so the task itself
    is never retried by Celery.

    Returns:
        Dictionary with the file id and its final thumbnail status
    """
    logger.info("Thumbnail task %s started for file %s", self.request.id, file_id)
    status = asyncio.run(_generate_thumbnails_async(UUID(file_id), locator))
    return {"file_id": file_id, "status": status.value if status else "skipped"}


async def _generate_thumbnails_async(file_id: UUID, locator: str) -> ThumbnailStatus | None:
    """Run one job with resources owned by this task invocation."""
    database = Database.from_settings(settings)
    try:
        service = ThumbnailService(
            database,
            BlobStore.from_settings(settings),
            widths=settings.thumbnail_widths,
            max_attempts=settings.thumbnail_max_attempts,
            backoff_seconds=settings.thumbnail_backoff_seconds,
        )
        return await service.process(ThumbnailJob(file_id=file_id, locator=locator))
    finally:
        await database.dispose()
