"""Thumbnail generation for image files.

A job moves its file record through ``pending -> generating -> done | failed``.
The ``pending -> generating`` step is a conditional update, so a job delivered
twice is only ever worked on once.
"""

import asyncio
import io
import logging
from dataclasses import dataclass
from typing import Iterable
from uuid import UUID

from PIL import Image, UnidentifiedImageError
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_incrementing,
)

from app.database import Database
from app.domains.file.storage import BlobStore
from app.exceptions.base import StorageFaultError
from app.exceptions.file import BlobNotFoundError
from models import File, ThumbnailStatus

logger = logging.getLogger(__name__)

THUMBNAIL_WIDTHS = (500, 250, 100)
PNG_MODES = ("1", "L", "LA", "P", "RGB", "RGBA")


@dataclass(frozen=True)
class ThumbnailJob:
    file_id: UUID
    locator: str


class ImageDecodeError(Exception):
    """The source bytes are not an image Pillow can read and re-encode."""


def render_thumbnail(source: bytes, width: int) -> bytes:
    """Scale ``source`` to ``width`` pixels wide, keeping its aspect ratio.

    The thumbnail keeps the source format when Pillow can write it and is a
    PNG otherwise.
    """
    try:
        with Image.open(io.BytesIO(source)) as img:
            img.load()
            image_format = img.format or "PNG"
            src_width, src_height = img.size
            height = max(1, round(src_height * width / src_width))
            resized = img.resize((width, height), Image.Resampling.LANCZOS)

        if image_format not in Image.SAVE:
            image_format = "PNG"
            if resized.mode not in PNG_MODES:
                resized = resized.convert("RGBA")
        elif image_format == "JPEG" and resized.mode not in ("RGB", "L"):
            resized = resized.convert("RGB")

        output_buffer = io.BytesIO()
        resized.save(output_buffer, format=image_format)
    except (UnidentifiedImageError, OSError, ValueError, KeyError, Image.DecompressionBombError) as e:
        raise ImageDecodeError(str(e) or type(e).__name__) from e
    return output_buffer.getvalue()


class ThumbnailService:
    def __init__(
        self,
        database: Database,
        blobs: BlobStore,
        widths: Iterable[int] = THUMBNAIL_WIDTHS,
        max_attempts: int = 3,
        backoff_seconds: float = 0.5,
    ):
        self.database = database
        self.blobs = blobs
        self.widths = tuple(widths)
        self.max_attempts = max_attempts
        self.backoff_seconds = backoff_seconds

    async def process(self, job: ThumbnailJob) -> ThumbnailStatus | None:
        """Generate every thumbnail width for ``job``.

        Returns the final status, or None if the job was not claimed because
        another delivery of it already ran or is running.
        """
        claimed = await self._transition(job.file_id, ThumbnailStatus.pending, ThumbnailStatus.generating)
        if not claimed:
            logger.info("Skipping thumbnail job for file %s: not pending", job.file_id)
            return None
        logger.info("Generating thumbnails for file %s", job.file_id)

        try:
            source = await self.blobs.get(job.locator)
            for width in self.widths:
                data = await asyncio.to_thread(render_thumbnail, source, width)
                await self._write_with_retry(BlobStore.thumbnail_locator(job.locator, width), data)
        except ImageDecodeError as e:
            logger.warning("Cannot decode image of file %s: %s", job.file_id, str(e))
            return await self._finish(job.file_id, ThumbnailStatus.failed)
        except BlobNotFoundError:
            logger.error("Source content of file %s is missing", job.file_id)
            return await self._finish(job.file_id, ThumbnailStatus.failed)
        except StorageFaultError as e:
            logger.error("Giving up on thumbnails for file %s: %s", job.file_id, e.message)
            return await self._finish(job.file_id, ThumbnailStatus.failed)
        except Exception:
            logger.exception("Unexpected error generating thumbnails for file %s", job.file_id)
            await self._finish(job.file_id, ThumbnailStatus.failed)
            raise

        return await self._finish(job.file_id, ThumbnailStatus.done)

    async def _write_with_retry(self, locator: str, data: bytes) -> None:
        """Write one thumbnail, waiting ``backoff_seconds * attempt`` between attempts."""
        retrying = AsyncRetrying(
            retry=retry_if_exception_type(StorageFaultError),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_incrementing(start=self.backoff_seconds, increment=self.backoff_seconds),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            sleep=asyncio.sleep,
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                await self.blobs.write(locator, data)

    async def _finish(self, file_id: UUID, status: ThumbnailStatus) -> ThumbnailStatus:
        await self._transition(file_id, ThumbnailStatus.generating, status)
        logger.info("Thumbnails for file %s: %s", file_id, status.value)
        return status

    async def _transition(self, file_id: UUID, current: ThumbnailStatus, new: ThumbnailStatus) -> bool:
        stmt = (
            update(File)
            .where(File.id == file_id, File.thumbnail_status == current.value)
            .values(thumbnail_status=new.value)
        )
        async with self.database.session() as session:
            try:
                result = await session.execute(stmt)
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error("Failed to move file %s to %s: %s", file_id, new.value, str(e))
                raise StorageFaultError("Failed to update thumbnail status") from e
        return result.rowcount == 1
