"""Thumbnail job queues.

Two backends share the ``enqueue(job)`` entry point:

- :class:`LocalThumbnailPool` keeps jobs in a bounded in-process queue drained
  by a fixed number of worker tasks. A full queue rejects new jobs with
  :class:`ThumbnailQueueFullError` instead of blocking the upload.
- :class:`CeleryThumbnailQueue` publishes jobs to the ``thumbnails`` Celery
  queue; the worker pool is the Celery worker.
"""

import asyncio
import logging
from typing import Protocol
from uuid import UUID

from app.domains.thumbnail.service import ThumbnailJob, ThumbnailService

logger = logging.getLogger(__name__)


class ThumbnailQueueFullError(Exception):
    """Raised when the local queue cannot accept another job."""


class ThumbnailQueue(Protocol):
    async def enqueue(self, job: ThumbnailJob) -> None: ...

    async def start(self) -> None: ...

    async def stop(self) -> None: ...


class LocalThumbnailPool:
    def __init__(self, service: ThumbnailService, workers: int = 4, max_pending: int = 100):
        self.service = service
        self.workers = workers
        self.queue: asyncio.Queue[ThumbnailJob] = asyncio.Queue(maxsize=max_pending)
        self._keys: set[UUID] = set()
        self._tasks: list[asyncio.Task] = []

    @property
    def pending(self) -> int:
        return self.queue.qsize()

    @property
    def running(self) -> bool:
        return bool(self._tasks)

    async def start(self) -> None:
        if self._tasks:
            return
        self._tasks = [
            asyncio.create_task(self._worker(n), name=f"thumbnail-worker-{n}")
            for n in range(self.workers)
        ]
        logger.info("Started %d thumbnail workers", self.workers)

    async def stop(self) -> None:
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        logger.info("Stopped thumbnail workers")

    async def enqueue(self, job: ThumbnailJob) -> None:
        if job.file_id in self._keys:
            logger.debug("Thumbnail job for file %s already queued", job.file_id)
            return
        try:
            self.queue.put_nowait(job)
        except asyncio.QueueFull as e:
            raise ThumbnailQueueFullError(
                f"Thumbnail queue is full ({self.queue.maxsize} pending jobs)"
            ) from e
        self._keys.add(job.file_id)

    async def join(self) -> None:
        """Wait until every queued job has been processed."""
        await self.queue.join()

    async def _worker(self, n: int) -> None:
        while True:
            job = await self.queue.get()
            try:
                await self.service.process(job)
            except Exception:
                logger.exception("Thumbnail worker %d failed on file %s", n, job.file_id)
            finally:
                self._keys.discard(job.file_id)
                self.queue.task_done()


class CeleryThumbnailQueue:
    async def start(self) -> None:
        return None

    async def stop(self) -> None:
        return None

    async def enqueue(self, job: ThumbnailJob) -> None:
        from app.tasks.thumbnail_tasks import generate_thumbnails_task

        # apply_async talks to the broker synchronously
        await asyncio.to_thread(
            generate_thumbnails_task.apply_async,
            args=[str(job.file_id), job.locator],
        )
