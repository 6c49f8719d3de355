"""
Unit tests for the thumbnail job queues.
"""

import asyncio
import uuid
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from app.domains.thumbnail.queue import (
    CeleryThumbnailQueue,
    LocalThumbnailPool,
    ThumbnailQueueFullError,
)
from app.domains.thumbnail.service import ThumbnailJob


def _job(file_id=None):
    file_id = file_id or uuid.uuid4()
    return ThumbnailJob(file_id=file_id, locator=str(uuid.uuid4()))


class TestLocalThumbnailPool:
    """Test cases for LocalThumbnailPool."""

    @pytest.mark.asyncio
    async def test_workers_process_jobs(self):
        service = MagicMock()
        service.process = AsyncMock(return_value=None)
        pool = LocalThumbnailPool(service, workers=2, max_pending=10)
        await pool.start()
        jobs = [_job() for _ in range(5)]

        try:
            for job in jobs:
                await pool.enqueue(job)
            await pool.join()
        finally:
            await pool.stop()

        processed = [c.args[0] for c in service.process.await_args_list]
        assert sorted(j.file_id for j in processed) == sorted(j.file_id for j in jobs)

    @pytest.mark.asyncio
    async def test_start_and_stop(self):
        pool = LocalThumbnailPool(MagicMock(), workers=3)

        await pool.start()
        assert pool.running is True
        assert len(pool._tasks) == 3

        await pool.start()
        assert len(pool._tasks) == 3

        await pool.stop()
        assert pool.running is False

    @pytest.mark.asyncio
    async def test_full_queue_rejects_job(self):
        pool = LocalThumbnailPool(MagicMock(), workers=1, max_pending=2)

        await pool.enqueue(_job())
        await pool.enqueue(_job())

        with pytest.raises(ThumbnailQueueFullError):
            await pool.enqueue(_job())
        assert pool.pending == 2

    @pytest.mark.asyncio
    async def test_duplicate_job_is_queued_once(self):
        pool = LocalThumbnailPool(MagicMock(), workers=1, max_pending=10)
        job = _job()

        await pool.enqueue(job)
        await pool.enqueue(ThumbnailJob(file_id=job.file_id, locator=job.locator))

        assert pool.pending == 1

    @pytest.mark.asyncio
    async def test_job_can_be_queued_again_after_processing(self):
        service = MagicMock()
        service.process = AsyncMock(return_value=None)
        pool = LocalThumbnailPool(service, workers=1, max_pending=10)
        await pool.start()
        job = _job()

        try:
            await pool.enqueue(job)
            await pool.join()
            await pool.enqueue(job)
            await pool.join()
        finally:
            await pool.stop()

        assert service.process.await_count == 2

    @pytest.mark.asyncio
    async def test_failing_job_does_not_stop_worker(self):
        service = MagicMock()
        service.process = AsyncMock(side_effect=[RuntimeError("boom"), None])
        pool = LocalThumbnailPool(service, workers=1, max_pending=10)
        await pool.start()

        try:
            await pool.enqueue(_job())
            await pool.enqueue(_job())
            await asyncio.wait_for(pool.join(), timeout=5)
        finally:
            await pool.stop()

        assert service.process.await_count == 2

    @pytest.mark.asyncio
    async def test_pending_jobs_wait_for_workers(self):
        """Test jobs queued before start are processed once the pool starts."""
        service = MagicMock()
        service.process = AsyncMock(return_value=None)
        pool = LocalThumbnailPool(service, workers=1, max_pending=10)

        await pool.enqueue(_job())
        assert service.process.await_count == 0

        await pool.start()
        try:
            await pool.join()
        finally:
            await pool.stop()

        assert service.process.await_count == 1


class TestCeleryThumbnailQueue:
    """Test cases for CeleryThumbnailQueue."""

    @pytest.mark.asyncio
    async def test_enqueue_publishes_task(self):
        job = _job()

        with patch("app.tasks.thumbnail_tasks.generate_thumbnails_task.apply_async") as apply_async:
            await CeleryThumbnailQueue().enqueue(job)

        apply_async.assert_called_once_with(args=[str(job.file_id), job.locator])

    @pytest.mark.asyncio
    async def test_start_and_stop_are_noops(self):
        queue = CeleryThumbnailQueue()

        await queue.start()
        await queue.stop()
