"""Celery application configuration."""

from celery import Celery
from celery.signals import setup_logging as celery_setup_logging

from app.core.config import settings
from app.core.logging_config import setup_logging

# Create Celery instance
celery_app = Celery(
    "files_manager",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["app.tasks.thumbnail_tasks"],
)

# Configure Celery
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=10 * 60,  # 10 minutes
    task_soft_time_limit=8 * 60,  # 8 minutes
    # At-least-once: a job is acknowledged only after it ran
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    worker_concurrency=settings.thumbnail_workers,
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=1000,
)

celery_app.conf.task_routes = {
    "app.tasks.thumbnail_tasks.*": {"queue": "thumbnails"},
}


@celery_setup_logging.connect
def configure_worker_logging(**_kwargs):
    setup_logging(settings)
