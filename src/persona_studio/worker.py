"""Celery worker configuration."""

from typing import Any

from celery import Celery

from persona_studio.config import settings
from persona_studio.logging import setup_logging

# Setup logging before anything else
setup_logging()

# Create Celery app
celery_app = Celery(
    "persona_studio",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
)

beat_schedule: dict[str, dict[str, Any]] = {
    "refresh-video-status": {
        "task": "content.refresh_video_status",
        "schedule": settings.video_status_refresh_seconds,
        "options": {"queue": "default"},
    },
}
if settings.scheduler_backend == "celery":
    beat_schedule["publish-due-content"] = {
        "task": "content.publish_due",
        "schedule": settings.scheduler_interval_seconds,
        "options": {"queue": "publish"},
    }

# Celery configuration
celery_app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    # Task execution
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_time_limit=300,
    task_soft_time_limit=270,
    # Worker settings
    worker_prefetch_multiplier=1,
    worker_concurrency=4,
    # Result backend
    result_expires=86400,  # 24 hours
    # Task routing
    task_routes={
        "content.publish_due": {"queue": "publish"},
        "content.refresh_video_status": {"queue": "default"},
    },
    # Beat scheduler (for periodic tasks)
    beat_schedule=beat_schedule,
)

# Auto-discover tasks
celery_app.autodiscover_tasks(["persona_studio.jobs"], related_name="content_tasks")
