"""Celery tasks for scheduled publishing and video status refresh."""

from typing import Any

from celery import shared_task

from persona_studio.db.repository import ContentRepository, PersonaRepository
from persona_studio.logging import get_logger
from persona_studio.services.content import ContentService
from persona_studio.services.providers import get_publisher_handlers, get_video_gen_provider
from persona_studio.services.publisher import PublisherDispatcher
from persona_studio.services.scheduler import ScheduledPublisher
from persona_studio.services.video import VideoTaskDispatcher
from persona_studio.utils.async_utils import run_async

logger = get_logger(__name__)


@shared_task(name="content.publish_due")
def publish_due_task() -> dict[str, Any]:
    """Run one sweep of the scheduled-publish poller.

    Returns:
        Dict with the number of due, published and failed items.
    """
    publisher = ScheduledPublisher(
        ContentRepository(), PublisherDispatcher(get_publisher_handlers())
    )
    report = run_async(publisher.sweep())
    return {
        "success": report.error is None,
        "due": report.due,
        "published": report.published,
        "failed": report.failed,
        "error": report.error,
    }


@shared_task(name="content.refresh_video_status")
def refresh_video_status_task() -> dict[str, Any]:
    """Poll the video provider for every unfinished video task."""
    content_repo = ContentRepository()
    service = ContentService(
        content_repo,
        PersonaRepository(),
        PublisherDispatcher(get_publisher_handlers()),
        VideoTaskDispatcher(get_video_gen_provider()),
    )
    checked = run_async(service.refresh_pending_videos())
    logger.info("video_status_refresh_completed", checked=checked)
    return {"success": True, "checked": checked}
