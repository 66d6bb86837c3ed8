"""Scheduled-publish poller.

Periodically publishes content whose scheduled time has passed. Each due
item is published independently; a failure is recorded on that item and
the sweep moves on. The loop itself never dies from a sweep error.
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone

from persona_studio.config import settings
from persona_studio.db.repository import ContentRepository
from persona_studio.domain.enums import ContentStatus, SchedulerState
from persona_studio.domain.models import ContentItem
from persona_studio.logging import get_logger
from persona_studio.services.publisher import PublisherDispatcher

logger = get_logger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SweepReport:
    """What one sweep did."""

    due: int = 0
    published: int = 0
    failed: int = 0
    error: str | None = None


class ScheduledPublisher:
    """Owns the publish loop and its run state."""

    def __init__(
        self,
        content_repo: ContentRepository,
        dispatcher: PublisherDispatcher,
        interval_seconds: float | None = None,
        max_attempts: int | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.content_repo = content_repo
        self.dispatcher = dispatcher
        self.interval_seconds = interval_seconds or settings.scheduler_interval_seconds
        self.max_attempts = (
            settings.max_publish_attempts if max_attempts is None else max_attempts
        )
        self.clock = clock
        self.state = SchedulerState.STOPPED
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self.state == SchedulerState.RUNNING

    async def start(self) -> None:
        """Start the loop; a second start while running is a no-op."""
        if self.running:
            logger.info("scheduler_already_running")
            return

        self._stop_event = asyncio.Event()
        self.state = SchedulerState.RUNNING
        self._task = asyncio.create_task(self._run(), name="scheduled-publisher")
        logger.info("scheduler_started", interval_seconds=self.interval_seconds)

    async def stop(self) -> None:
        """Stop after the current sweep finishes; a no-op when stopped."""
        if not self.running:
            return

        self._stop_event.set()
        if self._task is not None:
            await self._task
            self._task = None
        self.state = SchedulerState.STOPPED
        logger.info("scheduler_stopped")

    async def _run(self) -> None:
        while not self._stop_event.is_set():
            await self.sweep()
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                pass

    async def _publish_item(self, item: ContentItem) -> bool:
        result = await self.dispatcher.publish(
            item.id, item.platform, item.script, item.publishable_video_url
        )

        if not result.success:
            await asyncio.to_thread(
                self.content_repo.record_publish_failure, item.id, result.error or "unknown"
            )
            logger.warning(
                "scheduler_item_failed",
                content_id=str(item.id),
                platform=result.platform,
                attempt=item.publish_attempts + 1,
                error=result.error,
            )
            return False

        updated = await asyncio.to_thread(
            self.content_repo.mark_published,
            item.id,
            ContentStatus.SCHEDULED,
            self.clock(),
            result.external_id,
            result.external_url,
        )
        if not updated:
            logger.warning(
                "scheduler_item_state_changed",
                content_id=str(item.id),
                external_id=result.external_id,
            )
            return False

        logger.info(
            "scheduler_item_published",
            content_id=str(item.id),
            platform=result.platform,
            external_id=result.external_id,
        )
        return True

    async def sweep(self) -> SweepReport:
        """Publish everything that is due right now."""
        report = SweepReport()
        try:
            due = await asyncio.to_thread(
                self.content_repo.find_due, self.clock(), self.max_attempts
            )
            report.due = len(due)
            if not due:
                return report

            logger.info("scheduler_sweep_started", due=len(due))
            for item in due:
                try:
                    published = await self._publish_item(item)
                except Exception as e:
                    logger.error(
                        "scheduler_item_error", content_id=str(item.id), error=str(e)
                    )
                    published = False
                if published:
                    report.published += 1
                else:
                    report.failed += 1
        except Exception as e:
            logger.error("scheduler_sweep_failed", error=str(e))
            report.error = str(e)
            return report

        logger.info(
            "scheduler_sweep_completed",
            due=report.due,
            published=report.published,
            failed=report.failed,
        )
        return report
