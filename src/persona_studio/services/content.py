"""Content review, editing and publish-now.

Every status change goes through the lifecycle table and is written with a
conditional update guarded by the status that was read, so two reviewers
(or a reviewer and the poller) can never both win.
"""

import asyncio
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from uuid import UUID

from persona_studio.db.repository import ContentRepository, PersonaRepository
from persona_studio.domain.enums import (
    ContentAction,
    ContentPlatform,
    ContentStatus,
    ContentType,
    VideoGenerationStatus,
)
from persona_studio.domain.errors import (
    ConcurrentModificationError,
    ContentNotFoundError,
    InvalidInputError,
    InvalidTransitionError,
    PublishError,
)
from persona_studio.domain.lifecycle import require_publishable, review_target
from persona_studio.domain.models import ContentItem, ContentStats, PublishResult
from persona_studio.logging import get_logger
from persona_studio.services.publisher import PublisherDispatcher
from persona_studio.services.video import VideoTaskDispatcher

logger = get_logger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def start_of_week(now: datetime) -> datetime:
    """Monday 00:00 of the week containing ``now``, in the same timezone."""
    monday = now - timedelta(days=now.weekday())
    return monday.replace(hour=0, minute=0, second=0, microsecond=0)


class ContentService:
    """User-facing operations on content items."""

    def __init__(
        self,
        content_repo: ContentRepository,
        persona_repo: PersonaRepository,
        dispatcher: PublisherDispatcher,
        video_dispatcher: VideoTaskDispatcher | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.content_repo = content_repo
        self.persona_repo = persona_repo
        self.dispatcher = dispatcher
        self.video_dispatcher = video_dispatcher
        self.clock = clock

    def get(self, user_id: str, content_id: UUID) -> ContentItem:
        item = self.content_repo.get_owned(user_id, content_id)
        if item is None:
            raise ContentNotFoundError("Content not found")
        return item

    def list_content(
        self,
        user_id: str,
        status: ContentStatus | None = None,
        platform: ContentPlatform | None = None,
        content_type: ContentType | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> tuple[list[ContentItem], int]:
        return self.content_repo.list_for_user(
            user_id,
            status=status,
            platform=platform,
            content_type=content_type,
            page=page,
            limit=limit,
        )

    def create_manual(
        self,
        user_id: str,
        platform: ContentPlatform,
        script: str | None = None,
        video_url: str | None = None,
        avatar_id: UUID | None = None,
    ) -> ContentItem:
        """Create a draft from user-supplied material."""
        if (
            avatar_id is not None
            and self.persona_repo.get_avatar_owned(user_id, avatar_id) is None
        ):
            raise ContentNotFoundError("Avatar not found")
        if video_url and not platform.is_video:
            raise InvalidInputError("Text content cannot carry a video")

        item = self.content_repo.create(
            user_id=user_id, platform=platform, script=script, avatar_id=avatar_id
        )
        if video_url:
            item = self.content_repo.update_fields(item.id, video_url=video_url) or item

        logger.info("content_created", content_id=str(item.id), platform=platform)
        return item

    def update(
        self,
        user_id: str,
        content_id: UUID,
        script: str | None = None,
        video_url: str | None = None,
    ) -> ContentItem:
        """Edit script and/or video URL of a not-yet-published item."""
        item = self.get(user_id, content_id)
        if item.status == ContentStatus.PUBLISHED:
            raise InvalidTransitionError('Cannot edit content with status "published"')
        if video_url is not None and item.content_type == ContentType.TEXT:
            raise InvalidInputError("Text content cannot carry a video")

        values = {}
        if script is not None:
            values["script"] = script
        if video_url is not None:
            values["video_url"] = video_url
        if not values:
            return item

        if not self.content_repo.transition(content_id, item.status, **values):
            raise ConcurrentModificationError("Content was modified concurrently")
        return self.get(user_id, content_id)

    def stats(self, user_id: str) -> ContentStats:
        counts = self.content_repo.count_by_status(user_id)
        return ContentStats(
            this_week=self.content_repo.count_created_since(
                user_id, start_of_week(self.clock())
            ),
            pending_review=counts[ContentStatus.PENDING_REVIEW],
            published=counts[ContentStatus.PUBLISHED],
            scheduled=counts[ContentStatus.SCHEDULED],
        )

    def delete(self, user_id: str, content_id: UUID) -> None:
        if not self.content_repo.delete(user_id, content_id):
            raise ContentNotFoundError("Content not found")
        logger.info("content_deleted", content_id=str(content_id))

    def transition(
        self,
        user_id: str,
        content_id: UUID,
        action: ContentAction,
        scheduled_for: datetime | None = None,
    ) -> ContentItem:
        """Apply a review action (submit, approve, reject, schedule).

        Raises:
            ContentNotFoundError: If the item is missing or not owned.
            InvalidTransitionError: If the action is illegal from the current state.
            InvalidScheduleError: If a schedule time is missing or not in the future.
            ConcurrentModificationError: If the status changed since it was read.
        """
        if action == ContentAction.PUBLISH:
            raise InvalidTransitionError("Use publish to publish content")

        item = self.get(user_id, content_id)
        target = review_target(item.status, action, scheduled_for, self.clock())

        values: dict[str, object] = {"status": target}
        if target == ContentStatus.SCHEDULED:
            values.update(
                scheduled_for=scheduled_for, publish_attempts=0, last_publish_error=None
            )
        elif item.scheduled_for is not None:
            values["scheduled_for"] = None

        if not self.content_repo.transition(content_id, item.status, **values):
            raise ConcurrentModificationError("Content was modified concurrently")

        logger.info(
            "content_transitioned",
            content_id=str(content_id),
            action=action,
            from_status=item.status,
            to_status=target,
        )
        return self.get(user_id, content_id)

    async def publish_now(
        self, user_id: str, content_id: UUID
    ) -> tuple[PublishResult, ContentItem]:
        """Publish an approved or scheduled item immediately.

        Raises:
            ContentNotFoundError: If the item is missing or not owned.
            InvalidTransitionError: If the item is not approved or scheduled;
                nothing is mutated.
            PublishError: If the platform call failed; the status is unchanged.
            ConcurrentModificationError: If the status changed during the call.
        """
        item = await asyncio.to_thread(self.get, user_id, content_id)
        require_publishable(item.status)

        result = await self.dispatcher.publish(
            item.id, item.platform, item.script, item.publishable_video_url
        )

        if not result.success:
            await asyncio.to_thread(
                self.content_repo.record_publish_failure, item.id, result.error or "unknown"
            )
            logger.warning(
                "publish_now_failed",
                content_id=str(content_id),
                platform=result.platform,
                error=result.error,
            )
            raise PublishError(result.error or "Failed to publish content")

        now = self.clock()
        clear_schedule = item.scheduled_for is not None and item.scheduled_for > now
        updated = await asyncio.to_thread(
            self.content_repo.mark_published,
            item.id,
            item.status,
            now,
            result.external_id,
            result.external_url,
            clear_schedule,
        )
        if not updated:
            logger.error(
                "publish_now_lost_race",
                content_id=str(content_id),
                external_id=result.external_id,
            )
            raise ConcurrentModificationError(
                "Content was published but its status changed concurrently"
            )

        return result, await asyncio.to_thread(self.get, user_id, content_id)

    async def refresh_video_status(self, item: ContentItem) -> ContentItem:
        """Poll the video task of ``item`` and record a final state if reached."""
        if self.video_dispatcher is None or not item.video_task_id:
            return item

        status = await self.video_dispatcher.status(item.video_task_id)
        if status.status == item.video_status:
            return item

        values: dict[str, object] = {"video_status": status.status}
        if status.status == VideoGenerationStatus.COMPLETED and status.video_url:
            values["video_url"] = status.video_url

        updated = await asyncio.to_thread(self.content_repo.update_fields, item.id, **values)
        logger.info(
            "video_status_updated",
            content_id=str(item.id),
            video_status=status.status,
        )
        return updated or item

    async def refresh_pending_videos(self) -> int:
        """Refresh every unfinished video task. Returns how many were checked."""
        items = await asyncio.to_thread(self.content_repo.find_pending_video)
        for item in items:
            try:
                await self.refresh_video_status(item)
            except Exception as e:
                logger.error(
                    "video_status_refresh_failed", content_id=str(item.id), error=str(e)
                )
        return len(items)
