"""Publisher dispatcher: one entry point for every platform."""

from collections.abc import Mapping
from uuid import UUID

from persona_studio.adapters.publisher.base import PublisherAdapter, PublishRequest
from persona_studio.domain.enums import ContentPlatform
from persona_studio.domain.models import PublishResult
from persona_studio.logging import get_logger

logger = get_logger(__name__)

UNSUPPORTED_PLATFORM = "unsupported platform"


class PublisherDispatcher:
    """Routes a publish request to the platform's handler.

    Always returns a normalized ``PublishResult``; handler exceptions become
    failed results so callers never branch on the platform.
    """

    def __init__(self, handlers: Mapping[ContentPlatform, PublisherAdapter]) -> None:
        self.handlers = dict(handlers)

    async def publish(
        self,
        content_id: UUID,
        platform: ContentPlatform | str,
        script: str | None,
        video_url: str | None,
    ) -> PublishResult:
        platform_name = str(platform)
        try:
            handler = self.handlers.get(ContentPlatform(platform))
        except ValueError:
            handler = None

        if handler is None:
            logger.warning("publish_unsupported_platform", platform=platform_name)
            return PublishResult(success=False, platform=platform_name, error=UNSUPPORTED_PLATFORM)

        try:
            response = await handler.publish(
                PublishRequest(content_id=content_id, text=script, video_url=video_url)
            )
        except Exception as e:
            logger.error(
                "publish_handler_error",
                platform=platform_name,
                handler=type(handler).__name__,
                content_id=str(content_id),
                error=str(e),
            )
            return PublishResult(
                success=False,
                platform=platform_name,
                error=f"{platform_name} publisher failed: {e}",
            )

        if not response.success:
            return PublishResult(
                success=False,
                platform=platform_name,
                error=response.error_message or f"{platform_name} publisher failed",
            )

        logger.info(
            "content_published",
            platform=platform_name,
            content_id=str(content_id),
            external_id=response.platform_post_id,
        )
        return PublishResult(
            success=True,
            platform=platform_name,
            external_id=response.platform_post_id,
            external_url=response.url,
        )
