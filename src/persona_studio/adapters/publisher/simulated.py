"""Simulated publisher used until live platform credentials are wired in."""

import asyncio
import time
from collections.abc import Callable

from persona_studio.adapters.publisher.base import (
    PublisherAdapter,
    PublishRequest,
    PublishResponse,
)
from persona_studio.domain.enums import ContentPlatform
from persona_studio.logging import get_logger

logger = get_logger(__name__)

PLATFORM_HOSTS = {
    ContentPlatform.INSTAGRAM_REEL: "instagram.com",
    ContentPlatform.TIKTOK: "tiktok.com",
    ContentPlatform.X_POST: "x.com",
}


class SimulatedPublisher(PublisherAdapter):
    """Always succeeds with a fabricated post ID and URL."""

    def __init__(
        self,
        platform: ContentPlatform,
        latency_seconds: float = 0.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._platform = platform
        self.latency_seconds = latency_seconds
        self.clock = clock

    @property
    def platform(self) -> ContentPlatform:
        return self._platform

    async def publish(self, request: PublishRequest) -> PublishResponse:
        logger.info(
            "simulated_publish_started",
            platform=self.platform,
            content_id=str(request.content_id),
        )

        if self.latency_seconds:
            await asyncio.sleep(self.latency_seconds)

        post_id = f"ext_{request.content_id}_{int(self.clock() * 1000)}"
        url = f"https://{PLATFORM_HOSTS[self.platform]}/post/{request.content_id}"

        return PublishResponse(
            success=True,
            platform=self.platform,
            platform_post_id=post_id,
            url=url,
            metadata={"adapter": "simulated"},
        )
