"""TikTok publisher using the Content Posting API.

Reels are already hosted, so the upload uses ``PULL_FROM_URL`` and TikTok
fetches the file itself.
"""

import asyncio
from typing import Any

import httpx

from persona_studio.adapters.publisher.base import (
    PublisherAdapter,
    PublishRequest,
    PublishResponse,
    safe_json,
)
from persona_studio.domain.enums import ContentPlatform
from persona_studio.logging import get_logger

logger = get_logger(__name__)

TIKTOK_POST_INIT_URL = "https://open.tiktokapis.com/v2/post/publish/video/init/"
TIKTOK_POST_STATUS_URL = "https://open.tiktokapis.com/v2/post/publish/status/fetch/"

MAX_TITLE_LENGTH = 150


class TikTokPublisher(PublisherAdapter):
    """TikTok direct-post publisher."""

    def __init__(
        self,
        access_token: str | None,
        poll_interval: float = 5.0,
        max_polls: int = 60,
    ) -> None:
        self.access_token = access_token
        self.poll_interval = poll_interval
        self.max_polls = max_polls

    @property
    def platform(self) -> ContentPlatform:
        return ContentPlatform.TIKTOK

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json; charset=UTF-8",
        }

    def _fail(self, message: str, response: dict[str, Any] | None = None) -> PublishResponse:
        logger.error("tiktok_publish_failed", error=message)
        return PublishResponse(
            success=False,
            platform=self.platform,
            error_message=message,
            metadata={"api_response": response} if response else None,
        )

    async def publish(self, request: PublishRequest) -> PublishResponse:
        if not self.access_token:
            return self._fail("TikTok access token not configured")
        if not request.video_url:
            return self._fail("TikTok publishing requires a public video URL")

        async with httpx.AsyncClient(timeout=60.0) as client:
            init_response = await client.post(
                TIKTOK_POST_INIT_URL,
                headers=self._headers(),
                json={
                    "post_info": {
                        "title": (request.text or "")[:MAX_TITLE_LENGTH],
                        "privacy_level": "SELF_ONLY",
                    },
                    "source_info": {
                        "source": "PULL_FROM_URL",
                        "video_url": request.video_url,
                    },
                },
            )
            init_data = safe_json(init_response) or {}
            error = init_data.get("error", {})
            if init_response.status_code != 200 or error.get("code") != "ok":
                return self._fail(
                    f"Upload init failed: {error.get('message', init_response.text)}", init_data
                )

            publish_id = init_data.get("data", {}).get("publish_id")
            if not publish_id:
                return self._fail("No publish ID in response", init_data)

            logger.info("tiktok_upload_initialized", publish_id=publish_id)

            for attempt in range(self.max_polls):
                status_response = await client.post(
                    TIKTOK_POST_STATUS_URL,
                    headers=self._headers(),
                    json={"publish_id": publish_id},
                )
                status_data = safe_json(status_response) or {}
                status = status_data.get("data", {}).get("status")

                if status == "PUBLISH_COMPLETE":
                    post_ids = status_data["data"].get("publicaly_available_post_id") or []
                    post_id = str(post_ids[0]) if post_ids else publish_id
                    logger.info("tiktok_video_published", publish_id=publish_id)
                    return PublishResponse(
                        success=True,
                        platform=self.platform,
                        platform_post_id=post_id,
                        url=f"https://www.tiktok.com/video/{post_id}",
                    )
                if status == "FAILED":
                    reason = status_data["data"].get("fail_reason", "Unknown")
                    return self._fail(f"Video processing failed: {reason}", status_data)

                logger.debug("tiktok_processing", status=status, attempt=attempt + 1)
                await asyncio.sleep(self.poll_interval)

        return self._fail("Video processing timed out")
