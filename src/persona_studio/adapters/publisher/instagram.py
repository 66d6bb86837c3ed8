"""Instagram Reels publisher using the Meta Graph API.

Publishing Flow:
1. POST /{ig-user-id}/media - Create media container with video_url
2. GET /{container-id}?fields=status_code - Poll until FINISHED
3. POST /{ig-user-id}/media_publish - Publish the container
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

# Meta Graph API endpoints
GRAPH_API_URL = "https://graph.facebook.com/v18.0"

MAX_CAPTION_LENGTH = 2200


def _extract_error(data: dict[str, Any] | None, fallback: str) -> str:
    if data:
        return data.get("error", {}).get("message", fallback)
    return fallback


class InstagramReelsPublisher(PublisherAdapter):
    """Instagram Reels publisher using the Content Publishing API."""

    def __init__(
        self,
        access_token: str | None,
        account_id: str | None,
        poll_interval: float = 5.0,
        max_polls: int = 60,
    ) -> None:
        self.access_token = access_token
        self.account_id = account_id
        self.poll_interval = poll_interval
        self.max_polls = max_polls

    @property
    def platform(self) -> ContentPlatform:
        return ContentPlatform.INSTAGRAM_REEL

    def _fail(self, message: str, response: dict[str, Any] | None = None) -> PublishResponse:
        logger.error("instagram_publish_failed", error=message)
        return PublishResponse(
            success=False,
            platform=self.platform,
            error_message=message,
            metadata={"api_response": response} if response else None,
        )

    async def publish(self, request: PublishRequest) -> PublishResponse:
        if not self.access_token or not self.account_id:
            return self._fail("Instagram credentials not configured")
        if not request.video_url or not request.video_url.startswith(("http://", "https://")):
            return self._fail("Instagram publishing requires a public video URL")

        caption = (request.text or "")[:MAX_CAPTION_LENGTH]

        async with httpx.AsyncClient(timeout=300.0) as client:
            container_response = await client.post(
                f"{GRAPH_API_URL}/{self.account_id}/media",
                params={
                    "media_type": "REELS",
                    "video_url": request.video_url,
                    "caption": caption,
                    "access_token": self.access_token,
                },
            )
            if container_response.status_code != 200:
                data = safe_json(container_response)
                return self._fail(
                    f"Failed to create media container: "
                    f"{_extract_error(data, container_response.text)}",
                    data,
                )

            container_id = container_response.json().get("id")
            if not container_id:
                return self._fail("No container ID in response")

            logger.info("instagram_container_created", container_id=container_id)

            for attempt in range(self.max_polls):
                status_response = await client.get(
                    f"{GRAPH_API_URL}/{container_id}",
                    params={"fields": "status_code,status", "access_token": self.access_token},
                )
                status_data = safe_json(status_response) or {}
                status_code = status_data.get("status_code")

                if status_response.status_code == 200 and status_code == "FINISHED":
                    break
                if status_code == "ERROR":
                    return self._fail(
                        f"Media processing failed: {status_data.get('status')}", status_data
                    )
                logger.debug("instagram_container_processing", attempt=attempt + 1)
                await asyncio.sleep(self.poll_interval)
            else:
                return self._fail("Media processing timed out")

            publish_response = await client.post(
                f"{GRAPH_API_URL}/{self.account_id}/media_publish",
                params={"creation_id": container_id, "access_token": self.access_token},
            )
            if publish_response.status_code != 200:
                data = safe_json(publish_response)
                return self._fail(
                    f"Failed to publish media: {_extract_error(data, publish_response.text)}",
                    data,
                )

            media_id = publish_response.json().get("id")

            permalink = None
            permalink_response = await client.get(
                f"{GRAPH_API_URL}/{media_id}",
                params={"fields": "permalink", "access_token": self.access_token},
            )
            if permalink_response.status_code == 200:
                permalink = permalink_response.json().get("permalink")

        logger.info("instagram_reel_published", media_id=media_id, permalink=permalink)
        return PublishResponse(
            success=True,
            platform=self.platform,
            platform_post_id=media_id,
            url=permalink,
        )
