"""X (Twitter) publisher using the v2 posts endpoint."""

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

X_POSTS_URL = "https://api.twitter.com/2/tweets"


class XPublisher(PublisherAdapter):
    """Posts short text to X with an OAuth 2.0 user token."""

    def __init__(self, access_token: str | None) -> None:
        self.access_token = access_token

    @property
    def platform(self) -> ContentPlatform:
        return ContentPlatform.X_POST

    async def publish(self, request: PublishRequest) -> PublishResponse:
        if not self.access_token:
            return PublishResponse(
                success=False,
                platform=self.platform,
                error_message="X access token not configured",
            )
        if not request.text:
            return PublishResponse(
                success=False, platform=self.platform, error_message="Post text is empty"
            )

        async with httpx.AsyncClient(timeout=30.0) as client:
            response = await client.post(
                X_POSTS_URL,
                headers={"Authorization": f"Bearer {self.access_token}"},
                json={"text": request.text},
            )

        data = safe_json(response) or {}
        if response.status_code not in (200, 201):
            message = data.get("detail") or data.get("title") or response.text
            logger.error("x_publish_failed", status_code=response.status_code, error=message)
            return PublishResponse(
                success=False,
                platform=self.platform,
                error_message=f"X API error ({response.status_code}): {message}",
                metadata={"api_response": data} if data else None,
            )

        post_id = data.get("data", {}).get("id")
        logger.info("x_post_published", post_id=post_id)
        return PublishResponse(
            success=True,
            platform=self.platform,
            platform_post_id=post_id,
            url=f"https://x.com/i/web/status/{post_id}" if post_id else None,
        )
