"""Base interface for platform publishing adapters."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from persona_studio.domain.enums import ContentPlatform


@dataclass
class PublishRequest:
    """Request to publish one content item to a platform."""

    content_id: UUID
    text: str | None = None  # Post text or reel caption
    video_url: str | None = None  # Public URL; required for reels


@dataclass
class PublishResponse:
    """Response from publishing a content item."""

    success: bool
    platform: ContentPlatform
    platform_post_id: str | None = None
    url: str | None = None
    error_message: str | None = None
    metadata: dict[str, Any] | None = None


class PublisherAdapter(ABC):
    """Abstract base class for platform publishing adapters.

    Implementations:
    - SimulatedPublisher: Fabricates a post ID and URL without network calls
    - InstagramReelsPublisher: Instagram Reels via the Graph API
    - TikTokPublisher: TikTok Content Posting API (pull from URL)
    - XPublisher: X API v2 posts
    """

    @property
    @abstractmethod
    def platform(self) -> ContentPlatform:
        """The platform this adapter publishes to."""
        ...

    @abstractmethod
    async def publish(self, request: PublishRequest) -> PublishResponse:
        """Publish content to the platform.

        Args:
            request: Publish request with text and/or video URL

        Returns:
            PublishResponse with the platform post ID and URL or error
        """
        ...


def safe_json(response: Any) -> dict[str, Any] | None:
    """Parse a JSON body, returning None when there is none."""
    try:
        data = response.json()
    except ValueError:
        return None
    return data if isinstance(data, dict) else None
