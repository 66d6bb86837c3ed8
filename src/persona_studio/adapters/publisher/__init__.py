"""Platform publishing adapters."""

from persona_studio.adapters.publisher.base import (
    PublisherAdapter,
    PublishRequest,
    PublishResponse,
)
from persona_studio.adapters.publisher.instagram import InstagramReelsPublisher
from persona_studio.adapters.publisher.simulated import SimulatedPublisher
from persona_studio.adapters.publisher.tiktok import TikTokPublisher
from persona_studio.adapters.publisher.x import XPublisher

__all__ = [
    "PublisherAdapter",
    "PublishRequest",
    "PublishResponse",
    "InstagramReelsPublisher",
    "SimulatedPublisher",
    "TikTokPublisher",
    "XPublisher",
]
