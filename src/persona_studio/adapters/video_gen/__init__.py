"""Video generation adapters."""

from persona_studio.adapters.video_gen.base import (
    VideoGenProvider,
    VideoGenRequest,
    VideoGenResult,
    VideoTaskStatus,
)
from persona_studio.adapters.video_gen.kling import KlingProvider
from persona_studio.adapters.video_gen.stub import StubVideoGenProvider

__all__ = [
    "VideoGenProvider",
    "VideoGenRequest",
    "VideoGenResult",
    "VideoTaskStatus",
    "KlingProvider",
    "StubVideoGenProvider",
]
