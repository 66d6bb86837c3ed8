"""Video generation provider interface.

Generation runs remotely and takes minutes: ``submit`` and ``lip_sync``
return a task handle at once and callers poll ``check_status`` until the
task reaches a final state.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from persona_studio.domain.enums import VideoGenerationStatus


@dataclass
class VideoGenRequest:
    """One clip to generate.

    With ``image_url`` the still is animated (the avatar photo, usually);
    without it the clip comes from the prompt alone.
    """

    prompt: str
    duration_seconds: int = 5
    aspect_ratio: str = "9:16"
    mode: str = "std"
    image_url: str | None = None
    options: dict[str, Any] | None = None  # Passed through to the model


@dataclass
class VideoGenResult:
    success: bool
    task_id: str | None = None
    error_message: str | None = None
    metadata: dict[str, Any] | None = None


@dataclass
class VideoTaskStatus:
    status: VideoGenerationStatus
    video_url: str | None = None
    error_message: str | None = None


class VideoGenProvider(ABC):
    @property
    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    async def submit(self, request: VideoGenRequest) -> VideoGenResult: ...

    @abstractmethod
    async def lip_sync(self, video_url: str, audio_url: str) -> VideoGenResult:
        """Start a task that re-times the lips in ``video_url`` to ``audio_url``."""

    @abstractmethod
    async def check_status(self, task_id: str) -> VideoTaskStatus:
        """State of a task started by ``submit`` or ``lip_sync``."""
