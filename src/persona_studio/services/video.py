"""Video task submission, status polling and lip-sync."""

from persona_studio.adapters.video_gen.base import (
    VideoGenProvider,
    VideoGenRequest,
    VideoTaskStatus,
)
from persona_studio.config import settings
from persona_studio.domain.errors import ProviderError
from persona_studio.logging import get_logger
from persona_studio.services.voice import clean_script_for_speech

logger = get_logger(__name__)


def build_video_prompt(script: str, override: str | None = None, chars: int | None = None) -> str:
    """Prompt for the video model: the override, else the start of the cleaned script."""
    if override and override.strip():
        return override.strip()
    return clean_script_for_speech(script)[: chars or settings.video_prompt_chars]


class VideoTaskDispatcher:
    """Starts and tracks asynchronous video generation tasks."""

    def __init__(
        self,
        provider: VideoGenProvider,
        duration_seconds: int | None = None,
        aspect_ratio: str | None = None,
        mode: str | None = None,
    ) -> None:
        self.provider = provider
        self.duration_seconds = duration_seconds or settings.video_duration_seconds
        self.aspect_ratio = aspect_ratio or settings.video_aspect_ratio
        self.mode = mode or settings.video_mode

    async def submit(self, prompt: str, image_url: str | None = None) -> str:
        """Start a task and return its handle.

        Raises:
            ProviderError: If the provider rejects the task.
        """
        request = VideoGenRequest(
            prompt=prompt,
            duration_seconds=self.duration_seconds,
            aspect_ratio=self.aspect_ratio,
            mode=self.mode,
            image_url=image_url,
        )
        try:
            result = await self.provider.submit(request)
        except Exception as e:
            raise ProviderError(self.provider.name, "video_submit", str(e)) from e
        if not result.success or not result.task_id:
            raise ProviderError(
                self.provider.name,
                "video_submit",
                result.error_message or "no task ID returned",
            )
        logger.info("video_task_submitted", task_id=result.task_id, provider=self.provider.name)
        return result.task_id

    async def status(self, task_id: str) -> VideoTaskStatus:
        """Current task status.

        Raises:
            ProviderError: If the status cannot be fetched.
        """
        try:
            return await self.provider.check_status(task_id)
        except Exception as e:
            raise ProviderError(self.provider.name, "video_status", str(e)) from e

    async def lip_sync(self, video_url: str, audio_url: str) -> str:
        """Start a lip-sync task and return its handle.

        Raises:
            ProviderError: If the provider rejects the task.
        """
        try:
            result = await self.provider.lip_sync(video_url, audio_url)
        except Exception as e:
            raise ProviderError(self.provider.name, "lip_sync", str(e)) from e
        if not result.success or not result.task_id:
            raise ProviderError(
                self.provider.name,
                "lip_sync",
                result.error_message or "no task ID returned",
            )
        logger.info("lip_sync_submitted", task_id=result.task_id)
        return result.task_id
