"""Kling video generation provider via fal.ai.

Tasks are submitted to the fal queue and polled later, so one handle has to
carry both the request ID and the model it was queued on. Handles have the
form ``"<model key>:<request id>"``.
"""

import os
from typing import Any

from persona_studio.adapters.video_gen.base import (
    VideoGenProvider,
    VideoGenRequest,
    VideoGenResult,
    VideoTaskStatus,
)
from persona_studio.config import settings
from persona_studio.domain.enums import VideoGenerationStatus
from persona_studio.logging import get_logger

logger = get_logger(__name__)


class KlingProvider(VideoGenProvider):
    """Kling video generation via fal.ai.

    Uses the fal-client queue API (submit_async / status_async /
    result_async) rather than subscribe_async, so the caller never blocks
    on a render.

    Duration mapping:
    - duration_seconds <= 5 → "5" (fal string format)
    - duration_seconds > 5  → "10"
    """

    MODELS = {
        "text2video-std": "fal-ai/kling-video/v2.1/standard/text-to-video",
        "text2video-pro": "fal-ai/kling-video/v2.6/pro/text-to-video",
        "image2video-std": "fal-ai/kling-video/v2.1/standard/image-to-video",
        "image2video-pro": "fal-ai/kling-video/v2.6/pro/image-to-video",
        "lipsync": "fal-ai/kling-video/lipsync/audio-to-video",
    }

    def __init__(self, api_key: str | None = None) -> None:
        self.api_key = api_key or settings.fal_api_key
        if self.api_key:
            os.environ["FAL_KEY"] = self.api_key

        if not self.api_key and not os.environ.get("FAL_KEY"):
            logger.warning("FAL_KEY not configured for Kling provider")

    @property
    def name(self) -> str:
        return "kling"

    @staticmethod
    def _map_duration(duration_seconds: int) -> str:
        """Map integer duration to fal's string duration format."""
        return "5" if duration_seconds <= 5 else "10"

    @staticmethod
    def _model_key(request: VideoGenRequest) -> str:
        kind = "image2video" if request.image_url else "text2video"
        mode = "pro" if request.mode == "pro" else "std"
        return f"{kind}-{mode}"

    @classmethod
    def _split_handle(cls, task_id: str) -> tuple[str, str]:
        key, sep, request_id = task_id.partition(":")
        if not sep or key not in cls.MODELS or not request_id:
            raise ValueError(f"Malformed Kling task handle: {task_id!r}")
        return cls.MODELS[key], request_id

    def _configured(self) -> bool:
        return bool(self.api_key or os.environ.get("FAL_KEY"))

    async def _enqueue(self, key: str, arguments: dict[str, Any]) -> VideoGenResult:
        if not self._configured():
            return VideoGenResult(success=False, error_message="FAL_KEY not configured")

        import fal_client

        model = self.MODELS[key]
        try:
            handle = await fal_client.submit_async(model, arguments=arguments)
        except Exception as e:
            logger.error("kling_submit_error", model=model, error=str(e))
            return VideoGenResult(success=False, error_message=str(e))

        task_id = f"{key}:{handle.request_id}"
        logger.info("kling_task_submitted", model=model, task_id=task_id)
        return VideoGenResult(
            success=True,
            task_id=task_id,
            metadata={"provider": self.name, "model": model},
        )

    async def submit(self, request: VideoGenRequest) -> VideoGenResult:
        """Queue a text-to-video or image-to-video task."""
        arguments: dict[str, Any] = {
            "prompt": request.prompt,
            "duration": self._map_duration(request.duration_seconds),
            "aspect_ratio": request.aspect_ratio or "9:16",
        }
        if request.image_url:
            arguments["image_url"] = request.image_url
        if request.options:
            arguments.update(request.options)

        key = self._model_key(request)
        logger.info(
            "kling_generation_started",
            model_key=key,
            prompt_length=len(request.prompt),
            duration=arguments["duration"],
            aspect_ratio=arguments["aspect_ratio"],
        )
        return await self._enqueue(key, arguments)

    async def lip_sync(self, video_url: str, audio_url: str) -> VideoGenResult:
        """Queue a lip-sync task."""
        return await self._enqueue("lipsync", {"video_url": video_url, "audio_url": audio_url})

    async def check_status(self, task_id: str) -> VideoTaskStatus:
        """Poll a queued task, fetching the result once it has completed."""
        import fal_client

        model, request_id = self._split_handle(task_id)

        try:
            status = await fal_client.status_async(model, request_id)
        except Exception as e:
            logger.error("kling_status_error", task_id=task_id, error=str(e))
            raise

        if isinstance(status, fal_client.Queued):
            return VideoTaskStatus(status=VideoGenerationStatus.PENDING)
        if isinstance(status, fal_client.InProgress):
            return VideoTaskStatus(status=VideoGenerationStatus.PROCESSING)

        # Completed: fal raises on result retrieval when the run itself failed
        try:
            result = await fal_client.result_async(model, request_id)
        except Exception as e:
            logger.warning("kling_task_failed", task_id=task_id, error=str(e))
            return VideoTaskStatus(status=VideoGenerationStatus.FAILED, error_message=str(e))

        video_url = (result.get("video") or {}).get("url")
        if not video_url:
            logger.error("kling_no_video_url", task_id=task_id, result_keys=list(result.keys()))
            return VideoTaskStatus(
                status=VideoGenerationStatus.FAILED,
                error_message="Kling task completed but no video URL returned",
            )

        logger.info("kling_task_completed", task_id=task_id, video_url=video_url[:100])
        return VideoTaskStatus(status=VideoGenerationStatus.COMPLETED, video_url=video_url)
