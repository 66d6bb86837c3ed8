"""Stub video generation provider for testing."""

from uuid import uuid4

from persona_studio.adapters.video_gen.base import (
    VideoGenProvider,
    VideoGenRequest,
    VideoGenResult,
    VideoTaskStatus,
)
from persona_studio.domain.enums import VideoGenerationStatus
from persona_studio.logging import get_logger

logger = get_logger(__name__)


class StubVideoGenProvider(VideoGenProvider):
    """Stub provider whose tasks complete on the first status check."""

    @property
    def name(self) -> str:
        return "stub"

    async def submit(self, request: VideoGenRequest) -> VideoGenResult:
        task_id = f"stub:{uuid4()}"
        logger.info(
            "stub_video_generation_started",
            prompt=request.prompt[:100],
            duration=request.duration_seconds,
            task_id=task_id,
        )
        return VideoGenResult(
            success=True,
            task_id=task_id,
            metadata={"provider": self.name, "prompt": request.prompt},
        )

    async def lip_sync(self, video_url: str, audio_url: str) -> VideoGenResult:
        task_id = f"stub-lipsync:{uuid4()}"
        logger.info("stub_lip_sync_started", video_url=video_url, audio_url=audio_url)
        return VideoGenResult(success=True, task_id=task_id, metadata={"provider": self.name})

    async def check_status(self, task_id: str) -> VideoTaskStatus:
        return VideoTaskStatus(
            status=VideoGenerationStatus.COMPLETED,
            video_url=f"https://stub.local/videos/{task_id.rpartition(':')[2]}.mp4",
        )
