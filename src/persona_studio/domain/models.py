"""Domain models - pure Python classes independent of database."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID

from persona_studio.domain.enums import (
    ContentPlatform,
    ContentStatus,
    ContentTone,
    ContentType,
    StepOutcome,
    VideoGenerationStatus,
)


@dataclass(frozen=True)
class PersonaContext:
    """Style profile used to condition one script generation call."""

    bio: str | None = None
    topics: tuple[str, ...] = ()
    style: str | None = None
    catchphrases: tuple[str, ...] = ()
    target_audience: str | None = None

    @property
    def is_empty(self) -> bool:
        return not (
            self.bio or self.topics or self.style or self.catchphrases or self.target_audience
        )


@dataclass(frozen=True)
class PersonaAnalysis:
    """Persona profile extracted from sample content."""

    bio: str
    topics: list[str]
    style: str
    catchphrases: list[str]
    target_audience: str


@dataclass(frozen=True)
class AvatarVoice:
    """Voice handle resolved from the selected avatar."""

    avatar_id: UUID
    voice_id: str | None
    ready: bool


@dataclass
class ContentItem:
    """One unit of generated material tracked through its lifecycle."""

    id: UUID
    user_id: str
    content_type: ContentType
    platform: ContentPlatform
    status: ContentStatus
    avatar_id: UUID | None = None
    script: str | None = None
    audio_url: str | None = None
    video_url: str | None = None
    final_video_url: str | None = None
    video_task_id: str | None = None
    video_status: VideoGenerationStatus | None = None
    scheduled_for: datetime | None = None
    published_at: datetime | None = None
    external_id: str | None = None
    external_url: str | None = None
    publish_attempts: int = 0
    last_publish_error: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def publishable_video_url(self) -> str | None:
        """The rendered video if present, else the raw generated one."""
        return self.final_video_url or self.video_url

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "user_id": self.user_id,
            "avatar_id": str(self.avatar_id) if self.avatar_id else None,
            "content_type": self.content_type.value,
            "platform": self.platform.value,
            "status": self.status.value,
            "script": self.script,
            "audio_url": self.audio_url,
            "video_url": self.video_url,
            "final_video_url": self.final_video_url,
            "video_task_id": self.video_task_id,
            "video_status": self.video_status.value if self.video_status else None,
            "scheduled_for": self.scheduled_for.isoformat() if self.scheduled_for else None,
            "published_at": self.published_at.isoformat() if self.published_at else None,
            "external_id": self.external_id,
            "external_url": self.external_url,
            "publish_attempts": self.publish_attempts,
            "last_publish_error": self.last_publish_error,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass
class GenerationRequest:
    """Input to the generation orchestrator."""

    platform: ContentPlatform
    topic: str | None = None
    tone: ContentTone | None = None
    want_video: bool = False
    video_prompt: str | None = None


@dataclass(frozen=True)
class GenerationStep:
    """Outcome record for one orchestrator step."""

    step: str  # "script", "voice", "video"
    outcome: StepOutcome
    detail: str | None = None


@dataclass
class GenerationOutcome:
    """Persisted content plus the per-step record of how it was produced."""

    content: ContentItem
    steps: list[GenerationStep] = field(default_factory=list)

    @property
    def degraded(self) -> bool:
        """True when an optional enrichment failed."""
        return any(s.outcome == StepOutcome.FAILED for s in self.steps)

    def step(self, name: str) -> GenerationStep | None:
        for s in self.steps:
            if s.step == name:
                return s
        return None


@dataclass(frozen=True)
class PublishResult:
    """Normalized result of publishing one content item."""

    success: bool
    platform: str
    external_id: str | None = None
    external_url: str | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "platform": self.platform,
            "external_id": self.external_id,
            "external_url": self.external_url,
            "error": self.error,
        }


@dataclass(frozen=True)
class ContentStats:
    """Dashboard counters for one user."""

    this_week: int  # Created since Monday 00:00 UTC
    pending_review: int
    published: int
    scheduled: int
