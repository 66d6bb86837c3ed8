"""Domain enumerations."""

from enum import StrEnum


class ContentType(StrEnum):
    """Kind of material a content item carries."""

    TEXT = "text"
    VIDEO = "video"


class ContentPlatform(StrEnum):
    """Supported publishing targets."""

    X_POST = "x_post"  # Short text post
    INSTAGRAM_REEL = "instagram_reel"  # Vertical reel
    TIKTOK = "tiktok"  # Vertical reel

    @property
    def is_video(self) -> bool:
        """Whether content for this platform is a vertical video."""
        return self in (ContentPlatform.INSTAGRAM_REEL, ContentPlatform.TIKTOK)

    @property
    def content_type(self) -> ContentType:
        return ContentType.VIDEO if self.is_video else ContentType.TEXT


class ContentStatus(StrEnum):
    """Lifecycle state of a content item."""

    DRAFT = "draft"
    PENDING_REVIEW = "pending_review"
    APPROVED = "approved"
    REJECTED = "rejected"
    SCHEDULED = "scheduled"
    PUBLISHED = "published"


class ContentAction(StrEnum):
    """Actions that move a content item through its lifecycle."""

    SUBMIT_FOR_REVIEW = "submit_for_review"
    APPROVE = "approve"
    REJECT = "reject"
    SCHEDULE = "schedule"
    PUBLISH = "publish"


class VideoGenerationStatus(StrEnum):
    """Status of the external video generation task."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class ContentTone(StrEnum):
    """Tone requested for a generated script."""

    MOTIVATIONAL = "motivational"
    INFORMATIVE = "informative"
    ENTERTAINING = "entertaining"
    PROVOCATIVE = "provocative"


class AvatarStatus(StrEnum):
    """Training status of an avatar."""

    PENDING = "pending"
    TRAINING = "training"
    READY = "ready"
    FAILED = "failed"


class VoiceStatus(StrEnum):
    """Status of an avatar's cloned voice."""

    NONE = "none"
    READY = "ready"
    FAILED = "failed"


class OperationClass(StrEnum):
    """Rate-limited operation classes, each with its own window."""

    GENERATE = "generate"
    VOICE_CLONE = "voice_clone"
    VIDEO = "video"
    TTS = "tts"


class StepOutcome(StrEnum):
    """Outcome of one orchestrator step."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


class SchedulerState(StrEnum):
    """Run state of the scheduled-publish poller."""

    STOPPED = "stopped"
    RUNNING = "running"
