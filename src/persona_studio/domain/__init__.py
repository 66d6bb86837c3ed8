"""Domain models and business logic."""

from persona_studio.domain.enums import (
    AvatarStatus,
    ContentAction,
    ContentPlatform,
    ContentStatus,
    ContentTone,
    ContentType,
    OperationClass,
    SchedulerState,
    StepOutcome,
    VideoGenerationStatus,
    VoiceStatus,
)
from persona_studio.domain.models import (
    AvatarVoice,
    ContentItem,
    ContentStats,
    GenerationOutcome,
    GenerationRequest,
    GenerationStep,
    PersonaAnalysis,
    PersonaContext,
    PublishResult,
)

__all__ = [
    "AvatarStatus",
    "AvatarVoice",
    "ContentAction",
    "ContentItem",
    "ContentPlatform",
    "ContentStats",
    "ContentStatus",
    "ContentTone",
    "ContentType",
    "GenerationOutcome",
    "GenerationRequest",
    "GenerationStep",
    "OperationClass",
    "PersonaAnalysis",
    "PersonaContext",
    "PublishResult",
    "SchedulerState",
    "StepOutcome",
    "VideoGenerationStatus",
    "VoiceStatus",
]
