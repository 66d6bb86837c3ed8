"""Application services."""

from persona_studio.services.content import ContentService
from persona_studio.services.orchestrator import GenerationOrchestrator
from persona_studio.services.persona import PersonaAnalyzer, select_latest_avatar
from persona_studio.services.publisher import PublisherDispatcher
from persona_studio.services.rate_limiter import RateLimitDecision, RateLimiter
from persona_studio.services.scheduler import ScheduledPublisher, SweepReport
from persona_studio.services.script_generator import ScriptGenerator
from persona_studio.services.storage import StorageService, StoredAsset
from persona_studio.services.video import VideoTaskDispatcher
from persona_studio.services.voice import VoiceSynthesizer

__all__ = [
    "ContentService",
    "GenerationOrchestrator",
    "PersonaAnalyzer",
    "PublisherDispatcher",
    "RateLimitDecision",
    "RateLimiter",
    "ScheduledPublisher",
    "ScriptGenerator",
    "StorageService",
    "StoredAsset",
    "SweepReport",
    "VideoTaskDispatcher",
    "VoiceSynthesizer",
    "select_latest_avatar",
]
