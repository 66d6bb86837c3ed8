"""FastAPI dependencies.

Long-lived collaborators are built once per process; tests swap them
through ``app.dependency_overrides``.
"""

from collections.abc import Callable
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Header, Response

from persona_studio.db.repository import ContentRepository, PersonaRepository
from persona_studio.domain.enums import OperationClass
from persona_studio.domain.errors import RateLimitExceededError, UnauthorizedError
from persona_studio.services.content import ContentService
from persona_studio.services.orchestrator import GenerationOrchestrator
from persona_studio.services.persona import PersonaAnalyzer
from persona_studio.services.providers import (
    get_llm_provider,
    get_publisher_handlers,
    get_video_gen_provider,
    get_voiceover_provider,
)
from persona_studio.services.publisher import PublisherDispatcher
from persona_studio.services.rate_limiter import RateLimitDecision, RateLimiter
from persona_studio.services.script_generator import ScriptGenerator
from persona_studio.services.storage import StorageService
from persona_studio.services.video import VideoTaskDispatcher
from persona_studio.services.voice import VoiceSynthesizer


def get_optional_user_id(
    x_user_id: Annotated[str | None, Header(description="Authenticated user ID")] = None,
) -> str | None:
    """User identity set by the authenticating proxy, if any."""
    return x_user_id or None


def get_current_user_id(
    user_id: Annotated[str | None, Depends(get_optional_user_id)],
) -> str:
    if not user_id:
        raise UnauthorizedError("Unauthorized")
    return user_id


CurrentUserDep = Annotated[str, Depends(get_current_user_id)]


@lru_cache
def get_rate_limiter() -> RateLimiter:
    return RateLimiter()


@lru_cache
def get_content_repository() -> ContentRepository:
    return ContentRepository()


@lru_cache
def get_persona_repository() -> PersonaRepository:
    return PersonaRepository()


@lru_cache
def get_storage_service() -> StorageService:
    return StorageService()


@lru_cache
def get_publisher_dispatcher() -> PublisherDispatcher:
    return PublisherDispatcher(get_publisher_handlers())


@lru_cache
def get_script_generator() -> ScriptGenerator:
    return ScriptGenerator(get_llm_provider())


@lru_cache
def get_voice_synthesizer() -> VoiceSynthesizer:
    return VoiceSynthesizer(get_voiceover_provider())


@lru_cache
def get_video_dispatcher() -> VideoTaskDispatcher:
    return VideoTaskDispatcher(get_video_gen_provider())


def get_persona_analyzer() -> PersonaAnalyzer:
    return PersonaAnalyzer(get_llm_provider())


ContentRepositoryDep = Annotated[ContentRepository, Depends(get_content_repository)]
PersonaRepositoryDep = Annotated[PersonaRepository, Depends(get_persona_repository)]
StorageServiceDep = Annotated[StorageService, Depends(get_storage_service)]
PublisherDispatcherDep = Annotated[PublisherDispatcher, Depends(get_publisher_dispatcher)]
ScriptGeneratorDep = Annotated[ScriptGenerator, Depends(get_script_generator)]
VoiceSynthesizerDep = Annotated[VoiceSynthesizer, Depends(get_voice_synthesizer)]
VideoDispatcherDep = Annotated[VideoTaskDispatcher, Depends(get_video_dispatcher)]
PersonaAnalyzerDep = Annotated[PersonaAnalyzer, Depends(get_persona_analyzer)]


def get_orchestrator(
    persona_repo: PersonaRepositoryDep,
    content_repo: ContentRepositoryDep,
    script_generator: ScriptGeneratorDep,
    voice: VoiceSynthesizerDep,
    video: VideoDispatcherDep,
    storage: StorageServiceDep,
) -> GenerationOrchestrator:
    return GenerationOrchestrator(
        persona_repo=persona_repo,
        content_repo=content_repo,
        script_generator=script_generator,
        voice=voice,
        video=video,
        storage=storage,
    )


def get_content_service(
    content_repo: ContentRepositoryDep,
    persona_repo: PersonaRepositoryDep,
    dispatcher: PublisherDispatcherDep,
    video: VideoDispatcherDep,
) -> ContentService:
    return ContentService(content_repo, persona_repo, dispatcher, video)


OrchestratorDep = Annotated[GenerationOrchestrator, Depends(get_orchestrator)]
ContentServiceDep = Annotated[ContentService, Depends(get_content_service)]


def admit_or_deny(operation: OperationClass) -> Callable[..., RateLimitDecision]:
    """Dependency factory enforcing the rate limit of ``operation``.

    Sets the X-RateLimit-* headers on the response; a denied request raises
    ``RateLimitExceededError`` carrying the same headers plus Retry-After.
    """

    def dependency(
        response: Response,
        user_id: Annotated[str | None, Depends(get_optional_user_id)],
        limiter: Annotated[RateLimiter, Depends(get_rate_limiter)],
    ) -> RateLimitDecision:
        decision = limiter.admit(operation, user_id)
        if not decision.allowed:
            raise RateLimitExceededError(decision.retry_after or 1, headers=decision.headers())
        response.headers.update(decision.headers())
        return decision

    return dependency
