"""Generation orchestrator.

Runs script, voice and video generation in that order for one request. The
script is required; voice and video are enrichments whose failure is
recorded on the outcome and never discards the draft.
"""

import asyncio

from sqlalchemy.exc import SQLAlchemyError

from persona_studio.db.repository import ContentRepository, PersonaRepository
from persona_studio.domain.enums import StepOutcome, VideoGenerationStatus
from persona_studio.domain.errors import GenerationError, ProviderError
from persona_studio.domain.models import (
    AvatarVoice,
    GenerationOutcome,
    GenerationRequest,
    GenerationStep,
    PersonaContext,
)
from persona_studio.logging import get_logger
from persona_studio.services.persona import (
    AvatarPolicy,
    build_persona_context,
    resolve_avatar_voice,
    select_latest_avatar,
)
from persona_studio.services.script_generator import ScriptGenerator
from persona_studio.services.storage import StorageService
from persona_studio.services.video import VideoTaskDispatcher, build_video_prompt
from persona_studio.services.voice import VoiceSynthesizer, clean_script_for_speech

logger = get_logger(__name__)


class GenerationOrchestrator:
    """Produces one draft content item per request."""

    def __init__(
        self,
        persona_repo: PersonaRepository,
        content_repo: ContentRepository,
        script_generator: ScriptGenerator,
        voice: VoiceSynthesizer,
        video: VideoTaskDispatcher,
        storage: StorageService,
        avatar_policy: AvatarPolicy = select_latest_avatar,
    ) -> None:
        self.persona_repo = persona_repo
        self.content_repo = content_repo
        self.script_generator = script_generator
        self.voice = voice
        self.video = video
        self.storage = storage
        self.avatar_policy = avatar_policy

    def _load_context(self, user_id: str) -> tuple[PersonaContext, AvatarVoice | None]:
        persona = self.persona_repo.get_persona(user_id)
        avatar = self.avatar_policy(self.persona_repo.list_avatars(user_id))
        return build_persona_context(persona), resolve_avatar_voice(avatar)

    async def _synthesize_voice(self, voice_id: str, spoken: str) -> str:
        audio = await self.voice.synthesize(voice_id, spoken)
        asset = await asyncio.to_thread(self.storage.store_audio, audio)
        return asset.url

    async def generate(self, user_id: str, request: GenerationRequest) -> GenerationOutcome:
        """Generate and persist a draft.

        Raises:
            GenerationError: ``CONTEXT_LOOKUP_FAILED`` if persona or avatar
                lookup fails, ``GENERATION_FAILED`` if no script could be
                produced. Nothing is persisted in either case.
        """
        log = logger.bind(user_id=user_id, platform=request.platform)

        try:
            persona, avatar_voice = await asyncio.to_thread(self._load_context, user_id)
        except SQLAlchemyError as e:
            log.error("generation_context_lookup_failed", error=str(e))
            raise GenerationError(
                "Failed to load persona or avatar", code="CONTEXT_LOOKUP_FAILED"
            ) from e

        try:
            script = await self.script_generator.generate(
                persona, request.platform, request.topic, request.tone
            )
        except ProviderError as e:
            log.error("generation_script_failed", provider=e.provider, error=e.detail)
            raise GenerationError(f"Script generation failed: {e.detail}") from e

        steps = [GenerationStep(step="script", outcome=StepOutcome.SUCCEEDED)]
        audio_url: str | None = None
        video_task_id: str | None = None
        video_status: VideoGenerationStatus | None = None

        if not request.platform.is_video:
            steps.append(GenerationStep("voice", StepOutcome.SKIPPED, "text-only platform"))
            steps.append(GenerationStep("video", StepOutcome.SKIPPED, "text-only platform"))
        else:
            spoken = clean_script_for_speech(script)
            if avatar_voice is None or not avatar_voice.ready:
                steps.append(GenerationStep("voice", StepOutcome.SKIPPED, "no ready voice"))
            elif not spoken:
                steps.append(GenerationStep("voice", StepOutcome.SKIPPED, "no spoken text"))
            else:
                try:
                    audio_url = await self._synthesize_voice(avatar_voice.voice_id, spoken)
                    steps.append(GenerationStep("voice", StepOutcome.SUCCEEDED))
                except (ProviderError, OSError) as e:
                    log.warning("generation_voice_failed", error=str(e))
                    steps.append(GenerationStep("voice", StepOutcome.FAILED, str(e)))

            prompt = build_video_prompt(script, request.video_prompt)
            if not request.want_video:
                steps.append(GenerationStep("video", StepOutcome.SKIPPED, "not requested"))
            elif not prompt:
                video_status = VideoGenerationStatus.FAILED
                steps.append(GenerationStep("video", StepOutcome.FAILED, "empty video prompt"))
            else:
                try:
                    video_task_id = await self.video.submit(prompt)
                    video_status = VideoGenerationStatus.PENDING
                    steps.append(GenerationStep("video", StepOutcome.SUCCEEDED))
                except ProviderError as e:
                    log.warning("generation_video_failed", error=str(e))
                    video_status = VideoGenerationStatus.FAILED
                    steps.append(GenerationStep("video", StepOutcome.FAILED, str(e)))

        content = await asyncio.to_thread(
            self.content_repo.create,
            user_id=user_id,
            platform=request.platform,
            script=script,
            avatar_id=avatar_voice.avatar_id if avatar_voice else None,
            audio_url=audio_url,
            video_task_id=video_task_id,
            video_status=video_status,
        )

        outcome = GenerationOutcome(content=content, steps=steps)
        log.info(
            "generation_completed",
            content_id=str(content.id),
            degraded=outcome.degraded,
            steps={s.step: s.outcome.value for s in steps},
        )
        return outcome
