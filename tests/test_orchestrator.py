"""Tests for the generation orchestrator."""

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from persona_studio.adapters.llm.base import Completion
from persona_studio.adapters.video_gen.base import VideoGenResult
from persona_studio.adapters.voiceover.base import VoiceoverResult
from persona_studio.domain.enums import (
    ContentPlatform,
    ContentStatus,
    StepOutcome,
    VideoGenerationStatus,
    VoiceStatus,
)
from persona_studio.domain.errors import GenerationError
from persona_studio.domain.models import GenerationRequest
from persona_studio.services.orchestrator import GenerationOrchestrator
from persona_studio.services.script_generator import ScriptGenerator
from persona_studio.services.video import VideoTaskDispatcher
from persona_studio.services.voice import VoiceSynthesizer


@pytest.fixture
def orchestrator(
    persona_repo, content_repo, storage, llm_provider, voiceover_provider, video_gen_provider
) -> GenerationOrchestrator:
    return GenerationOrchestrator(
        persona_repo=persona_repo,
        content_repo=content_repo,
        script_generator=ScriptGenerator(llm_provider),
        voice=VoiceSynthesizer(voiceover_provider),
        video=VideoTaskDispatcher(video_gen_provider),
        storage=storage,
    )


@pytest.fixture
def ready_avatar(persona_repo):
    avatar = persona_repo.create_avatar("user-1", "Main")
    persona_repo.set_avatar_voice(avatar.id, "voice-123", VoiceStatus.READY.value)
    return avatar


class TestGenerate:
    """Tests for GenerationOrchestrator.generate."""

    @pytest.mark.asyncio
    async def test_text_post_without_persona_or_avatar(self, orchestrator, content_repo) -> None:
        outcome = await orchestrator.generate(
            "user-1", GenerationRequest(platform=ContentPlatform.X_POST)
        )

        content = outcome.content
        assert content.status == ContentStatus.DRAFT
        assert content.script
        assert len(content.script) <= 280
        assert content.avatar_id is None
        assert content.audio_url is None
        assert content.video_task_id is None
        assert outcome.step("voice").outcome == StepOutcome.SKIPPED
        assert outcome.step("video").outcome == StepOutcome.SKIPPED
        assert not outcome.degraded
        assert content_repo.get(content.id) is not None

    @pytest.mark.asyncio
    async def test_video_platform_without_persona_or_avatar(self, orchestrator) -> None:
        outcome = await orchestrator.generate(
            "user-1", GenerationRequest(platform=ContentPlatform.TIKTOK)
        )

        content = outcome.content
        assert content.script
        assert content.audio_url is None
        assert content.video_task_id is None
        assert outcome.step("voice").detail == "no ready voice"
        assert not outcome.degraded

    @pytest.mark.asyncio
    async def test_reel_with_ready_voice_and_no_video(
        self, orchestrator, ready_avatar, storage
    ) -> None:
        outcome = await orchestrator.generate(
            "user-1", GenerationRequest(platform=ContentPlatform.INSTAGRAM_REEL)
        )

        content = outcome.content
        assert content.avatar_id == ready_avatar.id
        assert content.audio_url.startswith("http://test/media/audio/")
        assert content.video_task_id is None
        assert content.video_status is None
        assert outcome.step("voice").outcome == StepOutcome.SUCCEEDED
        assert outcome.step("video").outcome == StepOutcome.SKIPPED

        key = content.audio_url.removeprefix("http://test/media/")
        assert (storage.base_path / key).exists()

    @pytest.mark.asyncio
    async def test_voice_gets_cleaned_script(
        self, orchestrator, ready_avatar, voiceover_provider
    ) -> None:
        voiceover_provider.generate = AsyncMock(
            return_value=VoiceoverResult(success=True, audio_data=b"mp3")
        )

        await orchestrator.generate(
            "user-1", GenerationRequest(platform=ContentPlatform.TIKTOK)
        )

        request = voiceover_provider.generate.call_args.args[0]
        assert request.voice_id == "voice-123"
        assert "HOOK:" not in request.text
        assert "[" not in request.text

    @pytest.mark.asyncio
    async def test_voice_failure_is_degraded_not_fatal(
        self, orchestrator, ready_avatar, voiceover_provider
    ) -> None:
        voiceover_provider.generate = AsyncMock(
            return_value=VoiceoverResult(success=False, error_message="quota exceeded")
        )

        outcome = await orchestrator.generate(
            "user-1",
            GenerationRequest(platform=ContentPlatform.INSTAGRAM_REEL, want_video=True),
        )

        assert outcome.content.status == ContentStatus.DRAFT
        assert outcome.content.audio_url is None
        assert outcome.step("voice").outcome == StepOutcome.FAILED
        assert "quota exceeded" in outcome.step("voice").detail
        # Video still runs after a voice failure
        assert outcome.step("video").outcome == StepOutcome.SUCCEEDED
        assert outcome.degraded

    @pytest.mark.asyncio
    async def test_voice_skipped_when_not_ready(self, orchestrator, persona_repo) -> None:
        avatar = persona_repo.create_avatar("user-1", "No voice yet")

        outcome = await orchestrator.generate(
            "user-1", GenerationRequest(platform=ContentPlatform.TIKTOK)
        )

        assert outcome.content.avatar_id == avatar.id
        assert outcome.step("voice").outcome == StepOutcome.SKIPPED

    @pytest.mark.asyncio
    async def test_video_submitted(self, orchestrator) -> None:
        outcome = await orchestrator.generate(
            "user-1",
            GenerationRequest(platform=ContentPlatform.TIKTOK, want_video=True),
        )

        assert outcome.content.video_task_id.startswith("stub:")
        assert outcome.content.video_status == VideoGenerationStatus.PENDING

    @pytest.mark.asyncio
    async def test_video_prompt_override(self, orchestrator, video_gen_provider) -> None:
        video_gen_provider.submit = AsyncMock(
            return_value=VideoGenResult(success=True, task_id="stub:abc")
        )

        await orchestrator.generate(
            "user-1",
            GenerationRequest(
                platform=ContentPlatform.TIKTOK,
                want_video=True,
                video_prompt="  sunrise over a city  ",
            ),
        )

        assert video_gen_provider.submit.call_args.args[0].prompt == "sunrise over a city"

    @pytest.mark.asyncio
    async def test_video_failure_marks_failed(self, orchestrator, video_gen_provider) -> None:
        video_gen_provider.submit = AsyncMock(
            return_value=VideoGenResult(success=False, error_message="content policy")
        )

        outcome = await orchestrator.generate(
            "user-1",
            GenerationRequest(platform=ContentPlatform.INSTAGRAM_REEL, want_video=True),
        )

        assert outcome.content.video_task_id is None
        assert outcome.content.video_status == VideoGenerationStatus.FAILED
        assert outcome.step("video").outcome == StepOutcome.FAILED
        assert outcome.degraded

    @pytest.mark.asyncio
    async def test_video_transport_error_is_degraded_not_fatal(
        self, orchestrator, video_gen_provider, content_repo
    ) -> None:
        video_gen_provider.submit = AsyncMock(side_effect=RuntimeError("connection reset"))

        outcome = await orchestrator.generate(
            "user-1",
            GenerationRequest(platform=ContentPlatform.TIKTOK, want_video=True),
        )

        assert outcome.content.script
        assert outcome.content.video_status == VideoGenerationStatus.FAILED
        assert "connection reset" in outcome.step("video").detail
        assert content_repo.get(outcome.content.id) is not None

    @pytest.mark.asyncio
    async def test_voice_transport_error_is_degraded_not_fatal(
        self, orchestrator, ready_avatar, voiceover_provider, content_repo
    ) -> None:
        voiceover_provider.generate = AsyncMock(side_effect=RuntimeError("tls handshake"))

        outcome = await orchestrator.generate(
            "user-1", GenerationRequest(platform=ContentPlatform.TIKTOK)
        )

        assert outcome.content.audio_url is None
        assert outcome.step("voice").outcome == StepOutcome.FAILED
        assert "tls handshake" in outcome.step("voice").detail
        assert content_repo.get(outcome.content.id) is not None

    @pytest.mark.asyncio
    async def test_stage_directions_only_script_skips_voice_and_video(
        self, orchestrator, ready_avatar, llm_provider, voiceover_provider, video_gen_provider
    ) -> None:
        llm_provider.complete = AsyncMock(
            return_value=Completion(text="[smiles at camera]", model="stub-model")
        )
        voiceover_provider.generate = AsyncMock()
        video_gen_provider.submit = AsyncMock()

        outcome = await orchestrator.generate(
            "user-1",
            GenerationRequest(platform=ContentPlatform.TIKTOK, want_video=True),
        )

        assert outcome.content.script == "[smiles at camera]"
        assert outcome.step("voice").outcome == StepOutcome.SKIPPED
        assert outcome.step("voice").detail == "no spoken text"
        assert outcome.content.video_status == VideoGenerationStatus.FAILED
        voiceover_provider.generate.assert_not_called()
        video_gen_provider.submit.assert_not_called()

    @pytest.mark.asyncio
    async def test_text_platform_ignores_video_request(
        self, orchestrator, video_gen_provider
    ) -> None:
        video_gen_provider.submit = AsyncMock()

        outcome = await orchestrator.generate(
            "user-1", GenerationRequest(platform=ContentPlatform.X_POST, want_video=True)
        )

        video_gen_provider.submit.assert_not_called()
        assert outcome.step("video").outcome == StepOutcome.SKIPPED

    @pytest.mark.asyncio
    async def test_script_failure_persists_nothing(
        self, orchestrator, llm_provider, content_repo
    ) -> None:
        llm_provider.complete = AsyncMock(side_effect=RuntimeError("model overloaded"))

        with pytest.raises(GenerationError) as exc_info:
            await orchestrator.generate(
                "user-1", GenerationRequest(platform=ContentPlatform.X_POST)
            )

        assert exc_info.value.code == "GENERATION_FAILED"
        assert content_repo.list_for_user("user-1")[1] == 0

    @pytest.mark.asyncio
    async def test_empty_script_is_fatal(self, orchestrator, llm_provider, content_repo) -> None:
        llm_provider.complete = AsyncMock(
            return_value=Completion(text="   ", model="stub-model")
        )

        with pytest.raises(GenerationError):
            await orchestrator.generate(
                "user-1", GenerationRequest(platform=ContentPlatform.TIKTOK)
            )

        assert content_repo.list_for_user("user-1")[1] == 0

    @pytest.mark.asyncio
    async def test_context_lookup_failure(self, orchestrator, content_repo) -> None:
        failing_repo = MagicMock()
        failing_repo.get_persona.side_effect = OperationalError("SELECT", {}, Exception("down"))
        orchestrator.persona_repo = failing_repo

        with pytest.raises(GenerationError) as exc_info:
            await orchestrator.generate(
                "user-1", GenerationRequest(platform=ContentPlatform.X_POST)
            )

        assert exc_info.value.code == "CONTEXT_LOOKUP_FAILED"
        assert exc_info.value.status_code == 500
        assert content_repo.list_for_user("user-1")[1] == 0

    @pytest.mark.asyncio
    async def test_avatar_policy_is_injectable(self, orchestrator, persona_repo) -> None:
        oldest = persona_repo.create_avatar("user-1", "First")
        persona_repo.create_avatar("user-1", "Second")
        orchestrator.avatar_policy = lambda avatars: min(avatars, key=lambda a: a.created_at)

        outcome = await orchestrator.generate(
            "user-1", GenerationRequest(platform=ContentPlatform.X_POST)
        )

        assert outcome.content.avatar_id == oldest.id

    @pytest.mark.asyncio
    async def test_persona_conditions_prompt(
        self, orchestrator, persona_repo, llm_provider
    ) -> None:
        persona_repo.upsert_persona(
            "user-1", bio="Marathon coach", topics=["running"], catchphrases=["Keep moving"]
        )
        llm_provider.complete = AsyncMock(
            return_value=Completion(text="Run today.", model="stub-model")
        )

        await orchestrator.generate("user-1", GenerationRequest(platform=ContentPlatform.X_POST))

        prompt = llm_provider.complete.call_args.args[0].user
        assert "Bio: Marathon coach" in prompt
        assert "Keep moving" in prompt


def test_latest_avatar_wins(persona_repo) -> None:
    from persona_studio.services.persona import select_latest_avatar

    first = persona_repo.create_avatar("user-1", "First")
    second = persona_repo.create_avatar("user-1", "Second")
    first.created_at = second.created_at - timedelta(days=1)

    assert select_latest_avatar([first, second]) is second
    assert select_latest_avatar([]) is None
