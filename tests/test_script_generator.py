"""Tests for persona-conditioned script generation and persona analysis."""

import json
from unittest.mock import AsyncMock

import pytest

from persona_studio.adapters.llm.base import Completion
from persona_studio.domain.enums import ContentPlatform, ContentTone
from persona_studio.domain.errors import ProviderError
from persona_studio.domain.models import PersonaContext
from persona_studio.services.persona import (
    PersonaAnalyzer,
    build_persona_context,
    format_persona_block,
)
from persona_studio.services.script_generator import ScriptGenerator

PERSONA = PersonaContext(
    bio="Former chef turned food scientist",
    topics=("fermentation", "kitchen myths"),
    style="Curious, nerdy, playful",
    catchphrases=("Science tastes better",),
    target_audience="Home cooks",
)


def respond(content: str) -> AsyncMock:
    return AsyncMock(return_value=Completion(text=content, model="test-model"))


class TestPersonaContext:
    def test_missing_persona_is_empty(self) -> None:
        context = build_persona_context(None)

        assert context.is_empty
        assert format_persona_block(context) == ""

    def test_block_omits_empty_fields(self) -> None:
        block = format_persona_block(PersonaContext(bio="Coach", topics=("running",)))

        assert block == "Bio: Coach\nTopics: running"


class TestScriptGenerator:
    @pytest.mark.asyncio
    async def test_video_script_prompt(self, llm_provider) -> None:
        llm_provider.complete = respond("HOOK: Hi\nMAIN: Body\nCTA: Follow")
        generator = ScriptGenerator(llm_provider, language="en")

        script = await generator.generate(
            PERSONA, ContentPlatform.TIKTOK, topic="sourdough", tone=ContentTone.ENTERTAINING
        )

        assert script == "HOOK: Hi\nMAIN: Body\nCTA: Follow"
        prompt = llm_provider.complete.call_args.args[0].user
        assert "TikTok video" in prompt
        assert '"sourdough"' in prompt
        assert "casual, witty, entertaining" in prompt
        assert "Science tastes better" in prompt
        assert "Write in English." in prompt
        assert llm_provider.complete.call_args.kwargs == {"temperature": 0.85, "max_tokens": 600}

    @pytest.mark.asyncio
    async def test_post_is_truncated(self, llm_provider) -> None:
        llm_provider.complete = respond("x" * 400)

        script = await ScriptGenerator(llm_provider).generate(PERSONA, ContentPlatform.X_POST)

        assert len(script) == 280

    @pytest.mark.asyncio
    async def test_video_script_is_not_truncated(self, llm_provider) -> None:
        llm_provider.complete = respond("y" * 400)

        script = await ScriptGenerator(llm_provider).generate(
            PERSONA, ContentPlatform.INSTAGRAM_REEL
        )

        assert len(script) == 400

    @pytest.mark.asyncio
    async def test_empty_persona_still_generates(self, llm_provider) -> None:
        llm_provider.complete = respond("Just a post")

        await ScriptGenerator(llm_provider).generate(PersonaContext(), ContentPlatform.X_POST)

        prompt = llm_provider.complete.call_args.args[0].user
        assert "(no persona on file)" in prompt
        assert "Pick a fitting topic" in prompt

    @pytest.mark.asyncio
    async def test_empty_response(self, llm_provider) -> None:
        llm_provider.complete = respond("")

        with pytest.raises(ProviderError, match="empty response"):
            await ScriptGenerator(llm_provider).generate(PERSONA, ContentPlatform.X_POST)

    @pytest.mark.asyncio
    async def test_provider_exception_is_wrapped(self, llm_provider) -> None:
        llm_provider.complete = AsyncMock(side_effect=TimeoutError("upstream timeout"))

        with pytest.raises(ProviderError) as exc_info:
            await ScriptGenerator(llm_provider).generate(PERSONA, ContentPlatform.TIKTOK)

        assert exc_info.value.provider == "stub"
        assert exc_info.value.operation == "script_generation"


class TestPersonaAnalyzer:
    @pytest.mark.asyncio
    async def test_analyze_with_stub(self, llm_provider) -> None:
        analysis = await PersonaAnalyzer(llm_provider).analyze(["post one", "post two"])

        assert analysis.bio
        assert analysis.topics
        assert analysis.target_audience == "Young professionals"

    @pytest.mark.asyncio
    async def test_requests_json_mode(self, llm_provider) -> None:
        llm_provider.complete = respond(
            json.dumps(
                {
                    "bio": "b",
                    "topics": ["t"],
                    "style": "s",
                    "catchphrases": ["c"],
                    "targetAudience": "a",
                }
            )
        )

        await PersonaAnalyzer(llm_provider).analyze(["sample"])

        kwargs = llm_provider.complete.call_args.kwargs
        assert kwargs["json_mode"] is True
        assert kwargs["temperature"] == 0.4
        assert "--- Content 1 ---\nsample" in llm_provider.complete.call_args.args[0].user

    @pytest.mark.asyncio
    async def test_invalid_json(self, llm_provider) -> None:
        llm_provider.complete = respond("not json")

        with pytest.raises(ProviderError, match="invalid JSON"):
            await PersonaAnalyzer(llm_provider).analyze(["sample"])

    @pytest.mark.asyncio
    async def test_missing_fields(self, llm_provider) -> None:
        llm_provider.complete = respond(json.dumps({"bio": "b"}))

        with pytest.raises(ProviderError, match="missing fields"):
            await PersonaAnalyzer(llm_provider).analyze(["sample"])
