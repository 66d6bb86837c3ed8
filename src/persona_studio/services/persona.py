"""Persona context, avatar selection and persona analysis."""

import json
from collections.abc import Callable, Sequence

from persona_studio.adapters.llm.base import LLMProvider, Prompt
from persona_studio.db.models import AvatarModel, PersonaModel
from persona_studio.domain.enums import VoiceStatus
from persona_studio.domain.errors import ProviderError
from persona_studio.domain.models import AvatarVoice, PersonaAnalysis, PersonaContext
from persona_studio.logging import get_logger

logger = get_logger(__name__)

AvatarPolicy = Callable[[Sequence[AvatarModel]], AvatarModel | None]


def build_persona_context(persona: PersonaModel | None) -> PersonaContext:
    """Build the per-request style profile; a missing persona yields an empty one."""
    if persona is None:
        return PersonaContext()
    return PersonaContext(
        bio=persona.bio or None,
        topics=tuple(persona.topics or ()),
        style=persona.style or None,
        catchphrases=tuple(persona.catchphrases or ()),
        target_audience=persona.target_audience or None,
    )


def select_latest_avatar(avatars: Sequence[AvatarModel]) -> AvatarModel | None:
    """Avatar selection policy: the most recently created avatar wins."""
    if not avatars:
        return None
    return max(avatars, key=lambda a: a.created_at)


def resolve_avatar_voice(avatar: AvatarModel | None) -> AvatarVoice | None:
    """Voice handle of the selected avatar and whether it can be used."""
    if avatar is None:
        return None
    return AvatarVoice(
        avatar_id=avatar.id,
        voice_id=avatar.voice_id,
        ready=bool(avatar.voice_id) and avatar.voice_status == VoiceStatus.READY,
    )


def format_persona_block(context: PersonaContext) -> str:
    """Render the persona as prompt lines, omitting empty fields."""
    lines = []
    if context.bio:
        lines.append(f"Bio: {context.bio}")
    if context.topics:
        lines.append(f"Topics: {', '.join(context.topics)}")
    if context.style:
        lines.append(f"Style / tone of voice: {context.style}")
    if context.catchphrases:
        lines.append(f"Typical phrases: {' | '.join(context.catchphrases)}")
    if context.target_audience:
        lines.append(f"Target audience: {context.target_audience}")
    return "\n".join(lines)


class PersonaAnalyzer:
    """Extracts a persona profile from a creator's sample content."""

    SYSTEM_PROMPT = (
        "You are an expert content analyst. You always respond with valid JSON and nothing else."
    )

    REQUIRED_FIELDS = ("bio", "topics", "style", "catchphrases", "targetAudience")

    def __init__(self, llm_provider: LLMProvider) -> None:
        self.llm = llm_provider

    def _build_user_prompt(self, samples: list[str]) -> str:
        joined = "\n\n".join(
            f"--- Content {i + 1} ---\n{sample}" for i, sample in enumerate(samples)
        )
        return f"""Analyze the following pieces of content created by a single creator \
(posts, video transcripts, tweets, etc.) and extract a persona profile.

{joined}

Return a JSON object with EXACTLY these keys:

{{
  "bio": "1-3 sentence biography of who this creator is and what they do.",
  "topics": ["topic1", "topic2", ...],
  "style": "Their communication style in 1-3 sentences.",
  "catchphrases": ["phrase1", "phrase2", ...],
  "targetAudience": "Who their content is aimed at, 1-2 sentences."
}}

Rules:
- "topics" should contain 3-8 specific topics.
- "catchphrases" should contain 2-6 recurring phrases or signature expressions.
- Be specific and concrete, not generic."""

    async def analyze(self, samples: list[str]) -> PersonaAnalysis:
        """Analyze sample content.

        Raises:
            ProviderError: If the model fails or returns an unusable profile.
        """
        prompt = Prompt(system=self.SYSTEM_PROMPT, user=self._build_user_prompt(samples))
        try:
            response = await self.llm.complete(
                prompt, temperature=0.4, max_tokens=1000, json_mode=True
            )
        except Exception as e:
            raise ProviderError(self.llm.name, "persona_analysis", str(e)) from e

        if not response.text:
            raise ProviderError(self.llm.name, "persona_analysis", "empty response")

        try:
            data = json.loads(response.text)
        except json.JSONDecodeError as e:
            raise ProviderError(self.llm.name, "persona_analysis", f"invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise ProviderError(self.llm.name, "persona_analysis", "expected a JSON object")

        missing = [f for f in self.REQUIRED_FIELDS if f not in data]
        if missing:
            raise ProviderError(
                self.llm.name, "persona_analysis", f"response missing fields: {missing}"
            )

        logger.info("persona_analyzed", sample_count=len(samples), provider=self.llm.name)
        return PersonaAnalysis(
            bio=str(data["bio"]),
            topics=[str(t) for t in data["topics"]],
            style=str(data["style"]),
            catchphrases=[str(c) for c in data["catchphrases"]],
            target_audience=str(data["targetAudience"]),
        )
