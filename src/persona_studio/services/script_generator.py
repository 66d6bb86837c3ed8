"""Persona-conditioned script generation."""

from persona_studio.adapters.llm.base import LLMProvider, Prompt
from persona_studio.config import settings
from persona_studio.domain.enums import ContentPlatform, ContentTone
from persona_studio.domain.errors import ProviderError
from persona_studio.domain.models import PersonaContext
from persona_studio.logging import get_logger
from persona_studio.services.persona import format_persona_block

logger = get_logger(__name__)

LANGUAGE_NAMES = {
    "de": "German",
    "en": "English",
    "fr": "French",
    "es": "Spanish",
    "it": "Italian",
}

TONE_DESCRIPTIONS = {
    ContentTone.MOTIVATIONAL: "motivational, energetic, empowering",
    ContentTone.INFORMATIVE: "factual, educational, clearly structured",
    ContentTone.ENTERTAINING: "casual, witty, entertaining",
    ContentTone.PROVOCATIVE: "polarizing, bold, controversial",
}

PLATFORM_LABELS = {
    ContentPlatform.INSTAGRAM_REEL: "Instagram Reel",
    ContentPlatform.TIKTOK: "TikTok video",
    ContentPlatform.X_POST: "X post",
}


class ScriptGenerator:
    """Writes a script in the creator's own voice.

    Video platforms get a spoken script in HOOK / MAIN / CTA sections; the
    short-text platform gets a single post capped at the platform limit.
    """

    SYSTEM_PROMPT = (
        "You are an AI assistant that writes authentic social media content. "
        "You ALWAYS answer with the finished script or text only: no meta comments, "
        "no explanations, no introductions."
    )

    TEMPERATURE = 0.85
    MAX_TOKENS = 600

    def __init__(
        self,
        llm_provider: LLMProvider,
        language: str | None = None,
        max_post_length: int | None = None,
    ) -> None:
        self.llm = llm_provider
        self.language = language or settings.script_language
        self.max_post_length = max_post_length or settings.tweet_max_length

    def _common_instructions(
        self,
        persona: PersonaContext,
        topic: str | None,
        tone: ContentTone | None,
    ) -> str:
        topic_line = (
            f'The topic is: "{topic}".'
            if topic
            else "Pick a fitting topic from the persona's interests."
        )
        tone_line = (
            f"The tone should be {TONE_DESCRIPTIONS[tone]}."
            if tone
            else "Choose a tone that fits the persona."
        )
        language = LANGUAGE_NAMES.get(self.language, self.language)
        return f"""=== PERSONA ===
{format_persona_block(persona) or "(no persona on file)"}
===============

{topic_line}
{tone_line}

Write in {language}."""

    def build_video_prompt(
        self,
        persona: PersonaContext,
        platform: ContentPlatform,
        topic: str | None,
        tone: ContentTone | None,
    ) -> str:
        return f"""Write a script for a {PLATFORM_LABELS[platform]} (15-60 seconds) that sounds \
as if the following person wrote and spoke it THEMSELVES. It must feel authentic and \
personal, NOT like an agency wrote it.

{self._common_instructions(persona, topic, tone)}

IMPORTANT:
- Weave in the persona's catchphrases and style naturally.
- Write the way the person REALLY talks, with their vocabulary and quirks.
- First person only.
- Keep it short (max. 150 words).

Format the script EXACTLY like this:

HOOK:
[One gripping opening line, max. 2 sentences]

MAIN:
[The core content, 3-5 sentences]

CTA:
[Call to action: follow, comment, share, 1-2 sentences]"""

    def build_post_prompt(
        self,
        persona: PersonaContext,
        topic: str | None,
        tone: ContentTone | None,
    ) -> str:
        return f"""Write a single post (max. {self.max_post_length} characters!) that sounds \
as if the following person wrote it themselves.

{self._common_instructions(persona, topic, tone)}

IMPORTANT:
- AT MOST {self.max_post_length} characters including spaces and emojis.
- Use the persona's style and language.
- Use one of their catchphrases if it fits.
- No hashtag spam, at most 2 hashtags.
- Return ONLY the post text."""

    async def generate(
        self,
        persona: PersonaContext,
        platform: ContentPlatform,
        topic: str | None = None,
        tone: ContentTone | None = None,
    ) -> str:
        """Generate a script for ``platform``.

        Returns:
            Non-empty script text; at most ``max_post_length`` characters for
            short-text posts.

        Raises:
            ProviderError: If the model call fails or returns nothing.
        """
        if platform.is_video:
            user_prompt = self.build_video_prompt(persona, platform, topic, tone)
        else:
            user_prompt = self.build_post_prompt(persona, topic, tone)

        prompt = Prompt(system=self.SYSTEM_PROMPT, user=user_prompt)

        try:
            response = await self.llm.complete(
                prompt,
                temperature=self.TEMPERATURE,
                max_tokens=self.MAX_TOKENS,
            )
        except Exception as e:
            raise ProviderError(self.llm.name, "script_generation", str(e)) from e

        script = (response.text or "").strip()
        if not script:
            raise ProviderError(self.llm.name, "script_generation", "empty response")

        if not platform.is_video:
            script = script[: self.max_post_length]

        logger.info(
            "script_generated",
            platform=platform,
            provider=self.llm.name,
            length=len(script),
            persona_empty=persona.is_empty,
        )
        return script
