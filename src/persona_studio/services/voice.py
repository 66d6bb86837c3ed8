"""Voice cloning and speech synthesis."""

import re

from persona_studio.adapters.voiceover.base import (
    VoiceoverProvider,
    VoiceoverRequest,
    VoiceSample,
)
from persona_studio.config import settings
from persona_studio.domain.errors import InvalidInputError, ProviderError
from persona_studio.logging import get_logger

logger = get_logger(__name__)

# Bracketed stage directions such as "[close-up, smiling]"
_STAGE_DIRECTION = re.compile(r"\[[^\]]*\]")
# Section labels at the start of a line, in the languages scripts are written in
_SECTION_LABEL = re.compile(
    r"^\s*(HOOK|HAUPTTEIL|MAIN|BODY|CTA|CALL[ -]TO[ -]ACTION)\s*:\s*",
    re.IGNORECASE | re.MULTILINE,
)
_WHITESPACE = re.compile(r"\s+")


def clean_script_for_speech(script: str) -> str:
    """Strip stage directions and section labels, leaving only spoken text."""
    text = _STAGE_DIRECTION.sub(" ", script)
    text = _SECTION_LABEL.sub(" ", text)
    return _WHITESPACE.sub(" ", text).strip()


class VoiceSynthesizer:
    """Turns text into audio with a cloned voice, and creates cloned voices."""

    def __init__(self, provider: VoiceoverProvider, language: str | None = None) -> None:
        self.provider = provider
        self.language = language or settings.script_language

    async def synthesize(self, voice_id: str, text: str) -> bytes:
        """Render ``text`` with ``voice_id``.

        Raises:
            InvalidInputError: If the text is empty.
            ProviderError: If the provider fails or returns no audio.
        """
        if not text.strip():
            raise InvalidInputError("Text must not be empty")

        request = VoiceoverRequest(text=text, voice_id=voice_id, language=self.language)
        try:
            result = await self.provider.generate(request)
        except Exception as e:
            raise ProviderError(self.provider.name, "text_to_speech", str(e)) from e
        if not result.success or not result.audio_data:
            raise ProviderError(
                self.provider.name,
                "text_to_speech",
                result.error_message or "no audio returned",
            )
        return result.audio_data

    async def clone(self, name: str, samples: list[VoiceSample]) -> str:
        """Create a voice from samples and return its handle.

        Raises:
            InvalidInputError: If no samples were given.
            ProviderError: If cloning fails.
        """
        if not samples:
            raise InvalidInputError("At least one audio file is required for voice cloning")

        try:
            result = await self.provider.clone_voice(name, samples)
        except Exception as e:
            raise ProviderError(self.provider.name, "voice_clone", str(e)) from e
        if not result.success or not result.voice_id:
            raise ProviderError(
                self.provider.name,
                "voice_clone",
                result.error_message or "no voice ID returned",
            )

        logger.info("voice_cloned", voice_id=result.voice_id, sample_count=len(samples))
        return result.voice_id
