"""Offline voice provider for tests and local runs."""

import hashlib

from persona_studio.adapters.voiceover.base import (
    VoiceCloneResult,
    VoiceInfo,
    VoiceoverProvider,
    VoiceoverRequest,
    VoiceoverResult,
    VoiceSample,
)
from persona_studio.logging import get_logger

logger = get_logger(__name__)

STUB_AUDIO_PREFIX = b"STUB_AUDIO_DATA_"


class StubVoiceoverProvider(VoiceoverProvider):
    """Echoes the text as fake audio; cloned voice ids are derived from the samples."""

    @property
    def name(self) -> str:
        return "stub"

    async def generate(self, request: VoiceoverRequest) -> VoiceoverResult:
        logger.debug("stub_voiceover_generated", voice_id=request.voice_id)
        return VoiceoverResult(
            success=True, audio_data=STUB_AUDIO_PREFIX + request.text.encode()[:100]
        )

    async def clone_voice(self, name: str, samples: list[VoiceSample]) -> VoiceCloneResult:
        if not samples:
            return VoiceCloneResult(
                success=False,
                error_message="At least one audio file is required for voice cloning",
            )

        digest = hashlib.sha256(b"".join(s.data for s in samples)).hexdigest()[:16]
        logger.debug("stub_voice_cloned", voice_name=name, sample_count=len(samples))
        return VoiceCloneResult(success=True, voice_id=f"stub_voice_{digest}")

    async def list_voices(self) -> list[VoiceInfo]:
        return [VoiceInfo(voice_id="stub_narrator", name="Stub Narrator", category="premade")]
