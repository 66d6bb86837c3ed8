"""Voice cloning and speech synthesis adapters."""

from persona_studio.adapters.voiceover.base import (
    VoiceCloneResult,
    VoiceInfo,
    VoiceoverProvider,
    VoiceoverRequest,
    VoiceoverResult,
    VoiceSample,
)
from persona_studio.adapters.voiceover.elevenlabs import ElevenLabsProvider
from persona_studio.adapters.voiceover.stub import StubVoiceoverProvider

__all__ = [
    "VoiceCloneResult",
    "VoiceInfo",
    "VoiceoverProvider",
    "VoiceoverRequest",
    "VoiceoverResult",
    "VoiceSample",
    "ElevenLabsProvider",
    "StubVoiceoverProvider",
]
