"""Voice provider interface: cloning a creator's voice and speaking with it."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class VoiceoverRequest:
    text: str
    voice_id: str | None = None
    language: str = "en"  # Hint only; multilingual models detect the language


@dataclass
class VoiceoverResult:
    success: bool
    audio_data: bytes | None = None
    content_type: str = "audio/mpeg"
    error_message: str | None = None


@dataclass
class VoiceSample:
    """One uploaded recording of the creator's voice."""

    data: bytes
    filename: str = "sample.mp3"
    content_type: str = "audio/mpeg"


@dataclass
class VoiceCloneResult:
    success: bool
    voice_id: str | None = None
    error_message: str | None = None


@dataclass
class VoiceInfo:
    voice_id: str
    name: str
    category: str | None = None
    preview_url: str | None = None


class VoiceoverProvider(ABC):
    """Clones voices and synthesizes speech.

    Failures are returned as unsuccessful results rather than raised, so the
    generation pipeline can record them as a failed step.
    """

    @property
    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    async def generate(self, request: VoiceoverRequest) -> VoiceoverResult:
        """Speak ``request.text`` with ``request.voice_id``."""

    @abstractmethod
    async def clone_voice(self, name: str, samples: list[VoiceSample]) -> VoiceCloneResult:
        """Create a reusable voice from one or more samples."""

    @abstractmethod
    async def list_voices(self) -> list[VoiceInfo]: ...
