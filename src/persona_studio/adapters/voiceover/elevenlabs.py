"""ElevenLabs voice cloning and text-to-speech."""

from typing import Any

import httpx

from persona_studio.adapters.voiceover.base import (
    VoiceCloneResult,
    VoiceInfo,
    VoiceoverProvider,
    VoiceoverRequest,
    VoiceoverResult,
    VoiceSample,
)
from persona_studio.config import settings
from persona_studio.logging import get_logger

logger = get_logger(__name__)

ELEVENLABS_API_URL = "https://api.elevenlabs.io/v1"

NOT_CONFIGURED = "ElevenLabs API key not configured"


def describe_error(response: httpx.Response) -> str:
    """``ElevenLabs API error: <status>`` plus the API's own message if it sent one."""
    message = f"ElevenLabs API error: {response.status_code}"
    try:
        detail = response.json().get("detail")
    except ValueError:
        return message
    if isinstance(detail, dict) and detail.get("message"):
        return f"{message} - {detail['message']}"
    if isinstance(detail, str) and detail:
        return f"{message} - {detail}"
    return message


class ElevenLabsProvider(VoiceoverProvider):
    def __init__(
        self,
        api_key: str | None = None,
        model_id: str | None = None,
        base_url: str = ELEVENLABS_API_URL,
    ) -> None:
        self.api_key = api_key or settings.elevenlabs_api_key
        self.model_id = model_id or settings.elevenlabs_model_id
        self.base_url = base_url.rstrip("/")

        if not self.api_key:
            logger.warning("elevenlabs_api_key_missing")

    @property
    def name(self) -> str:
        return "elevenlabs"

    async def _call(
        self, method: str, path: str, timeout: float, **kwargs: Any
    ) -> httpx.Response | str:
        """Perform one API call; returns the response or an error message."""
        headers = {"xi-api-key": self.api_key, **kwargs.pop("headers", {})}
        try:
            async with httpx.AsyncClient(timeout=timeout) as client:
                if method == "GET":
                    response = await client.get(f"{self.base_url}{path}", headers=headers)
                else:
                    response = await client.post(
                        f"{self.base_url}{path}", headers=headers, **kwargs
                    )
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            error = describe_error(e.response)
            logger.error("elevenlabs_request_rejected", path=path, error=error)
            return error
        except httpx.HTTPError as e:
            logger.error("elevenlabs_request_failed", path=path, error=str(e))
            return str(e)
        return response

    async def generate(self, request: VoiceoverRequest) -> VoiceoverResult:
        if not self.api_key:
            return VoiceoverResult(success=False, error_message=NOT_CONFIGURED)
        if not request.voice_id:
            return VoiceoverResult(success=False, error_message="A voice ID is required")
        if not request.text.strip():
            return VoiceoverResult(success=False, error_message="Text must not be empty")

        outcome = await self._call(
            "POST",
            f"/text-to-speech/{request.voice_id}",
            timeout=120.0,
            headers={"Accept": "audio/mpeg"},
            json={"text": request.text, "model_id": self.model_id},
        )
        if isinstance(outcome, str):
            return VoiceoverResult(success=False, error_message=outcome)

        logger.info(
            "elevenlabs_speech_generated",
            voice_id=request.voice_id,
            language=request.language,
            audio_bytes=len(outcome.content),
        )
        return VoiceoverResult(success=True, audio_data=outcome.content)

    async def clone_voice(self, name: str, samples: list[VoiceSample]) -> VoiceCloneResult:
        if not self.api_key:
            return VoiceCloneResult(success=False, error_message=NOT_CONFIGURED)
        if not samples:
            return VoiceCloneResult(
                success=False,
                error_message="At least one audio file is required for voice cloning",
            )

        files = [
            ("files", (f"sample_{i}_{s.filename}", s.data, s.content_type))
            for i, s in enumerate(samples)
        ]
        outcome = await self._call(
            "POST", "/voices/add", timeout=180.0, data={"name": name}, files=files
        )
        if isinstance(outcome, str):
            return VoiceCloneResult(success=False, error_message=outcome)

        voice_id = outcome.json().get("voice_id")
        if not voice_id:
            return VoiceCloneResult(success=False, error_message="No voice_id in response")

        logger.info("elevenlabs_voice_cloned", voice_id=voice_id, sample_count=len(samples))
        return VoiceCloneResult(success=True, voice_id=voice_id)

    async def list_voices(self) -> list[VoiceInfo]:
        if not self.api_key:
            return []

        outcome = await self._call("GET", "/voices", timeout=30.0)
        if isinstance(outcome, str):
            return []

        return [
            VoiceInfo(
                voice_id=v["voice_id"],
                name=v.get("name") or v["voice_id"],
                category=v.get("category"),
                preview_url=v.get("preview_url"),
            )
            for v in outcome.json().get("voices", [])
            if v.get("voice_id")
        ]
