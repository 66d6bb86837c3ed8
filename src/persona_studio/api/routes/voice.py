"""Voice cloning and text-to-speech endpoints."""

import asyncio
from dataclasses import asdict
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile
from pydantic import BaseModel, Field

from persona_studio.adapters.voiceover.base import VoiceSample
from persona_studio.api.deps import (
    CurrentUserDep,
    PersonaRepositoryDep,
    VoiceSynthesizerDep,
    admit_or_deny,
)
from persona_studio.domain.enums import OperationClass, VoiceStatus
from persona_studio.domain.errors import InvalidInputError
from persona_studio.logging import get_logger
from persona_studio.services.persona import resolve_avatar_voice, select_latest_avatar
from persona_studio.services.rate_limiter import RateLimitDecision
from persona_studio.utils.audio_extraction import extract_audio

router = APIRouter(prefix="/voice", tags=["Voice"])
logger = get_logger(__name__)


class VoiceCloneResponse(BaseModel):
    voice_id: str
    avatar_id: str | None = None


class VoiceResponse(BaseModel):
    voice_id: str
    name: str
    category: str | None = None
    preview_url: str | None = None


class TtsRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=5000)
    voice_id: str | None = Field(
        default=None, description="Defaults to the voice of the caller's current avatar"
    )


async def _to_sample(upload: UploadFile) -> VoiceSample:
    data = await upload.read()
    if not data:
        raise InvalidInputError(f"File '{upload.filename}' is empty")

    content_type = upload.content_type or "application/octet-stream"
    if content_type.startswith("video/"):
        audio = await asyncio.to_thread(extract_audio, data)
        return VoiceSample(data=audio, filename=f"{upload.filename or 'upload'}.mp3")
    return VoiceSample(
        data=data,
        filename=upload.filename or "sample.mp3",
        content_type=content_type,
    )


@router.post(
    "/clone",
    response_model=VoiceCloneResponse,
    summary="Clone voice",
    description="Clone a voice from audio or video samples and attach it to the current avatar.",
    dependencies=[Depends(admit_or_deny(OperationClass.VOICE_CLONE))],
)
async def clone_voice(
    user_id: CurrentUserDep,
    voice: VoiceSynthesizerDep,
    persona_repo: PersonaRepositoryDep,
    name: Annotated[str, Form(min_length=1, max_length=100)],
    files: Annotated[list[UploadFile], File(description="Audio or video samples")],
) -> VoiceCloneResponse:
    if not name.strip():
        raise InvalidInputError("name is required")
    if not files:
        raise InvalidInputError("At least one audio file is required")

    samples = [await _to_sample(f) for f in files]
    voice_id = await voice.clone(name.strip(), samples)

    avatars = await asyncio.to_thread(persona_repo.list_avatars, user_id)
    avatar = select_latest_avatar(avatars)
    if avatar is not None:
        await asyncio.to_thread(
            persona_repo.set_avatar_voice, avatar.id, voice_id, VoiceStatus.READY.value
        )
    else:
        logger.info("voice_cloned_without_avatar", user_id=user_id)

    return VoiceCloneResponse(
        voice_id=voice_id,
        avatar_id=str(avatar.id) if avatar else None,
    )


@router.get("", response_model=list[VoiceResponse], summary="List voices")
async def list_voices(_user_id: CurrentUserDep, voice: VoiceSynthesizerDep) -> list[VoiceResponse]:
    voices = await voice.provider.list_voices()
    return [VoiceResponse(**asdict(v)) for v in voices]


@router.post(
    "/tts",
    summary="Text to speech",
    response_class=Response,
    responses={200: {"content": {"audio/mpeg": {}}}},
)
async def text_to_speech(
    request: TtsRequest,
    decision: Annotated[RateLimitDecision, Depends(admit_or_deny(OperationClass.TTS))],
    user_id: CurrentUserDep,
    voice: VoiceSynthesizerDep,
    persona_repo: PersonaRepositoryDep,
) -> Response:
    voice_id = request.voice_id
    if voice_id is None:
        avatars = await asyncio.to_thread(persona_repo.list_avatars, user_id)
        avatar_voice = resolve_avatar_voice(select_latest_avatar(avatars))
        if avatar_voice is None or not avatar_voice.ready:
            raise InvalidInputError("No voice_id given and no cloned voice on file")
        voice_id = avatar_voice.voice_id

    audio = await voice.synthesize(voice_id, request.text)
    # A returned Response bypasses the injected one, so carry the headers over
    return Response(content=audio, media_type="audio/mpeg", headers=decision.headers())
