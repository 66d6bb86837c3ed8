"""Persona profile and avatar endpoints."""

import asyncio
from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from persona_studio.api.deps import (
    CurrentUserDep,
    PersonaAnalyzerDep,
    PersonaRepositoryDep,
    admit_or_deny,
)
from persona_studio.domain.enums import AvatarStatus, OperationClass, VoiceStatus
from persona_studio.domain.errors import ContentNotFoundError

router = APIRouter(prefix="/persona", tags=["Persona"])


class PersonaBody(BaseModel):
    """Persona profile fields."""

    bio: str | None = Field(default=None, max_length=2000)
    topics: list[str] = Field(default_factory=list, max_length=20)
    style: str | None = Field(default=None, max_length=2000)
    catchphrases: list[str] = Field(default_factory=list, max_length=20)
    target_audience: str | None = Field(default=None, max_length=1000)


class PersonaResponse(PersonaBody):
    user_id: str
    updated_at: datetime | None = None


class AnalyzeRequest(BaseModel):
    samples: list[str] = Field(..., min_length=1, max_length=20)
    save: bool = Field(default=False, description="Store the result as the persona")


class AvatarCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)


class AvatarResponse(BaseModel):
    id: UUID
    name: str
    status: AvatarStatus
    voice_id: str | None = None
    voice_status: VoiceStatus
    created_at: datetime


@router.get("", response_model=PersonaResponse, summary="Get persona")
async def get_persona(user_id: CurrentUserDep, repo: PersonaRepositoryDep) -> PersonaResponse:
    persona = await asyncio.to_thread(repo.get_persona, user_id)
    if persona is None:
        raise ContentNotFoundError("Persona not found")
    return PersonaResponse(
        user_id=persona.user_id,
        bio=persona.bio,
        topics=persona.topics or [],
        style=persona.style,
        catchphrases=persona.catchphrases or [],
        target_audience=persona.target_audience,
        updated_at=persona.updated_at or persona.created_at,
    )


@router.put("", response_model=PersonaResponse, summary="Create or replace persona")
async def put_persona(
    body: PersonaBody, user_id: CurrentUserDep, repo: PersonaRepositoryDep
) -> PersonaResponse:
    persona = await asyncio.to_thread(repo.upsert_persona, user_id, **body.model_dump())
    return PersonaResponse(
        user_id=persona.user_id,
        **body.model_dump(),
        updated_at=persona.updated_at or persona.created_at,
    )


@router.post(
    "/analyze",
    response_model=PersonaBody,
    summary="Analyze sample content",
    description="Extract a persona profile from posts or transcripts of one creator.",
    dependencies=[Depends(admit_or_deny(OperationClass.GENERATE))],
)
async def analyze_persona(
    request: AnalyzeRequest,
    user_id: CurrentUserDep,
    analyzer: PersonaAnalyzerDep,
    repo: PersonaRepositoryDep,
) -> PersonaBody:
    analysis = await analyzer.analyze(request.samples)
    body = PersonaBody(
        bio=analysis.bio,
        topics=analysis.topics,
        style=analysis.style,
        catchphrases=analysis.catchphrases,
        target_audience=analysis.target_audience,
    )
    if request.save:
        await asyncio.to_thread(repo.upsert_persona, user_id, **body.model_dump())
    return body


@router.get("/avatars", response_model=list[AvatarResponse], summary="List avatars")
async def list_avatars(user_id: CurrentUserDep, repo: PersonaRepositoryDep) -> list[AvatarResponse]:
    avatars = await asyncio.to_thread(repo.list_avatars, user_id)
    return [AvatarResponse.model_validate(a, from_attributes=True) for a in avatars]


@router.post(
    "/avatars",
    response_model=AvatarResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create avatar",
)
async def create_avatar(
    request: AvatarCreateRequest, user_id: CurrentUserDep, repo: PersonaRepositoryDep
) -> AvatarResponse:
    avatar = await asyncio.to_thread(repo.create_avatar, user_id, request.name)
    return AvatarResponse.model_validate(avatar, from_attributes=True)
