"""Content review and publishing endpoints."""

import asyncio
from datetime import datetime
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Query, status
from pydantic import BaseModel, Field

from persona_studio.api.deps import ContentServiceDep, CurrentUserDep
from persona_studio.domain.enums import (
    ContentAction,
    ContentPlatform,
    ContentStatus,
    ContentType,
    VideoGenerationStatus,
)
from persona_studio.domain.models import ContentItem
from persona_studio.logging import get_logger

router = APIRouter(prefix="/content", tags=["Content"])
logger = get_logger(__name__)


class ContentResponse(BaseModel):
    """A content item."""

    id: UUID
    user_id: str
    avatar_id: UUID | None = None
    content_type: ContentType
    platform: ContentPlatform
    status: ContentStatus
    script: str | None = None
    audio_url: str | None = None
    video_url: str | None = None
    final_video_url: str | None = None
    video_task_id: str | None = None
    video_status: VideoGenerationStatus | None = None
    scheduled_for: datetime | None = None
    published_at: datetime | None = None
    external_id: str | None = None
    external_url: str | None = None
    publish_attempts: int = 0
    last_publish_error: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_item(cls, item: ContentItem) -> "ContentResponse":
        return cls.model_validate(item, from_attributes=True)


class Pagination(BaseModel):
    total: int
    page: int
    limit: int


class ContentListResponse(BaseModel):
    """One page of content items."""

    items: list[ContentResponse]
    pagination: Pagination


class CreateContentRequest(BaseModel):
    """Request to create a draft from user-supplied material."""

    platform: ContentPlatform
    script: str | None = Field(default=None, max_length=10_000)
    video_url: str | None = None
    avatar_id: UUID | None = None


class UpdateContentRequest(BaseModel):
    """Editable fields of a content item."""

    script: str | None = Field(default=None, max_length=10_000)
    video_url: str | None = None


class ApproveRequest(BaseModel):
    """Approve, optionally scheduling at the same time."""

    scheduled_for: datetime | None = Field(
        default=None, description="If set, the content is scheduled instead of approved"
    )


class RejectRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=1000)


class ScheduleRequest(BaseModel):
    scheduled_for: datetime = Field(..., description="Publish time, must be in the future")


class PublishResultResponse(BaseModel):
    success: bool
    platform: str
    external_id: str | None = None
    external_url: str | None = None
    error: str | None = None


class PublishResponse(BaseModel):
    """Result of a publish-now request."""

    result: PublishResultResponse
    content: ContentResponse


@router.post(
    "",
    response_model=ContentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create content",
)
async def create_content(
    request: CreateContentRequest,
    user_id: CurrentUserDep,
    service: ContentServiceDep,
) -> ContentResponse:
    item = await asyncio.to_thread(
        service.create_manual,
        user_id,
        request.platform,
        request.script,
        request.video_url,
        request.avatar_id,
    )
    return ContentResponse.from_item(item)


@router.get("", response_model=ContentListResponse, summary="List content")
async def list_content(
    user_id: CurrentUserDep,
    service: ContentServiceDep,
    status_filter: ContentStatus | None = Query(default=None, alias="status"),
    platform: ContentPlatform | None = None,
    content_type: ContentType | None = Query(default=None, alias="type"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
) -> ContentListResponse:
    items, total = await asyncio.to_thread(
        service.list_content,
        user_id,
        status_filter,
        platform,
        content_type,
        page,
        limit,
    )
    return ContentListResponse(
        items=[ContentResponse.from_item(i) for i in items],
        pagination=Pagination(total=total, page=page, limit=limit),
    )


@router.get("/{content_id}", response_model=ContentResponse, summary="Get content")
async def get_content(
    content_id: UUID,
    user_id: CurrentUserDep,
    service: ContentServiceDep,
) -> ContentResponse:
    item = await asyncio.to_thread(service.get, user_id, content_id)
    return ContentResponse.from_item(item)


@router.patch("/{content_id}", response_model=ContentResponse, summary="Edit content")
async def update_content(
    content_id: UUID,
    request: UpdateContentRequest,
    user_id: CurrentUserDep,
    service: ContentServiceDep,
) -> ContentResponse:
    item = await asyncio.to_thread(
        service.update, user_id, content_id, request.script, request.video_url
    )
    return ContentResponse.from_item(item)


@router.delete("/{content_id}", summary="Delete content")
async def delete_content(
    content_id: UUID,
    user_id: CurrentUserDep,
    service: ContentServiceDep,
) -> dict[str, Any]:
    await asyncio.to_thread(service.delete, user_id, content_id)
    return {"success": True}


async def transition_content(
    service: ContentServiceDep,
    user_id: str,
    content_id: UUID,
    action: ContentAction,
    scheduled_for: datetime | None = None,
) -> ContentResponse:
    item = await asyncio.to_thread(
        service.transition, user_id, content_id, action, scheduled_for
    )
    return ContentResponse.from_item(item)


@router.post("/{content_id}/submit", response_model=ContentResponse, summary="Submit for review")
async def submit_content(
    content_id: UUID,
    user_id: CurrentUserDep,
    service: ContentServiceDep,
) -> ContentResponse:
    return await transition_content(service, user_id, content_id, ContentAction.SUBMIT_FOR_REVIEW)


@router.post("/{content_id}/approve", response_model=ContentResponse, summary="Approve content")
async def approve_content(
    content_id: UUID,
    user_id: CurrentUserDep,
    service: ContentServiceDep,
    request: ApproveRequest | None = None,
) -> ContentResponse:
    scheduled_for = request.scheduled_for if request else None
    return await transition_content(
        service, user_id, content_id, ContentAction.APPROVE, scheduled_for
    )


@router.post("/{content_id}/reject", response_model=ContentResponse, summary="Reject content")
async def reject_content(
    content_id: UUID,
    user_id: CurrentUserDep,
    service: ContentServiceDep,
    request: RejectRequest | None = None,
) -> ContentResponse:
    if request and request.reason:
        logger.info("content_rejected", content_id=str(content_id), reason=request.reason)
    return await transition_content(service, user_id, content_id, ContentAction.REJECT)


@router.put("/{content_id}/schedule", response_model=ContentResponse, summary="Schedule content")
async def schedule_content(
    content_id: UUID,
    request: ScheduleRequest,
    user_id: CurrentUserDep,
    service: ContentServiceDep,
) -> ContentResponse:
    return await transition_content(
        service, user_id, content_id, ContentAction.SCHEDULE, request.scheduled_for
    )


@router.post("/{content_id}/publish", response_model=PublishResponse, summary="Publish now")
async def publish_content(
    content_id: UUID,
    user_id: CurrentUserDep,
    service: ContentServiceDep,
) -> PublishResponse:
    result, item = await service.publish_now(user_id, content_id)
    return PublishResponse(
        result=PublishResultResponse(**result.to_dict()),
        content=ContentResponse.from_item(item),
    )


@router.post(
    "/{content_id}/video-status",
    response_model=ContentResponse,
    summary="Refresh video status",
    description="Poll the video provider for this item's task and record the result.",
)
async def refresh_video_status(
    content_id: UUID,
    user_id: CurrentUserDep,
    service: ContentServiceDep,
) -> ContentResponse:
    item = await asyncio.to_thread(service.get, user_id, content_id)
    item = await service.refresh_video_status(item)
    return ContentResponse.from_item(item)
