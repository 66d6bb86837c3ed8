"""Dashboard statistics."""

import asyncio

from fastapi import APIRouter
from pydantic import BaseModel

from persona_studio.api.deps import ContentServiceDep, CurrentUserDep

router = APIRouter(prefix="/stats", tags=["Stats"])


class ContentStatsResponse(BaseModel):
    this_week: int
    pending_review: int
    published: int
    scheduled: int


@router.get("/content", response_model=ContentStatsResponse, summary="Content counters")
async def content_stats(
    user_id: CurrentUserDep, service: ContentServiceDep
) -> ContentStatsResponse:
    """Items created since Monday (UTC) plus review, published and scheduled counts."""
    stats = await asyncio.to_thread(service.stats, user_id)
    return ContentStatsResponse.model_validate(stats, from_attributes=True)
