"""Video generation, status and lip-sync endpoints."""

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from persona_studio.api.deps import CurrentUserDep, VideoDispatcherDep, admit_or_deny
from persona_studio.domain.enums import OperationClass, VideoGenerationStatus

router = APIRouter(prefix="/video", tags=["Video"])


class VideoGenerateRequest(BaseModel):
    prompt: str = Field(..., min_length=1, max_length=2500)
    image_url: str | None = Field(default=None, description="Animate this image instead")


class LipSyncRequest(BaseModel):
    video_url: str
    audio_url: str


class VideoTaskResponse(BaseModel):
    task_id: str


class VideoStatusResponse(BaseModel):
    task_id: str
    status: VideoGenerationStatus
    video_url: str | None = None
    error: str | None = None


@router.post(
    "/generate",
    response_model=VideoTaskResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Start video generation",
    dependencies=[Depends(admit_or_deny(OperationClass.VIDEO))],
)
async def generate_video(
    request: VideoGenerateRequest,
    _user_id: CurrentUserDep,
    video: VideoDispatcherDep,
) -> VideoTaskResponse:
    task_id = await video.submit(request.prompt, image_url=request.image_url)
    return VideoTaskResponse(task_id=task_id)


@router.get("/status", response_model=VideoStatusResponse, summary="Video task status")
async def video_status(
    _user_id: CurrentUserDep,
    video: VideoDispatcherDep,
    task_id: str = Query(..., min_length=1),
) -> VideoStatusResponse:
    result = await video.status(task_id)
    return VideoStatusResponse(
        task_id=task_id,
        status=result.status,
        video_url=result.video_url,
        error=result.error_message,
    )


@router.post(
    "/lip-sync",
    response_model=VideoTaskResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Start lip-sync",
    dependencies=[Depends(admit_or_deny(OperationClass.VIDEO))],
)
async def lip_sync(
    request: LipSyncRequest,
    _user_id: CurrentUserDep,
    video: VideoDispatcherDep,
) -> VideoTaskResponse:
    task_id = await video.lip_sync(request.video_url, request.audio_url)
    return VideoTaskResponse(task_id=task_id)
