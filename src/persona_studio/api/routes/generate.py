"""Content generation endpoint."""

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from persona_studio.api.deps import CurrentUserDep, OrchestratorDep, admit_or_deny
from persona_studio.api.routes.content import ContentResponse
from persona_studio.domain.enums import (
    ContentPlatform,
    ContentTone,
    OperationClass,
    StepOutcome,
)
from persona_studio.domain.models import GenerationRequest

router = APIRouter(tags=["Generation"])


class GenerateRequest(BaseModel):
    """Request to generate a draft from the caller's persona."""

    platform: ContentPlatform
    topic: str | None = Field(default=None, max_length=500)
    tone: ContentTone | None = None
    generate_video: bool = Field(default=False, description="Also start a video task")
    video_prompt: str | None = Field(
        default=None, max_length=2000, description="Override the prompt derived from the script"
    )


class StepResponse(BaseModel):
    step: str
    outcome: StepOutcome
    detail: str | None = None


class GenerateResponse(BaseModel):
    """The persisted draft and how each step went."""

    content: ContentResponse
    steps: list[StepResponse]
    degraded: bool


@router.post(
    "/generate",
    response_model=GenerateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Generate content",
    description="Generate a script, and for reels optionally voice and video, as a draft.",
    dependencies=[Depends(admit_or_deny(OperationClass.GENERATE))],
)
async def generate_content(
    request: GenerateRequest,
    user_id: CurrentUserDep,
    orchestrator: OrchestratorDep,
) -> GenerateResponse:
    outcome = await orchestrator.generate(
        user_id,
        GenerationRequest(
            platform=request.platform,
            topic=request.topic,
            tone=request.tone,
            want_video=request.generate_video,
            video_prompt=request.video_prompt,
        ),
    )
    return GenerateResponse(
        content=ContentResponse.from_item(outcome.content),
        steps=[
            StepResponse(step=s.step, outcome=s.outcome, detail=s.detail) for s in outcome.steps
        ],
        degraded=outcome.degraded,
    )
