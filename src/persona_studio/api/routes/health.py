"""Health, readiness and liveness checks."""

from fastapi import APIRouter, Request, Response, status
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from persona_studio import __version__
from persona_studio.config import settings
from persona_studio.db import session as db_session
from persona_studio.logging import get_logger

router = APIRouter(tags=["Health"])
logger = get_logger(__name__)


class ProviderSummary(BaseModel):
    llm: str
    voiceover: str
    video_gen: str
    publisher_mode: str


class SchedulerSummary(BaseModel):
    backend: str
    running: bool | None  # None when publishing is driven by Celery beat


class HealthResponse(BaseModel):
    status: str
    version: str
    providers: ProviderSummary
    scheduler: SchedulerSummary


class ReadinessResponse(BaseModel):
    ready: bool
    database: bool
    scheduler: bool


def _scheduler_running(request: Request) -> bool | None:
    if settings.scheduler_backend != "inprocess":
        return None
    scheduler = getattr(request.app.state, "scheduler", None)
    return bool(scheduler and scheduler.running)


def _database_reachable() -> bool:
    try:
        with db_session.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("readiness_database_unreachable", error=str(e))
        return False
    return True


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Which providers are wired in and whether the publish poller is running."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        providers=ProviderSummary(
            llm=settings.llm_provider,
            voiceover=settings.voiceover_provider,
            video_gen=settings.video_gen_provider,
            publisher_mode=settings.publisher_mode,
        ),
        scheduler=SchedulerSummary(
            backend=settings.scheduler_backend,
            running=_scheduler_running(request),
        ),
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check(request: Request, response: Response) -> ReadinessResponse:
    """Ready once the database answers and, in-process, the poller is up."""
    database_ok = _database_reachable()
    scheduler_ok = _scheduler_running(request) is not False
    ready = database_ok and scheduler_ok
    if not ready:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return ReadinessResponse(ready=ready, database=database_ok, scheduler=scheduler_ok)


@router.get("/health/live")
async def liveness_check() -> dict[str, str]:
    return {"status": "alive"}
