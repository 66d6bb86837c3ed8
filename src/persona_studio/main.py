"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Awaitable, Callable
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from fastapi.staticfiles import StaticFiles

from persona_studio import __version__
from persona_studio.api.deps import (
    get_content_repository,
    get_publisher_dispatcher,
    get_rate_limiter,
)
from persona_studio.api.routes import content, generate, health, persona, stats, video, voice
from persona_studio.config import settings
from persona_studio.db.session import init_db
from persona_studio.domain.errors import StudioError
from persona_studio.logging import (
    bind_request_context,
    clear_request_context,
    get_logger,
    setup_logging,
)
from persona_studio.services.scheduler import ScheduledPublisher

# Setup logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    logger.info("application_starting", version=__version__)

    # Startup: verify database connection and create missing tables
    try:
        init_db()
        logger.info("database_connected")
    except Exception as e:
        logger.error("database_connection_failed", error=str(e))
        # Don't raise - let health checks report the issue

    limiter = get_rate_limiter()
    limiter.start_cleanup()

    scheduler: ScheduledPublisher | None = None
    if settings.scheduler_backend == "inprocess":
        scheduler = ScheduledPublisher(get_content_repository(), get_publisher_dispatcher())
        await scheduler.start()
    app.state.scheduler = scheduler

    yield

    # Shutdown
    logger.info("application_shutting_down")
    if scheduler is not None:
        await scheduler.stop()
    limiter.stop_cleanup()


# Create FastAPI app
app = FastAPI(
    title="Persona Studio",
    description="Persona-driven AI content generation, review and scheduled publishing",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[
        "X-Request-Id",
        "X-RateLimit-Limit",
        "X-RateLimit-Remaining",
        "X-RateLimit-Reset",
    ],
)


@app.middleware("http")
async def request_context(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    request_id = request.headers.get("X-Request-Id") or uuid4().hex
    clear_request_context()
    bind_request_context(request_id=request_id, user_id=request.headers.get("X-User-Id"))
    try:
        response = await call_next(request)
    finally:
        clear_request_context()
    response.headers["X-Request-Id"] = request_id
    return response


@app.exception_handler(StudioError)
async def studio_error_handler(request: Request, exc: StudioError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("request_failed", path=request.url.path, code=exc.code, error=exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.to_dict()},
        headers=exc.headers,
    )


# Register routers
app.include_router(health.router)
app.include_router(generate.router, prefix="/api/v1")
app.include_router(content.router, prefix="/api/v1")
app.include_router(persona.router, prefix="/api/v1")
app.include_router(voice.router, prefix="/api/v1")
app.include_router(video.router, prefix="/api/v1")
app.include_router(stats.router, prefix="/api/v1")

# Generated audio is served from local storage
Path(settings.storage_path).mkdir(parents=True, exist_ok=True)
app.mount("/media", StaticFiles(directory=settings.storage_path), name="media")


@app.get("/", include_in_schema=False)
async def root() -> dict[str, str]:
    """Root endpoint pointing at the docs."""
    return {
        "name": "Persona Studio",
        "version": __version__,
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "persona_studio.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
