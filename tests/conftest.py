"""Pytest configuration and fixtures."""

import os
import tempfile
from collections.abc import Generator
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

# Set test environment before importing app modules
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"
os.environ["SCHEDULER_BACKEND"] = "celery"
os.environ["STORAGE_PATH"] = tempfile.mkdtemp(prefix="persona_studio_test_")
os.environ["LLM_PROVIDER"] = "stub"
os.environ["VOICEOVER_PROVIDER"] = "stub"
os.environ["VIDEO_GEN_PROVIDER"] = "stub"
os.environ["PUBLISHER_MODE"] = "simulated"
os.environ["LOG_LEVEL"] = "WARNING"


@pytest.fixture(autouse=True)
def clean_db() -> Generator[None, None, None]:
    """Fresh tables for every test on the shared in-memory engine."""
    from persona_studio.db.models import Base
    from persona_studio.db.session import engine

    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    yield


@pytest.fixture
def content_repo():
    from persona_studio.db.repository import ContentRepository

    return ContentRepository()


@pytest.fixture
def persona_repo():
    from persona_studio.db.repository import PersonaRepository

    return PersonaRepository()


@pytest.fixture
def storage(tmp_path):
    from persona_studio.services.storage import StorageService

    return StorageService(base_path=tmp_path / "media", public_base_url="http://test/media")


@pytest.fixture
def llm_provider():
    """Get a stub LLM provider."""
    from persona_studio.adapters.llm.stub import StubLLMProvider

    return StubLLMProvider()


@pytest.fixture
def voiceover_provider():
    """Get a stub voice provider."""
    from persona_studio.adapters.voiceover.stub import StubVoiceoverProvider

    return StubVoiceoverProvider()


@pytest.fixture
def video_gen_provider():
    """Get a stub video generation provider."""
    from persona_studio.adapters.video_gen.stub import StubVideoGenProvider

    return StubVideoGenProvider()


@pytest.fixture
def dispatcher():
    """Dispatcher with simulated handlers for every platform."""
    from persona_studio.adapters.publisher.simulated import SimulatedPublisher
    from persona_studio.domain.enums import ContentPlatform
    from persona_studio.services.publisher import PublisherDispatcher

    return PublisherDispatcher({p: SimulatedPublisher(p) for p in ContentPlatform})


@pytest.fixture
def make_scheduled(content_repo):
    """Create an item already in the scheduled state at ``scheduled_for``."""
    from persona_studio.domain.enums import ContentPlatform, ContentStatus

    def _make(
        scheduled_for: datetime,
        platform: ContentPlatform = ContentPlatform.X_POST,
        user_id: str = "user-1",
    ):
        item = content_repo.create(user_id=user_id, platform=platform, script="Scheduled post")
        assert content_repo.transition(
            item.id,
            ContentStatus.DRAFT,
            status=ContentStatus.SCHEDULED,
            scheduled_for=scheduled_for,
        )
        return content_repo.get(item.id)

    return _make


@pytest.fixture
def past() -> datetime:
    return datetime.now(timezone.utc) - timedelta(minutes=5)


@pytest.fixture
def future() -> datetime:
    return datetime.now(timezone.utc) + timedelta(hours=1)


@pytest.fixture
def test_client() -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI app with a fresh rate limiter."""
    from persona_studio.api.deps import get_rate_limiter
    from persona_studio.main import app
    from persona_studio.services.rate_limiter import RateLimiter

    limiter = RateLimiter()
    app.dependency_overrides[get_rate_limiter] = lambda: limiter
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"X-User-Id": "user-1"}
