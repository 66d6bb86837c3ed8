"""Tests for domain models and errors."""

from uuid import uuid4

from persona_studio.domain.enums import (
    ContentPlatform,
    ContentStatus,
    ContentType,
    StepOutcome,
)
from persona_studio.domain.errors import (
    GenerationError,
    ProviderError,
    RateLimitExceededError,
)
from persona_studio.domain.models import ContentItem, GenerationOutcome, GenerationStep


def make_item(**kwargs) -> ContentItem:
    defaults = {
        "id": uuid4(),
        "user_id": "user-1",
        "content_type": ContentType.VIDEO,
        "platform": ContentPlatform.TIKTOK,
        "status": ContentStatus.DRAFT,
    }
    return ContentItem(**{**defaults, **kwargs})


def test_platform_content_type() -> None:
    assert ContentPlatform.X_POST.content_type == ContentType.TEXT
    assert ContentPlatform.INSTAGRAM_REEL.content_type == ContentType.VIDEO
    assert ContentPlatform.TIKTOK.is_video


def test_publishable_video_prefers_final_render() -> None:
    assert make_item(video_url="raw.mp4").publishable_video_url == "raw.mp4"
    item = make_item(video_url="raw.mp4", final_video_url="final.mp4")
    assert item.publishable_video_url == "final.mp4"


def test_content_item_to_dict() -> None:
    item = make_item(script="Hi")

    data = item.to_dict()

    assert data["id"] == str(item.id)
    assert data["status"] == "draft"
    assert data["platform"] == "tiktok"
    assert data["scheduled_for"] is None


def test_outcome_is_degraded_only_on_failure() -> None:
    outcome = GenerationOutcome(
        content=make_item(),
        steps=[
            GenerationStep("script", StepOutcome.SUCCEEDED),
            GenerationStep("voice", StepOutcome.SKIPPED),
        ],
    )
    assert not outcome.degraded

    outcome.steps.append(GenerationStep("video", StepOutcome.FAILED, "timeout"))
    assert outcome.degraded
    assert outcome.step("video").detail == "timeout"
    assert outcome.step("missing") is None


def test_provider_error_message() -> None:
    error = ProviderError("elevenlabs", "voice_clone", "sample too short")

    assert error.to_dict() == {
        "message": "elevenlabs voice_clone failed: sample too short",
        "code": "PROVIDER_ERROR",
    }
    assert error.status_code == 502


def test_context_lookup_failure_is_server_error() -> None:
    assert GenerationError("x", code="CONTEXT_LOOKUP_FAILED").status_code == 500
    assert GenerationError("x").status_code == 502


def test_rate_limit_error_headers() -> None:
    error = RateLimitExceededError(42, headers={"X-RateLimit-Remaining": "0"})

    assert error.headers == {"X-RateLimit-Remaining": "0", "Retry-After": "42"}
    assert "42 seconds" in error.message
