"""API tests for generation, content review, persona, voice and video endpoints."""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from persona_studio.api.deps import get_rate_limiter
from persona_studio.domain.enums import OperationClass
from persona_studio.main import app
from persona_studio.services.rate_limiter import RateLimiter


def iso(delta: timedelta) -> str:
    return (datetime.now(timezone.utc) + delta).isoformat()


def create_content(client: TestClient, headers: dict[str, str], **body) -> dict:
    response = client.post("/api/v1/content", json={"platform": "x_post", **body}, headers=headers)
    assert response.status_code == 201
    return response.json()


class TestAuthAndRateLimit:
    def test_missing_user_is_unauthorized(self, test_client: TestClient) -> None:
        response = test_client.get("/api/v1/content")

        assert response.status_code == 401
        assert response.json() == {"error": {"message": "Unauthorized", "code": "UNAUTHORIZED"}}

    def test_unauthenticated_generate_passes_limiter_then_fails_auth(
        self, test_client: TestClient
    ) -> None:
        response = test_client.post("/api/v1/generate", json={"platform": "x_post"})

        assert response.status_code == 401

    def test_rate_limit_headers_and_denial(self, test_client: TestClient, auth_headers) -> None:
        limiter = RateLimiter(limits={op: 1 for op in OperationClass}, window_seconds=60)
        app.dependency_overrides[get_rate_limiter] = lambda: limiter

        first = test_client.post(
            "/api/v1/generate", json={"platform": "x_post"}, headers=auth_headers
        )
        second = test_client.post(
            "/api/v1/generate", json={"platform": "x_post"}, headers=auth_headers
        )

        assert first.status_code == 201
        assert first.headers["X-RateLimit-Limit"] == "1"
        assert first.headers["X-RateLimit-Remaining"] == "0"

        assert second.status_code == 429
        assert second.json()["error"]["code"] == "RATE_LIMIT_EXCEEDED"
        assert 1 <= int(second.headers["Retry-After"]) <= 60
        assert second.headers["X-RateLimit-Remaining"] == "0"
        assert "X-RateLimit-Reset" in second.headers


class TestGenerate:
    def test_generate_text_post(self, test_client: TestClient, auth_headers) -> None:
        response = test_client.post(
            "/api/v1/generate",
            json={"platform": "x_post", "topic": "morning routines", "tone": "motivational"},
            headers=auth_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["content"]["status"] == "draft"
        assert data["content"]["content_type"] == "text"
        assert len(data["content"]["script"]) <= 280
        assert data["degraded"] is False
        assert [s["step"] for s in data["steps"]] == ["script", "voice", "video"]

    def test_generate_reel_with_video_then_refresh(
        self, test_client: TestClient, auth_headers
    ) -> None:
        response = test_client.post(
            "/api/v1/generate",
            json={"platform": "tiktok", "generate_video": True},
            headers=auth_headers,
        )
        content = response.json()["content"]
        assert content["video_status"] == "pending"

        refreshed = test_client.post(
            f"/api/v1/content/{content['id']}/video-status", headers=auth_headers
        )

        assert refreshed.status_code == 200
        assert refreshed.json()["video_status"] == "completed"
        assert refreshed.json()["video_url"].startswith("https://stub.local/videos/")

    def test_invalid_platform(self, test_client: TestClient, auth_headers) -> None:
        response = test_client.post(
            "/api/v1/generate", json={"platform": "myspace"}, headers=auth_headers
        )

        assert response.status_code == 422


class TestContent:
    def test_review_and_publish_flow(self, test_client: TestClient, auth_headers) -> None:
        item = create_content(
            test_client,
            auth_headers,
            platform="instagram_reel",
            script="Reel script",
            video_url="https://cdn/v.mp4",
        )
        base = f"/api/v1/content/{item['id']}"

        assert test_client.post(f"{base}/submit", headers=auth_headers).json()["status"] == (
            "pending_review"
        )
        assert test_client.post(f"{base}/approve", headers=auth_headers).json()["status"] == (
            "approved"
        )

        response = test_client.post(f"{base}/publish", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["result"]["success"] is True
        assert data["result"]["external_url"] == f"https://instagram.com/post/{item['id']}"
        assert data["content"]["status"] == "published"
        assert data["content"]["published_at"] is not None

    def test_publish_draft_is_rejected(self, test_client: TestClient, auth_headers) -> None:
        item = create_content(test_client, auth_headers, script="Draft")

        response = test_client.post(f"/api/v1/content/{item['id']}/publish", headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_STATUS"
        after = test_client.get(f"/api/v1/content/{item['id']}", headers=auth_headers).json()
        assert after["status"] == "draft"

    def test_approve_with_time_schedules(self, test_client: TestClient, auth_headers) -> None:
        item = create_content(test_client, auth_headers, script="Later")

        response = test_client.post(
            f"/api/v1/content/{item['id']}/approve",
            json={"scheduled_for": iso(timedelta(hours=2))},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["status"] == "scheduled"
        assert response.json()["scheduled_for"] is not None

    def test_schedule_in_past(self, test_client: TestClient, auth_headers) -> None:
        item = create_content(test_client, auth_headers, script="Oops")

        response = test_client.put(
            f"/api/v1/content/{item['id']}/schedule",
            json={"scheduled_for": iso(-timedelta(minutes=1))},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_SCHEDULE"

    def test_reject_with_reason(self, test_client: TestClient, auth_headers) -> None:
        item = create_content(test_client, auth_headers, script="Meh")

        response = test_client.post(
            f"/api/v1/content/{item['id']}/reject",
            json={"reason": "off brand"},
            headers=auth_headers,
        )

        assert response.json()["status"] == "rejected"

    def test_list_filters(self, test_client: TestClient, auth_headers) -> None:
        create_content(test_client, auth_headers, script="one")
        create_content(test_client, auth_headers, script="two")
        create_content(test_client, auth_headers, platform="tiktok", script="three")

        response = test_client.get(
            "/api/v1/content", params={"type": "text", "limit": 1}, headers=auth_headers
        )

        data = response.json()
        assert data["pagination"] == {"total": 2, "page": 1, "limit": 1}
        assert len(data["items"]) == 1

        drafts = test_client.get(
            "/api/v1/content", params={"status": "draft"}, headers=auth_headers
        ).json()
        assert drafts["pagination"]["total"] == 3

    def test_edit_and_delete(self, test_client: TestClient, auth_headers) -> None:
        item = create_content(test_client, auth_headers, script="v1")
        url = f"/api/v1/content/{item['id']}"

        patched = test_client.patch(url, json={"script": "v2"}, headers=auth_headers)
        assert patched.json()["script"] == "v2"

        assert test_client.delete(url, headers=auth_headers).json() == {"success": True}
        assert test_client.get(url, headers=auth_headers).status_code == 404

    def test_other_users_content_is_hidden(self, test_client: TestClient, auth_headers) -> None:
        item = create_content(test_client, auth_headers, script="mine")

        response = test_client.get(
            f"/api/v1/content/{item['id']}", headers={"X-User-Id": "intruder"}
        )

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"


class TestPersona:
    def test_put_and_get(self, test_client: TestClient, auth_headers) -> None:
        assert test_client.get("/api/v1/persona", headers=auth_headers).status_code == 404

        body = {"bio": "Chef", "topics": ["bread"], "catchphrases": ["Knead it"]}
        response = test_client.put("/api/v1/persona", json=body, headers=auth_headers)
        assert response.status_code == 200

        data = test_client.get("/api/v1/persona", headers=auth_headers).json()
        assert data["bio"] == "Chef"
        assert data["topics"] == ["bread"]

    def test_analyze_and_save(self, test_client: TestClient, auth_headers) -> None:
        response = test_client.post(
            "/api/v1/persona/analyze",
            json={"samples": ["Let's go! Another 5am run."], "save": True},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["target_audience"] == "Young professionals"
        saved = test_client.get("/api/v1/persona", headers=auth_headers).json()
        assert saved["catchphrases"] == response.json()["catchphrases"]


class TestVoice:
    def test_clone_sets_avatar_voice_and_tts_uses_it(
        self, test_client: TestClient, auth_headers
    ) -> None:
        test_client.post("/api/v1/persona/avatars", json={"name": "Main"}, headers=auth_headers)

        cloned = test_client.post(
            "/api/v1/voice/clone",
            data={"name": "My voice"},
            files=[("files", ("sample.mp3", b"audio-sample", "audio/mpeg"))],
            headers=auth_headers,
        )

        assert cloned.status_code == 200
        voice_id = cloned.json()["voice_id"]
        assert voice_id.startswith("stub_voice_")

        avatars = test_client.get("/api/v1/persona/avatars", headers=auth_headers).json()
        assert avatars[0]["voice_id"] == voice_id
        assert avatars[0]["voice_status"] == "ready"

        tts = test_client.post("/api/v1/voice/tts", json={"text": "Hallo"}, headers=auth_headers)
        assert tts.status_code == 200
        assert tts.headers["content-type"] == "audio/mpeg"
        assert tts.headers["X-RateLimit-Limit"] == "50"
        assert tts.content.startswith(b"STUB_AUDIO_DATA_")

    def test_clone_from_video_extracts_audio(self, test_client: TestClient, auth_headers) -> None:
        with patch(
            "persona_studio.api.routes.voice.extract_audio", return_value=b"extracted"
        ) as mock_extract:
            response = test_client.post(
                "/api/v1/voice/clone",
                data={"name": "From video"},
                files=[("files", ("clip.mp4", b"video-bytes", "video/mp4"))],
                headers=auth_headers,
            )

        assert response.status_code == 200
        mock_extract.assert_called_once_with(b"video-bytes")
        assert response.json()["avatar_id"] is None

    def test_tts_without_voice(self, test_client: TestClient, auth_headers) -> None:
        response = test_client.post("/api/v1/voice/tts", json={"text": "Hi"}, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_INPUT"

    def test_list_voices(self, test_client: TestClient, auth_headers) -> None:
        response = test_client.get("/api/v1/voice", headers=auth_headers)

        assert response.json()[0]["voice_id"] == "stub_narrator"


class TestVideo:
    def test_generate_and_status(self, test_client: TestClient, auth_headers) -> None:
        response = test_client.post(
            "/api/v1/video/generate", json={"prompt": "City at night"}, headers=auth_headers
        )

        assert response.status_code == 202
        task_id = response.json()["task_id"]

        status = test_client.get(
            "/api/v1/video/status", params={"task_id": task_id}, headers=auth_headers
        ).json()
        assert status["status"] == "completed"
        assert status["video_url"].endswith(".mp4")

    def test_lip_sync(self, test_client: TestClient, auth_headers) -> None:
        response = test_client.post(
            "/api/v1/video/lip-sync",
            json={"video_url": "https://cdn/v.mp4", "audio_url": "https://cdn/a.mp3"},
            headers=auth_headers,
        )

        assert response.status_code == 202
        assert response.json()["task_id"]


class TestStats:
    def test_content_stats(self, test_client: TestClient, auth_headers) -> None:
        create_content(test_client, auth_headers, script="One")
        item = create_content(test_client, auth_headers, script="Two")
        test_client.post(f"/api/v1/content/{item['id']}/submit", headers=auth_headers)

        response = test_client.get("/api/v1/stats/content", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {
            "this_week": 2,
            "pending_review": 1,
            "published": 0,
            "scheduled": 0,
        }


@pytest.mark.parametrize(
    "path", ["/api/v1/persona", "/api/v1/voice", "/api/v1/content", "/api/v1/stats/content"]
)
def test_every_router_requires_identity(test_client: TestClient, path: str) -> None:
    assert test_client.get(path).status_code == 401
