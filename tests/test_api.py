"""
Tests for the HTTP gateway.
"""
import pytest

from weaveit.keys import OutputType


class TestGenerate:

    def test_generate_accepts_and_submits(self, test_client, mock_orchestrator):
        response = test_client.post(
            "/api/generate",
            json={"script": "print(1)", "title": "Demo", "outputType": "both"},
        )

        assert response.status_code == 202
        body = response.json()
        assert body["contentId"].startswith("both_")
        assert body["title"] == "Demo"
        assert body["outputType"] == "both"
        assert body["status"] == "processing"

        job = mock_orchestrator.submit.call_args.args[0]
        assert job.content_id == body["contentId"]
        assert job.output_type is OutputType.BOTH
        assert job.script == "print(1)"

    def test_generate_keeps_supplied_id(self, test_client):
        response = test_client.post(
            "/api/generate",
            json={"script": "x", "outputType": "audio", "contentId": "audio_custom1"},
        )
        assert response.status_code == 202
        assert response.json()["contentId"] == "audio_custom1"

    def test_generate_defaults_to_video(self, test_client):
        response = test_client.post("/api/generate", json={"script": "x"})
        assert response.json()["outputType"] == "video"

    def test_mismatched_id_prefix_rejected(self, test_client, mock_orchestrator):
        response = test_client.post(
            "/api/generate",
            json={"script": "x", "outputType": "audio", "contentId": "video_1"},
        )
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"
        mock_orchestrator.submit.assert_not_called()

    @pytest.mark.parametrize(
        "payload",
        [
            {"script": ""},
            {"script": "   "},
            {"title": "no script"},
            {"script": "x", "outputType": "gif"},
            {"script": "x", "contentId": "../../etc"},
        ],
    )
    def test_invalid_requests_rejected(self, test_client, mock_orchestrator, payload):
        response = test_client.post("/api/generate", json=payload)
        assert response.status_code == 400
        mock_orchestrator.submit.assert_not_called()


class TestStatus:

    def test_processing(self, test_client):
        response = test_client.get("/api/status/video_abc")
        assert response.status_code == 200
        assert response.json() == {
            "contentId": "video_abc",
            "outputType": "video",
            "status": "processing",
            "ready": False,
        }

    def test_completed_audio(self, test_client, store):
        store.write("audio_abc", "mp3", b"ID3")
        body = test_client.get("/api/status/audio_abc").json()
        assert body["status"] == "completed"
        assert body["ready"] is True
        assert body["contentUrl"] == "/api/content/audio_abc.mp3"

    def test_both_reports_audio_url(self, test_client, store):
        store.write("both_abc", "mp3", b"ID3")
        store.write("both_abc", "mp4", b"mp4")
        body = test_client.get("/api/status/both_abc").json()
        assert body["contentUrl"] == "/api/content/both_abc.mp4"
        assert body["audioUrl"] == "/api/content/both_abc.mp3"

    def test_failed(self, test_client, store):
        store.mark_failed("video_abc", RuntimeError("TTS down"), stage="synthesizing")
        body = test_client.get("/api/status/video_abc").json()
        assert body["status"] == "failed"
        assert body["error"] == "TTS down"

    def test_malformed_id(self, test_client):
        response = test_client.get("/api/status/bad.id")
        assert response.status_code == 400


class TestContent:

    def test_serves_audio(self, test_client, store):
        store.write("audio_abc", "mp3", b"ID3-audio")
        response = test_client.get("/api/content/audio_abc.mp3")
        assert response.status_code == 200
        assert response.content == b"ID3-audio"
        assert response.headers["content-type"] == "audio/mpeg"

    def test_serves_video(self, test_client, store):
        store.write("video_abc", "mp4", b"mp4-bytes")
        response = test_client.get("/api/content/video_abc.mp4")
        assert response.status_code == 200
        assert response.headers["content-type"] == "video/mp4"

    def test_head_probe(self, test_client, store):
        assert test_client.head("/api/content/video_abc.mp4").status_code == 404
        store.write("video_abc", "mp4", b"mp4-bytes")
        response = test_client.head("/api/content/video_abc.mp4")
        assert response.status_code == 200
        assert response.headers["content-length"] == str(len(b"mp4-bytes"))

    def test_missing_artifact_is_404(self, test_client):
        response = test_client.get("/api/content/video_nope.mp4")
        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    def test_failure_marker_is_not_served(self, test_client, store):
        store.mark_failed("video_abc", RuntimeError("x"))
        assert test_client.get("/api/content/video_abc.failed").status_code == 404

    def test_staging_file_is_not_served(self, test_client, store):
        (store.root / ".video_abc.mp4.tmp1.mp4").write_bytes(b"partial")
        assert test_client.get("/api/content/video_abc.mp4").status_code == 404


class TestEstimate:

    def test_estimate(self, test_client):
        response = test_client.post("/api/estimate", json={"script": "word " * 151})
        assert response.status_code == 200
        assert response.json() == {"words": 151, "estimatedMinutes": 2, "quality": "Excellent"}

    def test_estimate_empty(self, test_client):
        body = test_client.post("/api/estimate", json={"script": ""}).json()
        assert body == {"words": 0, "estimatedMinutes": 0, "quality": "Too short"}


class TestUnhandledErrors:

    def test_unexpected_error_is_500_in_standard_shape(self, test_client, mock_orchestrator):
        from fastapi.testclient import TestClient

        mock_orchestrator.submit.side_effect = RuntimeError("event loop gone")
        client = TestClient(test_client.app, raise_server_exceptions=False)

        response = client.post("/api/generate", json={"script": "print(1)"})

        assert response.status_code == 500
        assert response.json() == {
            "error": "Internal server error",
            "detail": "event loop gone",
            "code": "INTERNAL_ERROR",
            "status_code": 500,
        }


class TestHealth:

    def test_health(self, test_client):
        response = test_client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] in ("healthy", "degraded")
        assert body["service"] == "weaveit-api"

    def test_health_config_hides_keys(self, test_client, monkeypatch):
        from weaveit.config import config

        monkeypatch.setattr(config.ai, "openai_api_key", "sk-secret-value")
        response = test_client.get("/health/config")
        assert response.status_code == 200
        assert "sk-secret-value" not in response.text
        assert response.json()["apis"]["openai"] == "configured"
