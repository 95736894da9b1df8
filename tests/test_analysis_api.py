"""
Unit Tests for Analysis API Endpoints

Tests for POST /api/analyze and POST /api/analyze-style in api/routes/analysis.py
Uses mocking to isolate the HTTP layer from the service layer.
"""

import pytest
from unittest.mock import MagicMock

from api import dependencies
from errors import UpstreamError


SAMPLE_METADATA = {
    "titles": [{"title": "I Tried Every AI Tool So You Don't Have To", "type": "curiosity"}],
    "description": {"full_text": "Everything I learned..."},
    "thumbnail_concepts": [{"concept": "Shocked face", "text_overlay": "NOT WORTH IT", "emotion": "shock"}],
    "tags": ["ai", "tools"],
    "hashtags": ["#ai"],
    "timeline": [{"timestamp": "0:00", "title": "Intro"}],
}

PNG_DATA_URL = "data:image/png;base64,iVBORw0KGgo="


# =============================================================================
# TEST FIXTURES
# =============================================================================

@pytest.fixture
def mock_metadata_service():
    """Create a mock MetadataService."""
    service = MagicMock()
    service.analyze_transcript = MagicMock(return_value=SAMPLE_METADATA)
    return service


@pytest.fixture
def mock_thumbnail_service():
    """Create a mock ThumbnailService."""
    service = MagicMock()
    service.analyze_style = MagicMock(return_value="Saturated reds, heavy white outlines.")
    return service


@pytest.fixture
async def test_client(app, auth_client, mock_metadata_service, mock_thumbnail_service):
    """Authenticated client with mocked services."""
    app.dependency_overrides[dependencies.get_metadata_service] = lambda: mock_metadata_service
    app.dependency_overrides[dependencies.get_thumbnail_service] = lambda: mock_thumbnail_service
    yield auth_client, mock_metadata_service, mock_thumbnail_service


# =============================================================================
# POST /api/analyze TESTS
# =============================================================================

class TestAnalyzeEndpoint:
    """Tests for POST /api/analyze"""

    async def test_returns_metadata(self, test_client):
        """Should return the service's metadata for the channel."""
        client, mock_service, _ = test_client

        response = await client.post("/api/analyze", json={
            "transcript": "Today we test five AI tools.",
            "channel": "techtony",
            "video_duration": "12:30",
        })

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["channel"] == "techtony"
        assert data["data"] == SAMPLE_METADATA

        args = mock_service.analyze_transcript.call_args.args
        assert args[0] == "Today we test five AI tools."
        assert args[1].id == "techtony"
        assert args[2] is None
        assert args[3] == "12:30"

    @pytest.mark.parametrize("body,message", [
        ({"channel": "techtony"}, "Transcript is required"),
        ({"transcript": "   ", "channel": "techtony"}, "Transcript is required"),
        ({"transcript": 42, "channel": "techtony"}, "Transcript is required"),
        ({"transcript": "hello"}, "Channel is required"),
        ({"transcript": "hello", "channel": "nope"}, "Unknown channel"),
        ({"transcript": "hello", "channel": "techtony", "visual_context": 3}, "Invalid visual context"),
        ({"transcript": "hello", "channel": "techtony", "video_duration": ["1"]}, "Invalid video duration"),
        ({"transcript": "hello", "channel": "techtony", "admin": True}, "Unexpected field: admin"),
    ])
    async def test_validation_errors(self, test_client, body, message):
        """Should return 400 with a readable message."""
        client, mock_service, _ = test_client

        response = await client.post("/api/analyze", json=body)

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": message}
        mock_service.analyze_transcript.assert_not_called()

    async def test_transcript_length_cap(self, test_client):
        """Should accept exactly 100,000 characters and reject one more."""
        client, _, _ = test_client

        at_limit = await client.post("/api/analyze", json={"transcript": "a" * 100_000, "channel": "techtony"})
        over_limit = await client.post("/api/analyze", json={"transcript": "a" * 100_001, "channel": "techtony"})

        assert at_limit.status_code == 200
        assert over_limit.status_code == 400
        assert over_limit.json()["error"] == "Transcript exceeds 100,000 character limit"

    async def test_malformed_json(self, test_client):
        client, _, _ = test_client

        response = await client.post("/api/analyze", content=b"{oops", headers={"content-type": "application/json"})

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Invalid request"}

    async def test_upstream_error_is_sanitized(self, test_client):
        """Should pass the sanitized message and status through."""
        client, mock_service, _ = test_client
        mock_service.analyze_transcript.side_effect = UpstreamError("AI service temporarily unavailable. Try again.")

        response = await client.post("/api/analyze", json={"transcript": "hello", "channel": "techtony"})

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "AI service temporarily unavailable. Try again."}

    async def test_rate_limited_after_ten_calls(self, test_client):
        """Should allow 10 calls per minute per client, then 429."""
        client, _, _ = test_client
        body = {"transcript": "hello", "channel": "techtony"}

        statuses = [(await client.post("/api/analyze", json=body)).status_code for _ in range(11)]

        assert statuses[:10] == [200] * 10
        assert statuses[10] == 429

    async def test_rate_limit_resets_next_window(self, test_client, fake_clock):
        client, _, _ = test_client
        body = {"transcript": "hello", "channel": "techtony"}
        for _ in range(10):
            await client.post("/api/analyze", json=body)

        fake_clock.advance(61)
        response = await client.post("/api/analyze", json=body)

        assert response.status_code == 200

    async def test_rate_limit_checked_before_validation(self, test_client):
        """Should count invalid requests and answer 429 before validating."""
        client, _, _ = test_client
        for _ in range(10):
            await client.post("/api/analyze", json={})

        response = await client.post("/api/analyze", json={})

        assert response.status_code == 429

    async def test_missing_api_key(self, app, auth_client, monkeypatch):
        """Should return 500 when the AI service is not configured."""
        import config
        monkeypatch.setattr(config, "OPENAI_API_KEY", "")
        app.dependency_overrides.pop(dependencies.get_metadata_service, None)

        response = await auth_client.post("/api/analyze", json={"transcript": "hello", "channel": "techtony"})

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "AI service not configured"}


# =============================================================================
# POST /api/analyze-style TESTS
# =============================================================================

class TestAnalyzeStyleEndpoint:
    """Tests for POST /api/analyze-style"""

    async def test_returns_style_guide(self, test_client):
        client, _, mock_service = test_client

        response = await client.post("/api/analyze-style", json={"images": [PNG_DATA_URL, "https://example.com/a.jpg"]})

        assert response.status_code == 200
        assert response.json() == {"success": True, "style_guide": "Saturated reds, heavy white outlines."}
        mock_service.analyze_style.assert_called_once_with([PNG_DATA_URL, "https://example.com/a.jpg"])

    @pytest.mark.parametrize("body", [
        {},
        {"images": []},
        {"images": [PNG_DATA_URL] * 6},
        {"images": PNG_DATA_URL},
    ])
    async def test_image_count(self, test_client, body):
        """Should require between 1 and 5 images."""
        client, _, mock_service = test_client

        response = await client.post("/api/analyze-style", json=body)

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Provide 1-5 sample images"}
        mock_service.analyze_style.assert_not_called()

    async def test_rejects_non_image_sources(self, test_client):
        client, _, _ = test_client

        response = await client.post("/api/analyze-style", json={"images": ["file:///etc/passwd"]})

        assert response.status_code == 400

    async def test_rate_limited_after_five_calls(self, test_client):
        client, _, _ = test_client
        body = {"images": [PNG_DATA_URL]}

        statuses = [(await client.post("/api/analyze-style", json=body)).status_code for _ in range(6)]

        assert statuses == [200] * 5 + [429]
