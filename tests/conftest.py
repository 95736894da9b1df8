"""
Test Configuration and Fixtures

Shared fixtures for all tests in the project.
"""

import pytest
from pathlib import Path
from typing import AsyncGenerator
from unittest.mock import patch, AsyncMock
from httpx import AsyncClient, ASGITransport

from services.rate_limiter import RateLimiter, RateLimitPolicy
from services.session_service import SessionTokenCodec

# Project paths
ROOT_DIR = Path(__file__).parent.parent

TEST_PASSWORD = "correct-horse-battery-staple"


# =============================================================================
# CLOCK AND LIMITER FIXTURES
# =============================================================================

class FakeClock:
    """Manually advanced replacement for time.monotonic."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def limiters(fake_clock: FakeClock) -> dict:
    """
    Fresh limiters with the production policies, driven by the fake clock.

    Returns:
        dict: limiter per name (login, analyze, style, thumbnail)
    """
    return {
        "login": RateLimiter(
            RateLimitPolicy(window=3600, max_count=3, backoff_base=1.0, backoff_cap=8.0, lockout_delay=4.0),
            clock=fake_clock,
            name="login",
        ),
        "analyze": RateLimiter(RateLimitPolicy(window=60, max_count=10), clock=fake_clock, name="analyze"),
        "style": RateLimiter(RateLimitPolicy(window=60, max_count=5), clock=fake_clock, name="analyze-style"),
        "thumbnail": RateLimiter(RateLimitPolicy(window=60, max_count=10), clock=fake_clock, name="generate-thumbnail"),
    }


@pytest.fixture
def sleep_mock():
    """Replace the login delay so tests do not wait; records requested delays."""
    with patch("api.routes.auth.sleep", new_callable=AsyncMock) as mocked:
        yield mocked


# =============================================================================
# CONFIG FIXTURES
# =============================================================================

@pytest.fixture
def configured(monkeypatch):
    """Set secrets and client-identity settings to known test values."""
    import config

    monkeypatch.setattr(config, "APP_PASSWORD", TEST_PASSWORD)
    monkeypatch.setattr(config, "OPENAI_API_KEY", "sk-test")
    monkeypatch.setattr(config, "ENVIRONMENT", "development")
    monkeypatch.setattr(config, "TRUSTED_PROXY_HEADER", "")
    monkeypatch.setattr(config, "TRUST_FORWARDED_FOR", False)
    monkeypatch.setattr(config, "BUNNY_STORAGE_ZONE", "")
    monkeypatch.setattr(config, "BUNNY_ACCESS_KEY", "")
    monkeypatch.setattr(config, "BUNNY_CDN_HOST", "")
    return config


@pytest.fixture
def session_token(configured) -> str:
    """A valid session token for TEST_PASSWORD."""
    return SessionTokenCodec(TEST_PASSWORD).mint()


# =============================================================================
# APP AND CLIENT FIXTURES
# =============================================================================

@pytest.fixture
async def app(configured, limiters, sleep_mock):
    """
    FastAPI app with isolated limiters.

    Route tests add their own service overrides on top.
    """
    from api.main import app as fastapi_app
    from api import dependencies

    fastapi_app.dependency_overrides[dependencies.get_login_limiter] = lambda: limiters["login"]
    fastapi_app.dependency_overrides[dependencies.get_analyze_limiter] = lambda: limiters["analyze"]
    fastapi_app.dependency_overrides[dependencies.get_style_limiter] = lambda: limiters["style"]
    fastapi_app.dependency_overrides[dependencies.get_thumbnail_limiter] = lambda: limiters["thumbnail"]

    yield fastapi_app

    fastapi_app.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """
    Anonymous async HTTP client.

    Yields:
        AsyncClient: httpx client configured for the test app
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def auth_client(app, session_token) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client that carries a valid session cookie."""
    import config

    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        cookies={config.SESSION_COOKIE_NAME: session_token},
    ) as ac:
        yield ac


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

def png_bytes(width: int = 64, height: int = 64, color=(255, 0, 0, 255), mode: str = "RGBA") -> bytes:
    """
    Encode a solid-colour PNG.

    Args:
        width: Image width
        height: Image height
        color: Fill colour
        mode: PIL image mode

    Returns:
        bytes: PNG file contents
    """
    import io
    from PIL import Image

    buffer = io.BytesIO()
    Image.new(mode, (width, height), color).save(buffer, "PNG")
    return buffer.getvalue()
