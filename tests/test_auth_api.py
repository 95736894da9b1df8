"""
Unit Tests for Auth API Endpoints

Tests for the login/logout/status endpoints in api/routes/auth.py
Login delays are mocked; the rate-limit window is driven by a fake clock.
"""

import json
import asyncio
import pytest
from unittest.mock import patch

from services.session_service import SessionTokenCodec, passwords_match
from tests.conftest import TEST_PASSWORD


def session_cookie_header(response) -> str:
    for header in response.headers.get_list("set-cookie"):
        if header.startswith("yva_session="):
            return header
    raise AssertionError("no session cookie set")


def cookie_value(response) -> str:
    return session_cookie_header(response).split(";")[0].split("=", 1)[1]


async def post_login_slow_body(app, password: str, body_delay: float = 0.01) -> int:
    """
    Drive POST /api/auth at the ASGI level with a body that arrives late.

    Returns:
        int: response status code
    """
    body = json.dumps({"password": password}).encode()
    scope = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": "POST",
        "scheme": "http",
        "path": "/api/auth",
        "raw_path": b"/api/auth",
        "root_path": "",
        "query_string": b"",
        "headers": [
            (b"host", b"test"),
            (b"content-type", b"application/json"),
            (b"content-length", str(len(body)).encode()),
        ],
        "client": ("127.0.0.1", 50000),
        "server": ("test", 80),
    }
    body_sent = False
    response_complete = asyncio.Event()
    status = {}

    async def receive():
        nonlocal body_sent
        if body_sent:
            await response_complete.wait()
            return {"type": "http.disconnect"}
        await asyncio.sleep(body_delay)
        body_sent = True
        return {"type": "http.request", "body": body, "more_body": False}

    async def send(message):
        if message["type"] == "http.response.start":
            status["code"] = message["status"]
        elif message["type"] == "http.response.body" and not message.get("more_body", False):
            response_complete.set()

    await app(scope, receive, send)
    return status["code"]


# =============================================================================
# POST /api/auth TESTS
# =============================================================================

class TestLogin:
    """Tests for POST /api/auth"""

    async def test_correct_password_sets_session(self, client):
        """Should return success and a valid session cookie."""
        response = await client.post("/api/auth", json={"password": TEST_PASSWORD})

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert SessionTokenCodec(TEST_PASSWORD).verify(cookie_value(response))

    async def test_cookie_attributes(self, client):
        """Should set an http-only, same-site strict, 7-day cookie on /."""
        response = await client.post("/api/auth", json={"password": TEST_PASSWORD})

        header = session_cookie_header(response).lower()
        assert "httponly" in header
        assert "samesite=strict" in header
        assert "max-age=604800" in header
        assert "path=/" in header
        assert "secure" not in header

    async def test_cookie_secure_in_production(self, client, monkeypatch):
        """Should mark the cookie Secure in production."""
        import config
        monkeypatch.setattr(config, "ENVIRONMENT", "production")

        response = await client.post("/api/auth", json={"password": TEST_PASSWORD})

        assert "secure" in session_cookie_header(response).lower()

    async def test_wrong_password(self, client, sleep_mock):
        """Should return 401 after the first backoff delay."""
        response = await client.post("/api/auth", json={"password": "nope"})

        assert response.status_code == 401
        assert response.json() == {"success": False, "error": "Invalid credentials"}
        assert "set-cookie" not in response.headers
        sleep_mock.assert_awaited_once_with(1.0)

    @pytest.mark.parametrize("kwargs", [
        {"content": b"not json", "headers": {"content-type": "application/json"}},
        {"json": {}},
        {"json": {"password": 12345}},
        {"json": {"password": TEST_PASSWORD, "extra": True}},
        {"json": ["password"]},
    ])
    async def test_malformed_body(self, client, kwargs):
        """Should return 400 for bodies that are not {password: string}."""
        response = await client.post("/api/auth", **kwargs)

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Invalid request"}

    async def test_not_configured(self, client, monkeypatch):
        """Should return 500 when no password is configured."""
        import config
        monkeypatch.setattr(config, "APP_PASSWORD", "")

        response = await client.post("/api/auth", json={"password": ""})

        assert response.status_code == 500
        assert response.json()["success"] is False


# =============================================================================
# LOGIN RATE LIMIT TESTS
# =============================================================================

class TestLoginRateLimit:
    """Brute-force protection on POST /api/auth"""

    async def test_backoff_grows_then_locks_out(self, client, sleep_mock):
        """Should delay 1s, 2s, 4s, then hold 4s and answer 429."""
        statuses = []
        for _ in range(3):
            response = await client.post("/api/auth", json={"password": "wrong"})
            statuses.append(response.status_code)

        locked = await client.post("/api/auth", json={"password": "wrong"})

        assert statuses == [401, 401, 401]
        assert locked.status_code == 429
        assert locked.json() == {"success": False, "error": "Too many attempts. Try again later."}
        assert [call.args[0] for call in sleep_mock.await_args_list] == [1.0, 2.0, 4.0, 4.0]

    async def test_lockout_applies_to_correct_password(self, client):
        """Should reject even the right password while locked out."""
        for _ in range(3):
            await client.post("/api/auth", json={"password": "wrong"})

        response = await client.post("/api/auth", json={"password": TEST_PASSWORD})

        assert response.status_code == 429
        assert "set-cookie" not in response.headers

    async def test_lockout_ends_with_window(self, client, fake_clock):
        """Should accept logins again once the hour has passed."""
        for _ in range(3):
            await client.post("/api/auth", json={"password": "wrong"})

        fake_clock.advance(3601)
        response = await client.post("/api/auth", json={"password": TEST_PASSWORD})

        assert response.status_code == 200

    async def test_concurrent_attempts_cannot_outrun_the_limit(self, app, client, limiters):
        """Should compare at most max_count passwords even when bodies arrive together."""
        with patch("api.routes.auth.passwords_match", side_effect=passwords_match) as compare:
            statuses = await asyncio.gather(*(post_login_slow_body(app, "wrong") for _ in range(20)))

        response = await client.post("/api/auth", json={"password": TEST_PASSWORD})

        assert compare.call_count == 3
        assert sorted(statuses) == [401] * 3 + [429] * 17
        assert response.status_code == 429
        assert limiters["login"].attempts("127.0.0.1") == 3

    async def test_success_clears_failures(self, client, limiters):
        """Should reset the client's record after a successful login."""
        for _ in range(2):
            await client.post("/api/auth", json={"password": "wrong"})

        await client.post("/api/auth", json={"password": TEST_PASSWORD})

        assert limiters["login"].attempts("127.0.0.1") == 0

    async def test_clients_are_limited_separately(self, client, monkeypatch):
        """Should key the limit on the trusted proxy header once one is configured."""
        import config
        monkeypatch.setattr(config, "TRUSTED_PROXY_HEADER", "x-real-ip")

        for _ in range(3):
            await client.post("/api/auth", json={"password": "wrong"}, headers={"x-real-ip": "203.0.113.1"})

        response = await client.post(
            "/api/auth",
            json={"password": TEST_PASSWORD},
            headers={"x-real-ip": "203.0.113.2"},
        )

        assert response.status_code == 200

    async def test_real_ip_ignored_by_default(self, client, limiters):
        """Should not let a client-set X-Real-IP dodge the lockout without a configured proxy."""
        statuses = []
        for i in range(5):
            response = await client.post(
                "/api/auth",
                json={"password": "wrong"},
                headers={"x-real-ip": f"10.0.0.{i}"},
            )
            statuses.append(response.status_code)

        assert statuses == [401, 401, 401, 429, 429]
        assert limiters["login"].attempts("10.0.0.0") == 0
        assert limiters["login"].attempts("127.0.0.1") == 3

    async def test_forwarded_for_ignored_by_default(self, client, limiters):
        """Should not let a spoofed X-Forwarded-For pick the rate-limit key."""
        await client.post("/api/auth", json={"password": "wrong"}, headers={"x-forwarded-for": "198.51.100.7"})

        assert limiters["login"].attempts("198.51.100.7") == 0
        assert limiters["login"].attempts("127.0.0.1") == 1

    async def test_forwarded_for_when_trusted(self, client, limiters, monkeypatch):
        """Should use the first X-Forwarded-For hop when explicitly trusted."""
        import config
        monkeypatch.setattr(config, "TRUSTED_PROXY_HEADER", "")
        monkeypatch.setattr(config, "TRUST_FORWARDED_FOR", True)

        await client.post(
            "/api/auth",
            json={"password": "wrong"},
            headers={"x-forwarded-for": "198.51.100.7, 10.0.0.1"},
        )

        assert limiters["login"].attempts("198.51.100.7") == 1


# =============================================================================
# GET / DELETE /api/auth TESTS
# =============================================================================

class TestSessionStatus:
    """Tests for GET /api/auth"""

    async def test_anonymous(self, client):
        response = await client.get("/api/auth")

        assert response.status_code == 200
        assert response.json() == {"authenticated": False}

    async def test_authenticated(self, auth_client):
        response = await auth_client.get("/api/auth")

        assert response.json() == {"authenticated": True}

    async def test_password_rotation_invalidates_session(self, auth_client, monkeypatch):
        """Should reject existing cookies after the password changes."""
        import config
        monkeypatch.setattr(config, "APP_PASSWORD", "a-brand-new-password")

        status = await auth_client.get("/api/auth")
        protected = await auth_client.post("/api/analyze", json={})

        assert status.json() == {"authenticated": False}
        assert protected.status_code == 401


class TestLogout:
    """Tests for DELETE /api/auth"""

    async def test_clears_cookie(self, auth_client):
        """Should expire the session cookie."""
        response = await auth_client.delete("/api/auth")

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert "max-age=0" in session_cookie_header(response).lower()
