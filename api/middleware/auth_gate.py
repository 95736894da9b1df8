"""
Session Gate Middleware

Every request needs a valid session cookie except the public paths
(login page, login API, static assets, health check).

Unauthenticated API calls get a 401 JSON body. Unauthenticated page loads
are redirected to the login page with the original path in ?from=.
"""

import logging
from urllib.parse import urlencode

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, RedirectResponse

import config
from api.dependencies import get_token_codec

logger = logging.getLogger(__name__)


def is_public_path(path: str) -> bool:
    """Whether a path is reachable without a session."""
    for prefix in config.PUBLIC_PATHS:
        if path == prefix or path.startswith(prefix.rstrip("/") + "/"):
            return True
    return False


def is_api_path(path: str) -> bool:
    return path == "/api" or path.startswith("/api/")


class SessionGateMiddleware(BaseHTTPMiddleware):
    """
    Middleware that requires a signed session cookie.

    Configured via config.py:
    - PUBLIC_PATHS: path prefixes that skip the check
    - SESSION_COOKIE_NAME: cookie carrying the token
    - LOGIN_PATH: where page requests are sent
    """

    async def dispatch(self, request: Request, call_next):
        """Process request and check the session token."""
        path = request.url.path

        if is_public_path(path):
            return await call_next(request)

        token = request.cookies.get(config.SESSION_COOKIE_NAME)
        if token and get_token_codec().verify(token):
            return await call_next(request)

        if token:
            logger.warning(f"[SECURITY] Rejected invalid session token for {path}")

        if is_api_path(path):
            return JSONResponse(
                status_code=401,
                content={"success": False, "error": "Not authenticated"}
            )

        login_url = f"{config.LOGIN_PATH}?{urlencode({'from': path})}"
        return RedirectResponse(url=login_url, status_code=307)
