"""
Auth API Routes

Shared-password login, session status and logout.
"""

from asyncio import sleep
import logging
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict

import config
from api.dependencies import get_client_ip, get_login_limiter, get_token_codec
from errors import AuthError, ConfigurationError, RateLimitError, ValidationError
from services.rate_limiter import RateLimiter
from services.session_service import SessionTokenCodec, passwords_match


logger = logging.getLogger(__name__)
router = APIRouter()


class LoginRequest(BaseModel):
    """Request body for login."""
    model_config = ConfigDict(extra="forbid")

    password: str


def set_session_cookie(response: JSONResponse, token: str) -> None:
    response.set_cookie(
        key=config.SESSION_COOKIE_NAME,
        value=token,
        max_age=config.SESSION_MAX_AGE,
        httponly=True,
        secure=config.ENVIRONMENT == "production",
        samesite="strict",
        path="/",
    )


@router.get("")
async def session_status(request: Request, codec: SessionTokenCodec = Depends(get_token_codec)):
    """Whether the caller holds a valid session."""
    token = request.cookies.get(config.SESSION_COOKIE_NAME)
    return {"authenticated": codec.verify(token)}


@router.post("")
async def login(
    request: Request,
    codec: SessionTokenCodec = Depends(get_token_codec),
    limiter: RateLimiter = Depends(get_login_limiter),
):
    """
    Exchange the shared password for a session cookie.

    Every attempt is counted per client before the password is looked at.
    Failed attempts are answered after an exponential delay. Once the
    window is exhausted every attempt is held for the lockout delay and
    rejected with 429, right password or not.
    """
    if not codec.configured:
        logger.error("APP_PASSWORD is not set, login disabled")
        raise ConfigurationError("Authentication not configured")

    client_ip = get_client_ip(request)

    try:
        body = LoginRequest.model_validate(await request.json())
    except ValueError:
        raise ValidationError("Invalid request")

    # No await between reserving the attempt and comparing the password
    if not limiter.check_and_increment(client_ip):
        logger.warning(f"[SECURITY] Login attempt from locked-out client {client_ip}")
        if limiter.policy.lockout_delay > 0:
            await sleep(limiter.policy.lockout_delay)
        raise RateLimitError("Too many attempts. Try again later.")

    if passwords_match(body.password, config.APP_PASSWORD):
        limiter.reset(client_ip)
        response = JSONResponse(content={"success": True})
        set_session_cookie(response, codec.mint())
        logger.info(f"Login succeeded for {client_ip}")
        return response

    delay = limiter.delay_for(client_ip)
    logger.warning(
        f"[SECURITY] Failed login from {client_ip} "
        f"(attempt {limiter.attempts(client_ip)}/{limiter.policy.max_count}, delay {delay:.1f}s)"
    )
    if delay > 0:
        await sleep(delay)

    raise AuthError("Invalid credentials")


@router.delete("")
async def logout():
    """Clear the session cookie."""
    response = JSONResponse(content={"success": True})
    response.delete_cookie(
        key=config.SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=config.ENVIRONMENT == "production",
        samesite="strict",
    )
    return response
