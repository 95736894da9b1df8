"""
FastAPI Dependencies

Shared dependencies for route handlers: session codec, rate limiters,
client identity and the external service clients.
"""

import logging
from pathlib import Path
import sys

from fastapi import Request

# Add project root to path
ROOT_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT_DIR))

import config
from errors import ConfigurationError, RateLimitError
from services.cdn_service import BunnyCDNClient
from services.metadata_service import MetadataService
from services.rate_limiter import RateLimiter, RateLimitPolicy
from services.session_service import SessionTokenCodec
from services.thumbnail_service import ThumbnailService


logger = logging.getLogger(__name__)


# ============================================================================
# SESSION
# ============================================================================

def get_token_codec() -> SessionTokenCodec:
    """Codec for the current password. Read per call so rotation applies at once."""
    return SessionTokenCodec(config.APP_PASSWORD)


# ============================================================================
# CLIENT IDENTITY
# ============================================================================

def get_client_ip(request: Request) -> str:
    """
    Identify the caller for rate limiting.

    Order: the configured trusted proxy header, then the first
    X-Forwarded-For hop (only if explicitly trusted), then the socket peer.
    """
    if config.TRUSTED_PROXY_HEADER:
        value = request.headers.get(config.TRUSTED_PROXY_HEADER, "").strip()
        if value:
            return value

    if config.TRUST_FORWARDED_FOR:
        forwarded = request.headers.get("x-forwarded-for", "")
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop

    if request.client and request.client.host:
        return request.client.host

    return "unknown"


# ============================================================================
# RATE LIMITERS (process-wide, empty at start)
# ============================================================================

login_limiter = RateLimiter(
    RateLimitPolicy(
        window=config.LOGIN_RATE_WINDOW,
        max_count=config.LOGIN_RATE_MAX,
        backoff_base=config.LOGIN_BACKOFF_BASE,
        backoff_cap=config.LOGIN_BACKOFF_CAP,
        lockout_delay=config.LOGIN_LOCKOUT_DELAY,
    ),
    sweep_interval=config.RATE_LIMIT_SWEEP_INTERVAL,
    name="login",
)

analyze_limiter = RateLimiter(
    RateLimitPolicy(window=config.ANALYZE_RATE_WINDOW, max_count=config.ANALYZE_RATE_MAX),
    sweep_interval=config.RATE_LIMIT_SWEEP_INTERVAL,
    name="analyze",
)

style_limiter = RateLimiter(
    RateLimitPolicy(window=config.STYLE_RATE_WINDOW, max_count=config.STYLE_RATE_MAX),
    sweep_interval=config.RATE_LIMIT_SWEEP_INTERVAL,
    name="analyze-style",
)

thumbnail_limiter = RateLimiter(
    RateLimitPolicy(window=config.THUMBNAIL_RATE_WINDOW, max_count=config.THUMBNAIL_RATE_MAX),
    sweep_interval=config.RATE_LIMIT_SWEEP_INTERVAL,
    name="generate-thumbnail",
)


def get_login_limiter() -> RateLimiter:
    return login_limiter


def get_analyze_limiter() -> RateLimiter:
    return analyze_limiter


def get_style_limiter() -> RateLimiter:
    return style_limiter


def get_thumbnail_limiter() -> RateLimiter:
    return thumbnail_limiter


def enforce_rate_limit(limiter: RateLimiter, client_ip: str, message: str) -> None:
    """Count the call, raise RateLimitError once the window is full."""
    if not limiter.check_and_increment(client_ip):
        logger.warning(f"[SECURITY] Rate limit '{limiter.name}' hit by {client_ip}")
        raise RateLimitError(message)


# ============================================================================
# EXTERNAL SERVICES
# ============================================================================

def get_openai_client():
    """OpenAI client for the configured key."""
    if not config.OPENAI_API_KEY:
        logger.error("OPENAI_API_KEY is not set")
        raise ConfigurationError("AI service not configured")

    from openai import OpenAI
    return OpenAI(api_key=config.OPENAI_API_KEY)


def get_cdn_client() -> BunnyCDNClient:
    return BunnyCDNClient.from_config()


def get_metadata_service() -> MetadataService:
    return MetadataService(get_openai_client())


def get_thumbnail_service() -> ThumbnailService:
    return ThumbnailService(get_openai_client(), get_cdn_client())
