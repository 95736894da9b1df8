"""
YouTube Viral Analyzer - Error Taxonomy
=======================================
Application errors carry an HTTP status and a message that is safe to show
to the browser. Raw upstream errors are logged server-side and mapped here.
"""

import json
import logging
from typing import Optional

import openai

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors that map directly to an HTTP response."""

    status_code = 500
    default_message = "Something went wrong"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ConfigurationError(AppError):
    """A required secret or credential is missing."""
    status_code = 500
    default_message = "Service not configured"


class ValidationError(AppError):
    """Malformed or missing request fields."""
    status_code = 400
    default_message = "Invalid request"


class AuthError(AppError):
    """Missing/invalid session or wrong password."""
    status_code = 401
    default_message = "Not authenticated"


class RateLimitError(AppError):
    status_code = 429
    default_message = "Too many requests. Wait a minute and try again."


class UpstreamError(AppError):
    """An AI or CDN collaborator failed."""
    status_code = 500
    default_message = "AI service error. Try again."


# =============================================================================
# UPSTREAM SANITIZATION
# =============================================================================

CONTENT_POLICY_MESSAGE = "Image generation was blocked by content policy. Try a different concept."


def is_content_policy_error(error: Exception) -> bool:
    """Whether an OpenAI error is a content-policy rejection."""
    if not isinstance(error, openai.APIStatusError) or error.status_code != 400:
        return False
    code = getattr(error, "code", None) or ""
    message = getattr(error, "message", None) or str(error)
    return "content_policy" in code or "content_policy" in message


def sanitize_upstream_error(error: Exception, fallback: str = "AI service error. Try again.") -> UpstreamError:
    """
    Convert a collaborator exception into a client-safe UpstreamError.

    Never passes the raw upstream message through: it can contain key
    fragments or internal URLs.
    """
    if isinstance(error, UpstreamError):
        return error

    if isinstance(error, openai.APIStatusError):
        status = error.status_code
        if is_content_policy_error(error):
            return UpstreamError(CONTENT_POLICY_MESSAGE, status_code=400)
        if status == 401:
            return UpstreamError("AI service authentication failed. Contact admin.")
        if status == 429:
            return UpstreamError("AI service rate limit exceeded. Try again in a minute.", status_code=429)
        if status is not None and status >= 500:
            return UpstreamError("AI service temporarily unavailable. Try again.")
        return UpstreamError(fallback)

    if isinstance(error, (openai.APIConnectionError, openai.APITimeoutError)):
        return UpstreamError("AI service temporarily unavailable. Try again.")

    if isinstance(error, json.JSONDecodeError):
        return UpstreamError("Failed to parse AI response. Try again.")

    return UpstreamError(fallback)
