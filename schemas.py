"""
API Request Schemas
===================
Pydantic models for every JSON endpoint.

Unknown fields are rejected. Validator messages are written for end users:
the API returns them verbatim with status 400.
"""

from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from channels import get_channel
from config import MAX_TRANSCRIPT_LENGTH, MAX_STYLE_IMAGES
from utils import is_http_url


def _require_text(value: Any, message: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(message)
    return value


def _optional_text(value: Any, message: str) -> Optional[str]:
    # Empty values count as absent
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ValueError(message)
    return value


def _known_channel(value: Any) -> str:
    value = _require_text(value, "Channel is required")
    if get_channel(value) is None:
        raise ValueError("Unknown channel")
    return value


def _is_image_source(value: Any) -> bool:
    return isinstance(value, str) and (value.startswith("data:image/") or is_http_url(value))


# =============================================================================
# TRANSCRIPT ANALYSIS
# =============================================================================

class AnalyzeTranscriptRequest(BaseModel):
    """Body of POST /api/analyze."""
    model_config = ConfigDict(extra="forbid")

    transcript: str
    channel: str
    visual_context: Optional[str] = None
    video_duration: Optional[str] = None

    @field_validator("transcript", mode="before")
    @classmethod
    def check_transcript(cls, value):
        value = _require_text(value, "Transcript is required")
        if len(value) > MAX_TRANSCRIPT_LENGTH:
            raise ValueError(f"Transcript exceeds {MAX_TRANSCRIPT_LENGTH:,} character limit")
        return value

    @field_validator("channel", mode="before")
    @classmethod
    def check_channel(cls, value):
        return _known_channel(value)

    @field_validator("visual_context", mode="before")
    @classmethod
    def check_visual_context(cls, value):
        return _optional_text(value, "Invalid visual context")

    @field_validator("video_duration", mode="before")
    @classmethod
    def check_video_duration(cls, value):
        return _optional_text(value, "Invalid video duration")


# =============================================================================
# STYLE ANALYSIS
# =============================================================================

class AnalyzeStyleRequest(BaseModel):
    """Body of POST /api/analyze-style."""
    model_config = ConfigDict(extra="forbid")

    images: list[str] = Field(default=None, validate_default=True)

    @field_validator("images", mode="before")
    @classmethod
    def check_images(cls, value):
        if not isinstance(value, list) or not 1 <= len(value) <= MAX_STYLE_IMAGES:
            raise ValueError(f"Provide 1-{MAX_STYLE_IMAGES} sample images")
        if not all(_is_image_source(image) for image in value):
            raise ValueError("Images must be image data URLs or http(s) URLs")
        return value


# =============================================================================
# THUMBNAIL GENERATION
# =============================================================================

class GenerateThumbnailRequest(BaseModel):
    """Body of POST /api/generate-thumbnail."""
    model_config = ConfigDict(extra="forbid")

    concept: str
    channel: str
    text_overlay: str = ""
    emotion: Optional[str] = None
    style_guide: Optional[str] = None
    headshot_url: Optional[str] = None
    video_title: Optional[str] = None

    @field_validator("concept", mode="before")
    @classmethod
    def check_concept(cls, value):
        return _require_text(value, "Concept is required")

    @field_validator("channel", mode="before")
    @classmethod
    def check_channel(cls, value):
        return _known_channel(value)

    @field_validator("text_overlay", mode="before")
    @classmethod
    def check_text_overlay(cls, value):
        return _optional_text(value, "Invalid text overlay") or ""

    @field_validator("emotion", "style_guide", "video_title", mode="before")
    @classmethod
    def check_optional_text(cls, value, info):
        return _optional_text(value, f"Invalid {info.field_name.replace('_', ' ')}")

    @field_validator("headshot_url", mode="before")
    @classmethod
    def check_headshot_url(cls, value):
        value = _optional_text(value, "Invalid headshot URL")
        if value is not None and not _is_image_source(value):
            raise ValueError("Invalid headshot URL")
        return value


# =============================================================================
# ERROR MESSAGES
# =============================================================================

def describe_validation_error(errors: list[dict]) -> str:
    """
    One readable message for a list of pydantic errors.

    Uses the first error: custom validator messages as-is, missing fields
    as "<Field> is required".
    """
    if not errors:
        return "Invalid request"

    error = errors[0]
    error_type = error.get("type", "")
    fields = [part for part in error.get("loc", ()) if isinstance(part, str) and part != "body"]
    field = fields[-1].replace("_", " ") if fields else None

    if error_type == "value_error":
        ctx_error = (error.get("ctx") or {}).get("error")
        if ctx_error is not None:
            return str(ctx_error)
        return error.get("msg", "Invalid request").removeprefix("Value error, ")

    if field is None:
        return "Invalid request"

    if error_type == "missing":
        return f"{field.capitalize()} is required"

    if error_type == "extra_forbidden":
        return f"Unexpected field: {fields[-1]}"

    return f"Invalid {field}"
