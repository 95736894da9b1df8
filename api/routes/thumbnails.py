"""
Thumbnail API Routes

Thumbnail generation from a concept and headshot upload to the CDN.
"""

import logging
from typing import Optional
from fastapi import APIRouter, Body, Depends, File, Request, UploadFile
from fastapi.concurrency import run_in_threadpool

from api.dependencies import (
    enforce_rate_limit,
    get_cdn_client,
    get_client_ip,
    get_thumbnail_limiter,
    get_thumbnail_service,
)
from channels import get_channel
from config import MAX_HEADSHOT_SIZE
from errors import ConfigurationError, ValidationError
from schemas import GenerateThumbnailRequest
from services.cdn_service import BunnyCDNClient
from services.rate_limiter import RateLimiter
from services.thumbnail_service import ThumbnailRequest, ThumbnailService
from utils import extension_for_content_type, generate_asset_filename


logger = logging.getLogger(__name__)
router = APIRouter()


async def limit_thumbnail(request: Request, limiter: RateLimiter = Depends(get_thumbnail_limiter)) -> None:
    enforce_rate_limit(limiter, get_client_ip(request), "Too many requests. Wait a minute and try again.")


# ============================================================================
# GENERATION
# ============================================================================

@router.post("/generate-thumbnail")
async def generate_thumbnail(
    service: ThumbnailService = Depends(get_thumbnail_service),
    _: None = Depends(limit_thumbnail),
    body: GenerateThumbnailRequest = Body(...),
):
    """
    Generate a 1280x720 thumbnail for a concept.

    The returned url points at the CDN copy, or at the provider's
    temporary image when the CDN upload failed.
    """
    result = await run_in_threadpool(
        service.generate,
        ThumbnailRequest(
            concept=body.concept,
            channel=get_channel(body.channel),
            text_overlay=body.text_overlay,
            emotion=body.emotion,
            style_guide=body.style_guide,
            headshot_url=body.headshot_url,
            video_title=body.video_title,
        ),
    )

    return {
        "success": True,
        "url": result.url,
        "prompt_used": result.prompt_used,
        "text_overlay": result.text_overlay,
    }


# ============================================================================
# HEADSHOT UPLOAD
# ============================================================================

@router.post("/upload-headshot")
async def upload_headshot(
    cdn: BunnyCDNClient = Depends(get_cdn_client),
    file: Optional[UploadFile] = File(None),
):
    """Store a headshot image on the CDN for later compositing."""
    if not cdn.configured:
        logger.error("Bunny CDN credentials are not set, headshot upload disabled")
        raise ConfigurationError("CDN storage not configured")

    if file is None:
        raise ValidationError("No file provided")

    data = await file.read()
    if len(data) > MAX_HEADSHOT_SIZE:
        raise ValidationError("File exceeds 4MB limit")

    content_type = (file.content_type or "").lower()
    if not content_type.startswith("image/"):
        raise ValidationError("Must be an image file")

    filename = generate_asset_filename("headshot", extension_for_content_type(content_type))
    url = await run_in_threadpool(cdn.upload, data, filename, content_type)

    logger.info(f"Headshot stored as {filename}")
    return {"success": True, "url": url}
