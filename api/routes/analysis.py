"""
Analysis API Routes

Transcript analysis (titles, description, tags, chapters, thumbnail
concepts) and style analysis of sample thumbnails.
"""

import logging
from fastapi import APIRouter, Body, Depends, Request
from fastapi.concurrency import run_in_threadpool

from api.dependencies import (
    enforce_rate_limit,
    get_analyze_limiter,
    get_client_ip,
    get_metadata_service,
    get_style_limiter,
    get_thumbnail_service,
)
from channels import get_channel
from schemas import AnalyzeTranscriptRequest, AnalyzeStyleRequest
from services.metadata_service import MetadataService
from services.rate_limiter import RateLimiter
from services.thumbnail_service import ThumbnailService


logger = logging.getLogger(__name__)
router = APIRouter()

RATE_LIMIT_MESSAGE = "Too many requests. Wait a minute and try again."


# ============================================================================
# RATE LIMITS
# ============================================================================

async def limit_analyze(request: Request, limiter: RateLimiter = Depends(get_analyze_limiter)) -> None:
    enforce_rate_limit(limiter, get_client_ip(request), RATE_LIMIT_MESSAGE)


async def limit_style(request: Request, limiter: RateLimiter = Depends(get_style_limiter)) -> None:
    enforce_rate_limit(limiter, get_client_ip(request), RATE_LIMIT_MESSAGE)


# ============================================================================
# ENDPOINTS
# ============================================================================

@router.post("/analyze")
async def analyze_transcript(
    service: MetadataService = Depends(get_metadata_service),
    _: None = Depends(limit_analyze),
    body: AnalyzeTranscriptRequest = Body(...),
):
    """
    Generate YouTube metadata for a transcript.

    Returns the model's JSON (titles, description, tags, hashtags,
    timeline, thumbnail_concepts) for the selected channel.
    """
    channel = get_channel(body.channel)
    logger.info(f"Analyzing transcript ({len(body.transcript)} chars) for {channel.name}")

    data = await run_in_threadpool(
        service.analyze_transcript,
        body.transcript,
        channel,
        body.visual_context,
        body.video_duration,
    )

    return {"success": True, "channel": channel.id, "data": data}


@router.post("/analyze-style")
async def analyze_style(
    service: ThumbnailService = Depends(get_thumbnail_service),
    _: None = Depends(limit_style),
    body: AnalyzeStyleRequest = Body(...),
):
    """Describe the shared visual style of 1-5 sample thumbnails."""
    style_guide = await run_in_threadpool(service.analyze_style, body.images)
    return {"success": True, "style_guide": style_guide}
