"""
Thumbnail Service
=================
Style analysis of sample thumbnails and end-to-end thumbnail generation:
prompt -> refined prompt -> image -> resize -> optional headshot -> CDN.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from channels import ChannelConfig
from config import (
    STYLE_MODEL,
    STYLE_TEMPERATURE,
    STYLE_MAX_TOKENS,
    STYLE_IMAGE_DETAIL,
)
from errors import AppError, UpstreamError, sanitize_upstream_error
from image_generation import (
    build_image_prompt,
    build_crafter_message,
    craft_image_prompt,
    generate_image_url,
    download_image,
    load_image_source,
    resize_to_thumbnail,
    composite_headshot,
)
from prompt_generation import build_style_analysis_messages
from services.cdn_service import BunnyCDNClient
from utils import generate_asset_filename

logger = logging.getLogger(__name__)


@dataclass
class ThumbnailRequest:
    """Everything needed to render one thumbnail."""
    concept: str
    channel: ChannelConfig
    text_overlay: str = ""
    emotion: Optional[str] = None
    style_guide: Optional[str] = None
    headshot_url: Optional[str] = None
    video_title: Optional[str] = None


@dataclass
class ThumbnailResult:
    url: str
    prompt_used: str
    text_overlay: str
    # False when the CDN upload failed and url is the provider's temporary link
    stored_on_cdn: bool = True


class ThumbnailService:
    """Style analysis and image generation on top of OpenAI + CDN."""

    def __init__(self, client, cdn: BunnyCDNClient):
        self.client = client
        self.cdn = cdn

    # ------------------------------------------------------------------
    # Style analysis
    # ------------------------------------------------------------------

    def analyze_style(self, images: list[str]) -> str:
        """Summarize the shared visual style of 1-5 sample thumbnails."""
        logger.info(f"Analyzing style of {len(images)} sample image(s)")

        try:
            completion = self.client.chat.completions.create(
                model=STYLE_MODEL,
                messages=build_style_analysis_messages(images, STYLE_IMAGE_DETAIL),
                max_tokens=STYLE_MAX_TOKENS,
                temperature=STYLE_TEMPERATURE,
            )
        except AppError:
            raise
        except Exception as e:
            logger.error(f"Style analysis error: {e!r}")
            raise sanitize_upstream_error(e, "Style analysis failed. Try again.") from e

        style_guide = completion.choices[0].message.content if completion.choices else None
        if not style_guide or not style_guide.strip():
            raise UpstreamError("No response from AI")
        return style_guide.strip()

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def generate(self, request: ThumbnailRequest) -> ThumbnailResult:
        """
        Produce a thumbnail and store it.

        Headshot compositing and CDN upload degrade gracefully: a failed
        composite keeps the plain image, a failed upload returns the
        provider's temporary URL.
        """
        include_headshot = bool(request.headshot_url)
        base_prompt = build_image_prompt(
            request.concept,
            request.channel,
            request.style_guide,
            request.text_overlay,
            include_headshot,
        )

        try:
            prompt = craft_image_prompt(
                self.client,
                base_prompt,
                build_crafter_message(
                    request.concept,
                    request.text_overlay,
                    request.emotion,
                    request.channel,
                    request.video_title,
                    base_prompt,
                ),
            )
            image_url = generate_image_url(self.client, prompt)
        except AppError:
            raise
        except Exception as e:
            logger.error(f"Thumbnail generation error: {e!r}")
            raise sanitize_upstream_error(e, "Thumbnail generation failed. Try again.") from e

        downloaded = download_image(image_url)
        try:
            image_bytes = resize_to_thumbnail(downloaded)
        except (OSError, ValueError) as e:
            logger.error(f"Could not decode generated image: {e!r}")
            raise UpstreamError("Image generation failed") from e

        if include_headshot:
            image_bytes = self._apply_headshot(image_bytes, request.headshot_url)

        filename = generate_asset_filename("thumb", "png")
        try:
            final_url = self.cdn.upload(image_bytes, filename, "image/png")
            stored = True
        except AppError as e:
            logger.error(f"CDN upload failed, returning provider URL: {e.message}")
            final_url = image_url
            stored = False

        return ThumbnailResult(
            url=final_url,
            prompt_used=prompt,
            text_overlay=request.text_overlay,
            stored_on_cdn=stored,
        )

    def _apply_headshot(self, image_bytes: bytes, headshot_url: str) -> bytes:
        try:
            headshot = load_image_source(headshot_url, "Failed to download headshot")
            return composite_headshot(image_bytes, headshot)
        except Exception as e:
            logger.error(f"Headshot compositing failed: {e!r}")
            return image_bytes
