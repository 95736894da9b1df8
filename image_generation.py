"""
YouTube Viral Analyzer - Image Generation Module
================================================
Turns a thumbnail concept into a finished 1280x720 PNG:
prompt building, prompt refinement with the chat model, DALL-E generation,
download, resize and optional headshot compositing.
"""

import io
import base64
import binascii
from typing import Optional

import requests
from PIL import Image, ImageOps

from channels import ChannelConfig
from config import (
    OPENAI_IMAGE_MODEL,
    OPENAI_IMAGE_SIZE,
    OPENAI_IMAGE_QUALITY,
    OPENAI_IMAGE_STYLE,
    PROMPT_CRAFTER_MODEL,
    PROMPT_CRAFTER_TEMPERATURE,
    PROMPT_CRAFTER_MAX_TOKENS,
    THUMBNAIL_WIDTH,
    THUMBNAIL_HEIGHT,
    HEADSHOT_WIDTH_RATIO,
    HEADSHOT_LEFT_RATIO,
    DOWNLOAD_TIMEOUT,
    DEFAULT_EMOTION,
    LOG_FILE,
    LOG_LEVEL,
)
from errors import UpstreamError
from utils import setup_logger

logger = setup_logger(__name__, LOG_FILE, LOG_LEVEL)


# =============================================================================
# PROMPT BUILDING
# =============================================================================

PROMPT_CRAFTER_SYSTEM = """You are an expert at writing DALL-E 3 image generation prompts for YouTube thumbnails.

Your job: Take a thumbnail concept description and transform it into an optimized DALL-E 3 prompt that will produce a viral, click-worthy YouTube thumbnail.

VIRAL THUMBNAIL PRINCIPLES (always incorporate):
1. EMOTIONAL IMPACT: Close-up facial expressions increase CTR by 30%. Shock, curiosity, and excitement outperform neutral.
2. COLOR PSYCHOLOGY: High saturation, complementary colors (blue+orange, yellow+violet). Warm colors = excitement, cool = calm authority.
3. SIMPLICITY: One clear focal point. 1-2 key elements maximum. The thumbnail must read at 120x68 pixels on mobile.
4. MrBeast FORMULA: Extreme emotion + vivid saturation + simple background + bold text overlay.
5. CURIOSITY GAP: The visual should raise a question only the video answers.
6. TEXT RULES: 2-3 words max, thick sans-serif font, high-contrast outline/shadow, avoid bottom-right corner (YouTube shows duration there).
7. COMPOSITION: Rule of thirds. Clear visual hierarchy. Guide the eye to the focal point.
8. CONTRAST: Foreground must pop from background. Use light-on-dark or dark-on-light.

PROMPT WRITING RULES:
- Be extremely specific about colors (use hex codes), positions, sizes, lighting
- Describe the scene in detail but keep it achievable for AI image generation
- Always specify "16:9 aspect ratio, landscape orientation, 1792x1024 pixels"
- Include the exact text to render and describe its styling in detail
- Avoid requesting realistic photographs of specific real people
- End with "Vivid, high-contrast, professional YouTube thumbnail quality"

Return ONLY the DALL-E prompt text. No explanation, no JSON, just the prompt."""


def _target_emotion(concept: str) -> str:
    lowered = concept.lower()
    if "warning" in lowered or "mistake" in lowered:
        return "concern/urgency"
    return "curiosity/excitement"


def build_image_prompt(
    concept: str,
    channel: ChannelConfig,
    style_guide: Optional[str],
    text_overlay: str,
    include_headshot: bool
) -> str:
    """Base image prompt from the concept, channel branding and optional style guide."""
    prompt = f"""Create a YouTube thumbnail image (landscape, 16:9 aspect ratio).

VISUAL CONCEPT:
{concept}

CHANNEL BRANDING:
{channel.name} channel. Color palette: {channel.palette_summary}

TEXT OVERLAY:
Include bold text reading "{text_overlay}" in a prominent position. Use thick sans-serif font (like Impact or Montserrat Black). The text must be:
- Maximum 3 words
- LARGE and immediately readable at small sizes
- High contrast against the background (use outline, shadow, or contrasting background)
- Positioned following the rule of thirds (avoid bottom-right corner)
- {channel.text_color_rule}"""

    # Without sample thumbnails, the channel's house style stands in
    style_reference = style_guide or channel.thumbnail_style
    if style_reference:
        prompt += f"""

STYLE REFERENCE:
Match this visual style: {style_reference}"""

    if include_headshot:
        prompt += """

PERSON PLACEMENT:
Leave a clear space on the left or right third of the image for a person's head and shoulders to be composited in later. The space should be roughly 30-35% of the image width. Design the background and other elements to work around this space."""

    prompt += f"""

VIRAL THUMBNAIL RULES:
- High color saturation (150%+ of normal), make colors POP
- Maximum 1-2 focal points. Simplicity wins.
- Strong emotional resonance (the image should trigger {_target_emotion(concept)})
- Complementary color theory for contrast (blue+orange, yellow+violet, red+cyan)
- Clean, sharp edges, no blur or noise
- Professional quality, not generic stock photo feel
- The thumbnail must be compelling even at 120x68 pixels (mobile size)
- Do NOT include any YouTube UI elements, play buttons, or video player frames

OUTPUT:
A single 1792x1024 pixel landscape image. Vivid, high-contrast, scroll-stopping."""

    return prompt


def build_crafter_message(
    concept: str,
    text_overlay: str,
    emotion: Optional[str],
    channel: ChannelConfig,
    video_title: Optional[str],
    base_prompt: str
) -> str:
    """User turn asking the chat model to refine the base prompt."""
    title_line = f"VIDEO TITLE: {video_title}" if video_title else ""
    return (
        "Transform this thumbnail concept into an optimized DALL-E 3 prompt:\n\n"
        f"CONCEPT: {concept}\n"
        f"TEXT OVERLAY: \"{text_overlay}\"\n"
        f"EMOTION: {emotion or DEFAULT_EMOTION}\n"
        f"CHANNEL: {channel.name}\n"
        f"{title_line}\n\n"
        f"BASE PROMPT TO ENHANCE:\n{base_prompt}"
    )


# =============================================================================
# OPENAI CALLS
# =============================================================================

def craft_image_prompt(client, base_prompt: str, crafter_message: str) -> str:
    """Refine the base prompt with the chat model. Empty answer keeps the base prompt."""
    response = client.chat.completions.create(
        model=PROMPT_CRAFTER_MODEL,
        messages=[
            {"role": "system", "content": PROMPT_CRAFTER_SYSTEM},
            {"role": "user", "content": crafter_message},
        ],
        max_tokens=PROMPT_CRAFTER_MAX_TOKENS,
        temperature=PROMPT_CRAFTER_TEMPERATURE,
    )

    content = response.choices[0].message.content if response.choices else None
    if not content or not content.strip():
        logger.warning("Prompt crafter returned nothing, using base prompt")
        return base_prompt
    return content.strip()


def generate_image_url(client, prompt: str) -> str:
    """Generate one image and return its (temporary) URL."""
    logger.info(f"Generating image with OpenAI ({OPENAI_IMAGE_MODEL})...")

    response = client.images.generate(
        model=OPENAI_IMAGE_MODEL,
        prompt=prompt[:4000],  # DALL-E 3 has a 4000 char limit
        n=1,
        size=OPENAI_IMAGE_SIZE,
        quality=OPENAI_IMAGE_QUALITY,
        style=OPENAI_IMAGE_STYLE,
    )

    image_url = response.data[0].url if response.data else None
    if not image_url:
        raise UpstreamError("Image generation failed")
    return image_url


# =============================================================================
# IMAGE PROCESSING
# =============================================================================

def download_image(url: str, error_message: str = "Failed to download generated image") -> bytes:
    """Fetch image bytes over HTTP."""
    try:
        response = requests.get(url, timeout=DOWNLOAD_TIMEOUT)
    except requests.RequestException as e:
        logger.error(f"Image download failed: {e}")
        raise UpstreamError(error_message) from e

    if response.status_code != 200:
        logger.error(f"Image download failed with status {response.status_code}")
        raise UpstreamError(error_message)
    return response.content


def decode_data_url(data_url: str) -> bytes:
    """Bytes of a base64 data URL (data:image/png;base64,....)."""
    header, _, payload = data_url.partition(",")
    if not header.startswith("data:") or ";base64" not in header or not payload:
        raise ValueError("Not a base64 data URL")
    try:
        return base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise ValueError("Invalid base64 payload") from e


def load_image_source(source: str, error_message: str = "Failed to download image") -> bytes:
    """Image bytes from either a data URL or an http(s) URL."""
    if source.startswith("data:"):
        return decode_data_url(source)
    return download_image(source, error_message)


def resize_to_thumbnail(image_bytes: bytes) -> bytes:
    """Cover-crop to exact thumbnail dimensions and encode as PNG."""
    img = Image.open(io.BytesIO(image_bytes))
    img = ImageOps.fit(img.convert("RGB"), (THUMBNAIL_WIDTH, THUMBNAIL_HEIGHT), Image.Resampling.LANCZOS)

    buffer = io.BytesIO()
    img.save(buffer, "PNG")
    return buffer.getvalue()


def composite_headshot(base_image: bytes, headshot_image: bytes) -> bytes:
    """
    Paste a headshot onto the thumbnail.

    The headshot is scaled to 30% of the thumbnail width (aspect kept),
    placed at 65% of the width and centred vertically. Transparent
    headshots keep their alpha.
    """
    base = Image.open(io.BytesIO(base_image)).convert("RGBA")
    headshot = Image.open(io.BytesIO(headshot_image)).convert("RGBA")

    target_width = round(THUMBNAIL_WIDTH * HEADSHOT_WIDTH_RATIO)
    target_height = max(1, round(headshot.height * target_width / headshot.width))
    headshot = headshot.resize((target_width, target_height), Image.Resampling.LANCZOS)

    left = max(0, round(THUMBNAIL_WIDTH * HEADSHOT_LEFT_RATIO))
    top = max(0, round((THUMBNAIL_HEIGHT - headshot.height) / 2))

    base.paste(headshot, (left, top), headshot)

    buffer = io.BytesIO()
    base.convert("RGB").save(buffer, "PNG")
    return buffer.getvalue()
