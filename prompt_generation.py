"""
YouTube Viral Analyzer - Prompt Generation Module
=================================================
Builds the LLM prompts for transcript analysis and thumbnail style analysis,
and parses the JSON the model sends back.
"""

import json
from typing import Optional

from channels import ChannelConfig
from config import LOG_FILE, LOG_LEVEL
from utils import setup_logger

logger = setup_logger(__name__, LOG_FILE, LOG_LEVEL)


# =============================================================================
# PROMPT TEMPLATES
# =============================================================================

METADATA_SYSTEM_PROMPT = """You are the "Viral Video Architect," an expert YouTube strategist and copywriter with deep understanding of the YouTube algorithm, click-through rate (CTR) psychology, and SEO.

You are creating content for the "{name}" channel ({handle}).
Target audience: {audience}
Tone: {tone}
Topics: {topics}
Thumbnail color palette: {thumbnail_colors}
Title patterns that work for this channel: {title_patterns}

YOUR GOAL: Analyze video transcripts to generate high-performing, viral-optimized metadata (Titles, Descriptions, Tags, Thumbnail concepts, and Timeline).

YOUR ANALYSIS PROCESS:

1. Transcript Scan: Analyze the transcript to understand the core narrative, emotional peaks, key value propositions, and quotable moments.

2. Hook Identification: Identify the "hook" - the most engaging moment or concept in the first 30 seconds.

3. Audience Avatar: Determine exactly who the target audience is and what psychological trigger (curiosity, fear of missing out, greed, joy, anger) drives them.

4. Timeline Extraction: Identify topic transitions and key moments for chapter markers.

YOUR OUTPUT DELIVERABLES (return as JSON):

A. VIRAL TITLE OPTIONS (10 Variations):
Create 10 title options categorized by strategy. Use "Click-Worthy" tactics (Negativity Bias, Curiosity Gaps, Specific Numbers, Extreme Adjectives).

- 3 "Curiosity Gap" titles (e.g., "I Tried X for 30 Days and This Happened")
- 3 "How-To / Benefit" titles (e.g., "How to X Without Y")
- 3 "Negative/Warning" titles (e.g., "Stop Doing X Immediately")
- 1 "Short/Punchy" title (under 50 characters)

B. THE "VIRAL" DESCRIPTION:
Write a description optimized for both humans and SEO.

Structure:
- The Hook (First 2 lines): Compelling opening that forces "Show More" click
- The Story (1 paragraph): Emotional summary without spoiling the ending
- Key Takeaways (3-5 bullet points): What will the viewer learn or experience?
- SEO Keywords: 5-10 high-volume search terms naturally woven in
- Call to Action: Subscribe/like/comment prompt
- Full Text: The complete assembled description ready to paste (include hook, story, takeaways, hashtags, and CTA combined)

C. THUMBNAIL CONCEPTS (3 Ideas):
- Concept 1: Focus on facial expression/emotion (close-up, exaggerated)
- Concept 2: Focus on "Before & After" or visual contrast
- Concept 3: Focus on a "Hero Object" or action shot
- For each: suggest 2-3 word text overlay (different from title) and the primary emotion
- Mark the best one as recommended

D. TAGS & HASHTAGS:
- 15 comma-separated tags optimized for search
- 3 hashtags for the description

E. TIMELINE/CHAPTERS:
Create chapter markers with timestamps. If timestamps exist in the transcript, use them. If not, estimate based on word count (~150 words/minute). Identify natural break points (topic changes). Aim for chapters every 2-5 minutes.

RESPOND WITH THIS EXACT JSON STRUCTURE:
{response_schema}

CRITICAL RULES:
- Use "You" or "Your" instead of "I" or "me" in descriptions
- Keep language punchy, conversational, 6th-8th grade reading level
- Prioritize HIGH CTR over formal accuracy
- Do not reveal the ending or main payoff in descriptions
- All titles must be under 100 characters
- NEVER use these AI words: "Delve," "Unveil," "Comprehensive," "Tapestry," "Landscape," "Realm," "Paradigm," "Leverage," "Synergy," "Elevate," "Pivotal," "Nuanced," "Intricate"
- No em dashes
- Maximum 1 exclamation mark per section"""


METADATA_RESPONSE_EXAMPLE = {
    "titles": {
        "curiosity_gap": ["title1", "title2", "title3"],
        "how_to": ["title1", "title2", "title3"],
        "negative_warning": ["title1", "title2", "title3"],
        "short_punchy": "title",
    },
    "description": {
        "hook": "First 2 compelling lines",
        "story_summary": "One paragraph emotional summary",
        "key_takeaways": ["takeaway1", "takeaway2", "takeaway3"],
        "seo_keywords": ["keyword1", "keyword2"],
        "cta": "Subscribe/like/comment prompt",
        "full_text": "Complete assembled description ready to paste into YouTube",
    },
    "thumbnail_concepts": [
        {
            "concept": "Detailed visual description of the thumbnail",
            "text_overlay": "2-3 WORDS",
            "emotion": "Primary emotion (shock, curiosity, etc.)",
            "recommended": True,
        },
        {"concept": "...", "text_overlay": "...", "emotion": "...", "recommended": False},
        {"concept": "...", "text_overlay": "...", "emotion": "...", "recommended": False},
    ],
    "tags": ["tag1", "tag2", "...up to 15"],
    "hashtags": ["#hash1", "#hash2", "#hash3"],
    "timeline": [
        {"timestamp": "0:00", "title": "Intro"},
        {"timestamp": "1:24", "title": "Chapter title"},
    ],
}


STYLE_ANALYSIS_PROMPT = """You are an expert YouTube thumbnail analyst. Analyze these sample thumbnails and describe the visual style in detail.

Focus on:
1. **Color palette**: dominant colors, accent colors, saturation level, warm vs cool tones
2. **Composition**: layout pattern (centered, rule of thirds, split), focal point placement
3. **Text treatment**: font style (serif/sans-serif/display), text size relative to image, text position, outline/shadow/glow effects, text colors
4. **Mood & tone**: energetic, professional, dramatic, playful, urgent, etc.
5. **Recurring elements**: faces, expressions, objects, backgrounds, overlays, borders, arrows, icons
6. **Background style**: solid color, gradient, blurred photo, graphic pattern, clean/busy

Output a single paragraph (150-200 words) that a designer could use to replicate this exact style. Be specific about colors (use hex codes when possible), font characteristics, and spatial relationships. Do NOT list the images separately. Synthesize the common style across all samples."""

STYLE_ANALYSIS_USER_TEXT = "Analyze these YouTube thumbnail samples and describe the unified visual style:"


# =============================================================================
# BUILDERS
# =============================================================================

def build_system_prompt(channel: ChannelConfig) -> str:
    """System prompt for transcript analysis, with the channel's profile filled in."""
    return METADATA_SYSTEM_PROMPT.format(
        name=channel.name,
        handle=channel.handle,
        audience=channel.audience,
        tone=channel.tone,
        topics=channel.topics,
        thumbnail_colors=channel.thumbnail_colors,
        title_patterns="; ".join(channel.title_patterns),
        response_schema=json.dumps(METADATA_RESPONSE_EXAMPLE, indent=2),
    )


def build_user_message(
    transcript: str,
    visual_context: Optional[str] = None,
    video_duration: Optional[str] = None
) -> str:
    """User turn carrying the transcript and optional context."""
    message = f"Analyze this video transcript and generate viral-optimized metadata:\n\n{transcript}"

    if visual_context:
        message += f"\n\nVISUAL CONTEXT: {visual_context}"

    if video_duration:
        message += f"\n\nVIDEO DURATION: {video_duration}"

    return message


def build_style_analysis_messages(images: list[str], detail: str = "low") -> list[dict]:
    """Vision chat messages: system prompt plus one user turn with every sample image."""
    image_parts = [
        {"type": "image_url", "image_url": {"url": image, "detail": detail}}
        for image in images
    ]
    return [
        {"role": "system", "content": STYLE_ANALYSIS_PROMPT},
        {
            "role": "user",
            "content": [{"type": "text", "text": STYLE_ANALYSIS_USER_TEXT}, *image_parts],
        },
    ]


# =============================================================================
# RESPONSE PARSING
# =============================================================================

def parse_llm_response(response: str) -> Optional[list | dict]:
    """Parse JSON response from LLM (handles both arrays and objects)"""

    if not response:
        return None

    try:
        response = response.strip()

        # Handle markdown code blocks
        if "```json" in response:
            start = response.find("```json") + 7
            end = response.find("```", start)
            response = response[start:end].strip()
        elif "```" in response:
            start = response.find("```") + 3
            end = response.find("```", start)
            response = response[start:end].strip()

        if response.startswith('['):
            # Find matching closing bracket
            bracket_count = 0
            for i, char in enumerate(response):
                if char == '[':
                    bracket_count += 1
                elif char == ']':
                    bracket_count -= 1
                    if bracket_count == 0:
                        response = response[:i + 1]
                        break
        elif response.startswith('{'):
            # Find matching closing brace
            brace_count = 0
            for i, char in enumerate(response):
                if char == '{':
                    brace_count += 1
                elif char == '}':
                    brace_count -= 1
                    if brace_count == 0:
                        response = response[:i + 1]
                        break

        return json.loads(response)

    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse JSON response: {e}")
        logger.debug(f"Response was: {response[:1000]}")
        return None


def find_missing_keys(data: dict, required: list[str]) -> list[str]:
    """Required keys that are absent or empty in the model output."""
    return [key for key in required if not data.get(key)]
