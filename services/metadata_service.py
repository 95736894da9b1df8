"""
Metadata Service
================
Transcript analysis: sends the channel-aware prompt to the chat model and
returns the parsed metadata (titles, description, thumbnail concepts, tags,
hashtags, timeline).
"""

import logging
from typing import Optional

from channels import ChannelConfig
from config import (
    METADATA_MODEL,
    METADATA_TEMPERATURE,
    METADATA_MAX_TOKENS,
    REQUIRED_METADATA_KEYS,
)
from errors import AppError, UpstreamError, sanitize_upstream_error
from prompt_generation import (
    build_system_prompt,
    build_user_message,
    parse_llm_response,
    find_missing_keys,
)

logger = logging.getLogger(__name__)


class MetadataService:
    """Generates YouTube metadata for a transcript."""

    def __init__(self, client):
        self.client = client

    def analyze_transcript(
        self,
        transcript: str,
        channel: ChannelConfig,
        visual_context: Optional[str] = None,
        video_duration: Optional[str] = None,
    ) -> dict:
        """
        Run the analysis and validate the shape of the answer.

        Raises:
            UpstreamError: the model failed, answered nothing, answered
                non-JSON, or left out required sections.
        """
        messages = [
            {"role": "system", "content": build_system_prompt(channel)},
            {"role": "user", "content": build_user_message(transcript, visual_context, video_duration)},
        ]

        logger.info(f"Analyzing transcript for {channel.id} ({len(transcript)} chars)")

        try:
            completion = self.client.chat.completions.create(
                model=METADATA_MODEL,
                messages=messages,
                response_format={"type": "json_object"},
                temperature=METADATA_TEMPERATURE,
                max_tokens=METADATA_MAX_TOKENS,
            )
        except AppError:
            raise
        except Exception as e:
            logger.error(f"Analyze error: {e!r}")
            raise sanitize_upstream_error(e, "Analysis failed. Try again.") from e

        content = completion.choices[0].message.content if completion.choices else None
        if not content:
            raise UpstreamError("No response from AI")

        data = parse_llm_response(content)
        if not isinstance(data, dict):
            raise UpstreamError("Failed to parse AI response. Try again.")

        missing = find_missing_keys(data, REQUIRED_METADATA_KEYS)
        if missing:
            logger.warning(f"Incomplete metadata response, missing: {missing}")
            raise UpstreamError(f"AI response incomplete. Missing: {', '.join(missing)}")

        data.setdefault("hashtags", [])
        return data
