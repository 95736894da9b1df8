"""
YouTube Viral Analyzer - Channel Registry
=========================================
Branding and audience profile for each supported YouTube channel.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class ChannelConfig:
    """Per-channel context injected into prompts."""
    id: str
    name: str
    handle: str
    audience: str
    tone: str
    topics: str
    thumbnail_colors: str
    title_patterns: list[str] = field(default_factory=list)
    thumbnail_style: str = ""
    # Short palette line used in image prompts
    palette_summary: str = ""
    # How the overlay text should be coloured
    text_color_rule: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "handle": self.handle,
        }


CHANNELS: dict[str, ChannelConfig] = {
    "techtony": ChannelConfig(
        id="techtony",
        name="TechTony",
        handle="@techtonyai",
        audience="Business owners, entrepreneurs, AI-curious professionals",
        tone='Practical, no-BS, "here\'s what actually works"',
        topics="AI tools, automation, business tech, productivity",
        thumbnail_colors="Electric Blue (#0066FF), Black, Neon Green (#39FF14), White",
        title_patterns=[
            "I Automated X and Here's What Happened",
            "The AI Tool That [Specific Result]",
            "Stop Using [Old Tool], Use This Instead",
            "X Tools I Use to Run My Entire [Business Type]",
        ],
        thumbnail_style=(
            "High-energy tech aesthetic. Electric blue (#0066FF) and neon green (#39FF14) accents "
            "on dark backgrounds. Bold sans-serif text with glow effects. Modern, clean composition "
            "with tech gadgets or screens as props. Excited or surprised facial expressions. "
            "High saturation, futuristic feel."
        ),
        palette_summary=(
            "Electric Blue (#0066FF), Black, Neon Green (#39FF14), White. "
            "Tech-forward, modern, high-energy."
        ),
        text_color_rule="Electric blue or neon green text with black outline",
    ),
    "huntermason": ChannelConfig(
        id="huntermason",
        name="HunterMason",
        handle="@huntermasonrealty",
        audience="Real estate investors, landlords, property managers, HOA boards",
        tone="Professional, expert, trustworthy",
        topics="Income property, landlord tips, market analysis, HOA management",
        thumbnail_colors="Navy Blue (#1B365D), Gold (#C5A572), White, Warm Gray",
        title_patterns=[
            "X Mistakes [Landlords/Investors] Make",
            "How I [Achieved Result] with [Property Type]",
            "The Truth About [Common Misconception]",
            "[Number] Things to Know Before [Action]",
        ],
        thumbnail_style=(
            "Professional real estate aesthetic. Navy blue (#1B365D) and gold (#C5A572) palette. "
            "Clean, authoritative composition with property images or professional headshots. "
            "Warm, trustworthy tone. Bold white or gold text with subtle drop shadows on dark navy "
            "backgrounds. Premium, high-end feel."
        ),
        palette_summary=(
            "Navy Blue (#1B365D), Gold (#C5A572), White, Warm Gray. "
            "Professional, trustworthy, premium real estate."
        ),
        text_color_rule="Gold or white text with dark navy outline",
    ),
}


def get_channel(channel_id: str) -> Optional[ChannelConfig]:
    """Look up a channel by id. Returns None for unknown ids."""
    if not isinstance(channel_id, str):
        return None
    return CHANNELS.get(channel_id)


def list_channels() -> list[dict]:
    """Channel summaries for the UI picker."""
    return [channel.to_dict() for channel in CHANNELS.values()]
