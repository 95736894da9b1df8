"""
YouTube Viral Analyzer - Configuration
======================================
Central configuration for the web app and its AI/CDN collaborators.

Configuration is loaded from environment variables, which can be set in a .env file.
See .env.example for a template.
"""

from pathlib import Path
import os

# Load environment variables from .env file
from dotenv import load_dotenv

# Find the project directory
PROJECT_DIR = Path(__file__).parent

# Load .env file if it exists
env_path = PROJECT_DIR / ".env"
if env_path.exists():
    load_dotenv(env_path)

# =============================================================================
# ACCESS CONTROL (loaded from .env - no defaults for security)
# =============================================================================

# Shared password for the whole deployment. Changing it invalidates every session.
APP_PASSWORD = os.getenv("APP_PASSWORD", "")

# "production" turns on the Secure flag on the session cookie
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")

SESSION_COOKIE_NAME = "yva_session"
SESSION_MAX_AGE = 60 * 60 * 24 * 7  # 7 days
SESSION_SECRET_LABEL = "yva-session-secret"

# Paths reachable without a session (prefix match)
PUBLIC_PATHS = ["/login", "/api/auth", "/static", "/health", "/favicon.ico"]
LOGIN_PATH = "/login"

# =============================================================================
# CLIENT IDENTITY
# =============================================================================

# Header set by the reverse proxy in front of the app (e.g. x-real-ip).
# Empty = not behind a proxy, the socket peer is used.
TRUSTED_PROXY_HEADER = os.getenv("TRUSTED_PROXY_HEADER", "").strip().lower()

# X-Forwarded-For is client controlled unless the proxy overwrites it
TRUST_FORWARDED_FOR = os.getenv("TRUST_FORWARDED_FOR", "false").lower() == "true"

# =============================================================================
# RATE LIMITING
# =============================================================================

# Login: 3 failed attempts per hour, exponential delay between failures
LOGIN_RATE_WINDOW = int(os.getenv("LOGIN_RATE_WINDOW", "3600"))   # seconds
LOGIN_RATE_MAX = int(os.getenv("LOGIN_RATE_MAX", "3"))
LOGIN_BACKOFF_BASE = float(os.getenv("LOGIN_BACKOFF_BASE", "1.0"))  # seconds
LOGIN_BACKOFF_CAP = float(os.getenv("LOGIN_BACKOFF_CAP", "8.0"))    # seconds
LOGIN_LOCKOUT_DELAY = float(os.getenv("LOGIN_LOCKOUT_DELAY", "4.0"))  # seconds held before 429

# Paid AI calls: hard rejection per minute
ANALYZE_RATE_WINDOW = 60
ANALYZE_RATE_MAX = int(os.getenv("ANALYZE_RATE_MAX", "10"))
STYLE_RATE_WINDOW = 60
STYLE_RATE_MAX = int(os.getenv("STYLE_RATE_MAX", "5"))
THUMBNAIL_RATE_WINDOW = 60
THUMBNAIL_RATE_MAX = int(os.getenv("THUMBNAIL_RATE_MAX", "10"))

# Stale limiter records are dropped at most this often
RATE_LIMIT_SWEEP_INTERVAL = int(os.getenv("RATE_LIMIT_SWEEP_INTERVAL", "300"))  # seconds

# =============================================================================
# API KEYS (loaded from .env - no defaults for security)
# =============================================================================

# OpenAI API for metadata, style analysis and image generation
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")

# Bunny CDN storage for generated thumbnails and headshots
BUNNY_STORAGE_ZONE = os.getenv("BUNNY_STORAGE_ZONE", "").strip()
BUNNY_ACCESS_KEY = os.getenv("BUNNY_ACCESS_KEY", "").strip()
BUNNY_CDN_HOST = os.getenv("BUNNY_CDN_HOST", "").strip()
BUNNY_STORAGE_HOST = os.getenv("BUNNY_STORAGE_HOST", "la.storage.bunnycdn.com").strip()
CDN_TIMEOUT = 30  # seconds

# =============================================================================
# LLM SETTINGS
# =============================================================================

METADATA_MODEL = os.getenv("METADATA_MODEL", "gpt-4o")
METADATA_TEMPERATURE = 0.7
METADATA_MAX_TOKENS = 8000

MAX_TRANSCRIPT_LENGTH = 100_000

# Fields the metadata response must contain
REQUIRED_METADATA_KEYS = ["titles", "description", "thumbnail_concepts", "tags", "timeline"]

STYLE_MODEL = os.getenv("STYLE_MODEL", "gpt-4o")
STYLE_TEMPERATURE = 0.5
STYLE_MAX_TOKENS = 500
STYLE_IMAGE_DETAIL = "low"  # low, high, auto
MAX_STYLE_IMAGES = 5

PROMPT_CRAFTER_MODEL = os.getenv("PROMPT_CRAFTER_MODEL", "gpt-4o")
PROMPT_CRAFTER_TEMPERATURE = 0.7
PROMPT_CRAFTER_MAX_TOKENS = 1000

# =============================================================================
# IMAGE GENERATION SETTINGS
# =============================================================================

OPENAI_IMAGE_MODEL = os.getenv("OPENAI_IMAGE_MODEL", "dall-e-3")
OPENAI_IMAGE_SIZE = "1792x1024"  # Closest to 16:9
OPENAI_IMAGE_QUALITY = "hd"
OPENAI_IMAGE_STYLE = "vivid"

THUMBNAIL_WIDTH = 1280
THUMBNAIL_HEIGHT = 720

# Headshot compositing (fractions of thumbnail width)
HEADSHOT_WIDTH_RATIO = 0.30
HEADSHOT_LEFT_RATIO = 0.65

MAX_HEADSHOT_SIZE = 4 * 1024 * 1024  # 4MB
DOWNLOAD_TIMEOUT = 30  # seconds

DEFAULT_EMOTION = "curiosity"

# =============================================================================
# SERVER SETTINGS
# =============================================================================

SERVER_HOST = os.getenv("SERVER_HOST", "0.0.0.0")
SERVER_PORT = int(os.getenv("SERVER_PORT", "8000"))
DEBUG_MODE = os.getenv("DEBUG_MODE", "false").lower() == "true"

APP_VERSION = "1.0.0"

# =============================================================================
# LOGGING
# =============================================================================

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = Path(os.getenv("LOG_FILE")) if os.getenv("LOG_FILE") else None
