"""
YouTube Viral Analyzer - Utilities
==================================
Common utilities, logging, and helper functions.
"""

import sys
import time
import secrets
import logging
from pathlib import Path
from datetime import datetime
from typing import Optional
from urllib.parse import urlparse

# Configure stdout encoding for Windows
if sys.platform == 'win32':
    import io
    sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding='utf-8', errors='replace')
    sys.stderr = io.TextIOWrapper(sys.stderr.buffer, encoding='utf-8', errors='replace')


# =============================================================================
# COLORED LOGGER
# =============================================================================

class ColoredFormatter(logging.Formatter):
    """Custom formatter with colors for terminal output"""

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[34m',      # Blue
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
        'SUCCESS': '\033[32m',   # Green
        'RESET': '\033[0m',
        'BOLD': '\033[1m',
    }

    def format(self, record):
        color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        reset = self.COLORS['RESET']

        timestamp = datetime.fromtimestamp(record.created).strftime('%H:%M:%S')

        formatted = f"[{timestamp}] [{color}{record.levelname:^8}{reset}] {record.name}: {record.getMessage()}"

        if record.exc_info:
            formatted += f"\n{self.formatException(record.exc_info)}"

        return formatted


def setup_logger(name: str, log_file: Optional[Path] = None, level: str = "INFO") -> logging.Logger:
    """Setup a colored logger with optional file output"""

    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Prevent duplicate handlers
    if logger.handlers:
        return logger

    # Console handler with colors
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(ColoredFormatter())
    logger.addHandler(console_handler)

    # File handler (plain text)
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        logger.addHandler(file_handler)

    return logger


# Add SUCCESS level
logging.SUCCESS = 25
logging.addLevelName(logging.SUCCESS, 'SUCCESS')

def success(self, message, *args, **kwargs):
    if self.isEnabledFor(logging.SUCCESS):
        self._log(logging.SUCCESS, message, args, **kwargs)

logging.Logger.success = success


# =============================================================================
# NAMING AND URL HELPERS
# =============================================================================

def generate_asset_filename(prefix: str, extension: str) -> str:
    """
    Build a unique CDN object name.

    Example: thumb-1718031234567-a1b2c3.png
    """
    millis = int(time.time() * 1000)
    return f"{prefix}-{millis}-{secrets.token_hex(3)}.{extension.lstrip('.')}"


def extension_for_content_type(content_type: str) -> str:
    """Map an image MIME type to a file extension."""
    mapping = {
        "image/png": "png",
        "image/jpeg": "jpg",
        "image/jpg": "jpg",
        "image/webp": "webp",
        "image/gif": "gif",
    }
    return mapping.get((content_type or "").lower(), "webp")


def is_http_url(value: str) -> bool:
    """True for absolute http(s) URLs with a host."""
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def safe_return_path(raw: Optional[str]) -> str:
    """
    Sanitize a post-login return target.

    Only same-origin relative paths are kept. Anything that a browser could
    resolve to another host ("//evil.com", "/\\evil.com", "https://...") becomes "/".
    """
    if not raw:
        return "/"
    if not raw.startswith("/") or raw.startswith("//") or raw.startswith("/\\"):
        return "/"
    if any(ch in raw for ch in ("\r", "\n", "\t")):
        return "/"
    return raw
