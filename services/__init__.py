"""
Services Package

Business logic layer for the application.
"""

from .session_service import SessionTokenCodec
from .rate_limiter import RateLimiter, RateLimitPolicy
from .cdn_service import BunnyCDNClient
from .metadata_service import MetadataService
from .thumbnail_service import ThumbnailService

__all__ = ['SessionTokenCodec', 'RateLimiter', 'RateLimitPolicy', 'BunnyCDNClient', 'MetadataService', 'ThumbnailService']
