"""
CDN Service

Uploads image bytes to Bunny storage and returns the public CDN URL.
"""

import logging
from typing import Optional

import requests

import config
from errors import ConfigurationError, UpstreamError


logger = logging.getLogger(__name__)


class BunnyCDNClient:
    """Thin client for Bunny Storage PUT uploads."""

    def __init__(
        self,
        storage_zone: Optional[str],
        access_key: Optional[str],
        cdn_host: Optional[str],
        storage_host: str = "la.storage.bunnycdn.com",
        timeout: int = 30,
        session: Optional[requests.Session] = None,
    ):
        self.storage_zone = (storage_zone or "").strip()
        self.access_key = (access_key or "").strip()
        self.cdn_host = (cdn_host or "").strip()
        self.storage_host = storage_host
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls) -> "BunnyCDNClient":
        return cls(
            storage_zone=config.BUNNY_STORAGE_ZONE,
            access_key=config.BUNNY_ACCESS_KEY,
            cdn_host=config.BUNNY_CDN_HOST,
            storage_host=config.BUNNY_STORAGE_HOST,
            timeout=config.CDN_TIMEOUT,
        )

    @property
    def configured(self) -> bool:
        return bool(self.storage_zone and self.access_key and self.cdn_host)

    def public_url(self, filename: str) -> str:
        return f"https://{self.cdn_host}/{filename}"

    def upload(self, data: bytes, filename: str, content_type: str = "image/png") -> str:
        """
        PUT bytes into the storage zone.

        Returns the public URL. Raises ConfigurationError when credentials
        are missing and UpstreamError when the storage API refuses.
        """
        if not self.configured:
            raise ConfigurationError("CDN storage not configured")

        upload_url = f"https://{self.storage_host}/{self.storage_zone}/{filename}"

        try:
            response = self.session.put(
                upload_url,
                data=data,
                headers={"AccessKey": self.access_key, "Content-Type": content_type},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"CDN upload of {filename} failed: {e}")
            raise UpstreamError("CDN upload failed") from e

        if not response.ok:
            logger.error(f"CDN upload of {filename} failed with status {response.status_code}")
            raise UpstreamError("CDN upload failed")

        logger.info(f"Uploaded {filename} ({len(data)} bytes) to CDN")
        return self.public_url(filename)
