"""
Session Token Service

Stateless session tokens for the shared-password login.

A token is "<nonce>.<signature>" where:
- nonce     = 32 random bytes, hex encoded
- secret    = HMAC-SHA256(key=password, msg=SESSION_SECRET_LABEL)
- signature = HMAC-SHA256(key=secret, msg=nonce)

Nothing is stored server-side. Expiry is the cookie's max-age; changing the
password changes the secret, which invalidates every outstanding token.
"""

import hmac
import hashlib
import logging
import secrets
from typing import Optional

from config import SESSION_SECRET_LABEL
from errors import ConfigurationError


logger = logging.getLogger(__name__)

TOKEN_SEPARATOR = "."
NONCE_BYTES = 32  # 256 bits


def hmac_sha256(key: str, data: str) -> str:
    """Hex HMAC-SHA256 of data under key."""
    return hmac.new(key.encode("utf-8"), data.encode("utf-8"), hashlib.sha256).hexdigest()


def derive_secret(password: str, label: str = SESSION_SECRET_LABEL) -> str:
    """Derive the signing secret from the shared password."""
    if not password:
        raise ConfigurationError("Authentication not configured")
    return hmac_sha256(password, label)


class SessionTokenCodec:
    """Mints and verifies session tokens for one password."""

    def __init__(self, password: Optional[str], label: str = SESSION_SECRET_LABEL):
        self._secret = derive_secret(password, label) if password else None

    @property
    def configured(self) -> bool:
        return self._secret is not None

    def mint(self) -> str:
        """Create a new token. Refuses when no password is configured."""
        if self._secret is None:
            raise ConfigurationError("Authentication not configured")

        nonce = secrets.token_hex(NONCE_BYTES)
        signature = hmac_sha256(self._secret, nonce)
        return f"{nonce}{TOKEN_SEPARATOR}{signature}"

    def verify(self, token: Optional[str]) -> bool:
        """Check a token. Malformed input is invalid, never an exception."""
        if self._secret is None or not token or not isinstance(token, str):
            return False

        parts = token.split(TOKEN_SEPARATOR)
        if len(parts) != 2:
            return False
        nonce, signature = parts
        if not nonce or not signature:
            return False

        expected = hmac_sha256(self._secret, nonce)
        return hmac.compare_digest(signature.encode("utf-8"), expected.encode("utf-8"))


def passwords_match(candidate: Optional[str], password: str) -> bool:
    """Constant-time comparison of a submitted password."""
    if not password or not isinstance(candidate, str):
        return False
    return hmac.compare_digest(candidate.encode("utf-8"), password.encode("utf-8"))
