"""
Signed download tokens for stored files.

A token is a Fernet token wrapping the file path and its TTL; Fernet's
embedded timestamp gives the issue time, so no server-side state is kept.
"""

import base64
import json
import time
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from coursework.core.config import get_config

DEFAULT_SALT = b"coursework_signed_urls"


def get_signing_key(password: Optional[str] = None) -> bytes:
    """
    Derive the Fernet key used to sign download tokens.

    Args:
        password: Optional secret. If None, uses uploads.signing_key from config.

    Returns:
        URL-safe base64 encoded 32-byte key.
    """
    if password is None:
        password = get_config().uploads.signing_key

    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=DEFAULT_SALT,
        iterations=480000,
    )
    return base64.urlsafe_b64encode(kdf.derive(password.encode()))


class UrlSigner:
    """Issues and verifies time-limited download tokens."""

    def __init__(self, key: Optional[bytes] = None):
        self._fernet = Fernet(key or get_signing_key())

    def sign(self, file_path: str, ttl_seconds: int) -> str:
        """Return a token granting access to file_path for ttl_seconds."""
        payload = json.dumps({"path": file_path, "ttl": int(ttl_seconds)})
        return self._fernet.encrypt(payload.encode()).decode()

    def verify(self, token: str, now: Optional[float] = None) -> str:
        """
        Check a token and return the file path it grants.

        Raises:
            ValueError: If the token is malformed, tampered with, or expired.
        """
        try:
            payload = json.loads(self._fernet.decrypt(token.encode()).decode())
            issued_at = self._fernet.extract_timestamp(token.encode())
        except (InvalidToken, ValueError) as e:
            raise ValueError("Invalid download token") from e

        current = time.time() if now is None else now
        if current - issued_at > payload["ttl"]:
            raise ValueError("Download link has expired")
        return payload["path"]
