"""Signed OAuth state values (state_id:signature) for CSRF protection."""

from __future__ import annotations

import hashlib
import hmac

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from app.core.config import get_settings

_OAUTH_STATE_KEY_INFO = b"oauth-state-signing"


class OAuthStateSigner:
    """Sign and verify state ids with a purpose-specific HMAC key."""

    def __init__(self, secret: str | None = None) -> None:
        if secret is None:
            secret = get_settings().secret_key.get_secret_value()
        self._signing_key = self._derive_signing_key(secret)

    @staticmethod
    def _derive_signing_key(secret: str) -> bytes:
        """Derive the HMAC key from the app secret (domain separation from JWT signing)."""
        hkdf = HKDF(
            algorithm=hashes.SHA256(),
            length=32,
            salt=None,
            info=_OAUTH_STATE_KEY_INFO,
        )
        return hkdf.derive(secret.encode())

    def sign(self, state_id: str) -> str:
        """Return state_id:signature."""
        sig = hmac.new(self._signing_key, state_id.encode(), hashlib.sha256).hexdigest()
        return f"{state_id}:{sig}"

    def verify(self, signed_state: str) -> str:
        """Verify signature and return state_id.

        Splits on the last colon so state_id may contain colons.

        Raises:
            ValueError: Invalid format or signature.
        """
        parts = signed_state.rsplit(":", 1)
        if len(parts) != 2 or not parts[0]:
            raise ValueError("Invalid state format")
        state_id, signature = parts
        expected = hmac.new(
            self._signing_key, state_id.encode(), hashlib.sha256
        ).hexdigest()
        if not hmac.compare_digest(expected, signature):
            raise ValueError("Invalid state signature - possible CSRF attack")
        return state_id
