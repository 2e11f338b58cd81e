"""Security: caller JWTs, secret codec and OAuth state signing."""

from app.infrastructure.security.jwt import (
    caller_from_payload,
    create_access_token,
    verify_token,
)
from app.infrastructure.security.secret_codec import SecretCodec, derive_codec_key
from app.infrastructure.security.state_signer import OAuthStateSigner

__all__ = [
    "OAuthStateSigner",
    "SecretCodec",
    "caller_from_payload",
    "create_access_token",
    "derive_codec_key",
    "verify_token",
]
