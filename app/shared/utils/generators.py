"""ID and random value generators (CUID primary keys, OAuth nonces)."""

import secrets

from cuid2 import cuid_wrapper

cuid_generator = cuid_wrapper()


def generate_cuid() -> str:
    """Generate a collision-resistant unique identifier (CUID2) for primary keys."""
    result = cuid_generator()
    if not isinstance(result, str):
        raise TypeError(
            f"Expected str from cuid_generator, got {type(result).__name__}"
        )
    return result


def generate_nonce(num_bytes: int = 32) -> str:
    """Return a URL-safe random token (used as the OAuth state id)."""
    return secrets.token_urlsafe(num_bytes)
