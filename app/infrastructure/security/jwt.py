"""JWT creation and verification for caller identity.

Uses app.core.config for secret and algorithm. Tokens carry sub (user id),
org (organization id) and role.
"""

from datetime import UTC, datetime, timedelta
from typing import Any, cast

from jose import JWTError, jwt

from app.core.config import get_settings
from app.domain.enums import UserRole
from app.domain.value_objects import CallerIdentity


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """Create a JWT access token with the given claims.

    Args:
        data: Claims to encode (e.g. sub, org, role).
        expires_delta: Optional TTL; else uses settings.access_token_expire_minutes.

    Returns:
        Encoded JWT string.
    """
    settings = get_settings()
    to_encode = data.copy()
    if expires_delta is not None:
        expire = datetime.now(UTC) + expires_delta
    else:
        expire = datetime.now(UTC) + timedelta(
            minutes=settings.access_token_expire_minutes
        )
    to_encode["exp"] = expire
    encoded = jwt.encode(
        to_encode,
        settings.secret_key.get_secret_value(),
        algorithm=settings.algorithm,
    )
    return cast(str, encoded)


def verify_token(token: str) -> dict[str, Any]:
    """Verify and decode a JWT. Returns the payload.

    Enforces presence of exp and sub. Raises ValueError if the token is
    invalid, expired, or missing required claims.
    """
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.secret_key.get_secret_value(),
            algorithms=[settings.algorithm],
            options={"require_exp": True, "require_sub": True},
        )
    except JWTError as e:
        raise ValueError(f"Invalid token: {e!s}") from e
    if "sub" not in payload:
        raise ValueError("Token missing required claim: sub")
    return payload


def caller_from_payload(payload: dict[str, Any]) -> tuple[str, CallerIdentity]:
    """Return (organization_id, CallerIdentity) from verified claims.

    A missing role means member. Raises ValueError for an unknown role or a
    missing org claim.
    """
    organization_id = payload.get("org")
    if not organization_id:
        raise ValueError("Token missing required claim: org")
    role = payload.get("role") or UserRole.MEMBER.value
    if role not in UserRole.values():
        raise ValueError(f"Unknown role: {role}")
    return str(organization_id), CallerIdentity(user_id=str(payload["sub"]), role=UserRole(role))
