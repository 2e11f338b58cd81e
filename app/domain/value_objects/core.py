"""Domain value objects for platform connections.

Value objects are immutable types that represent domain concepts with
self-validation. They have no identity, only value.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime

from app.domain.enums import PrincipalType, UserRole


@dataclass(frozen=True)
class Principal:
    """Scope of a runtime credential: organization-level or one user.

    Organization principals never carry a subject_id; user principals always do.
    """

    principal_type: PrincipalType
    subject_id: str | None = None

    def __post_init__(self) -> None:
        if self.principal_type is PrincipalType.ORGANIZATION and self.subject_id:
            raise ValueError("Organization principal must not have a subject_id")
        if self.principal_type is PrincipalType.USER and not self.subject_id:
            raise ValueError("User principal requires a subject_id")

    @classmethod
    def organization(cls) -> "Principal":
        return cls(PrincipalType.ORGANIZATION)

    @classmethod
    def user(cls, user_id: str) -> "Principal":
        return cls(PrincipalType.USER, user_id)

    @property
    def subject_key(self) -> str:
        """Non-null storage key for the unique (platform, principal_type, subject) index."""
        return self.subject_id or ""


@dataclass(frozen=True)
class TokenSet:
    """Canonical token response: access token, optional refresh token, absolute expiry."""

    access_token: str
    expires_at: datetime
    refresh_token: str | None = None
    scopes: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not self.access_token:
            raise ValueError("TokenSet requires a non-empty access_token")

    def is_expired(self, now: datetime, skew_seconds: int = 0) -> bool:
        """Return True when now (plus skew) has reached expires_at."""
        return now.timestamp() + skew_seconds >= self.expires_at.timestamp()

    def with_refresh_token(self, refresh_token: str | None) -> "TokenSet":
        return replace(self, refresh_token=refresh_token)

    def __repr__(self) -> str:
        return (
            f"TokenSet(access_token=***, refresh_token={'***' if self.refresh_token else None}, "
            f"expires_at={self.expires_at.isoformat()}, scopes={self.scopes!r})"
        )


@dataclass(frozen=True)
class CallerIdentity:
    """Authenticated caller as supplied by the HTTP layer. Only the role is re-checked."""

    user_id: str
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role is UserRole.ADMIN
