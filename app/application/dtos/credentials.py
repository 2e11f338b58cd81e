"""DTOs for the credential store (no dependency on ORM)."""

from dataclasses import dataclass, field
from datetime import datetime

from app.domain.enums import ConnectionStatus, CredentialStatus, PlatformName
from app.domain.value_objects import Principal, TokenSet

# Fields every app-credential set must carry, per platform.
REQUIRED_APP_CREDENTIAL_FIELDS: dict[PlatformName, tuple[str, ...]] = {
    PlatformName.GOOGLE_ADS: (
        "client_id",
        "client_secret",
        "developer_token",
        "customer_account_id",
    ),
    PlatformName.LINKEDIN: ("client_id", "client_secret"),
}

# Fields masked when app credentials are echoed back to an admin.
SECRET_APP_CREDENTIAL_FIELDS = frozenset({"client_secret", "developer_token"})


@dataclass(frozen=True)
class AppCredentials:
    """Decrypted platform application credentials for one organization."""

    platform: PlatformName
    fields: dict[str, str]

    @property
    def client_id(self) -> str:
        return self.fields["client_id"]

    @property
    def client_secret(self) -> str:
        return self.fields["client_secret"]

    def get(self, name: str) -> str | None:
        return self.fields.get(name)

    def masked(self) -> dict[str, str]:
        """Return fields with secrets reduced to their last four characters."""
        out: dict[str, str] = {}
        for name, value in self.fields.items():
            if name in SECRET_APP_CREDENTIAL_FIELDS and value:
                out[name] = f"****{value[-4:]}" if len(value) > 4 else "****"
            else:
                out[name] = value
        return out


@dataclass(frozen=True)
class PlatformResult:
    """Platform read-model."""

    id: str
    organization_id: str
    name: PlatformName
    connection_status: ConnectionStatus


@dataclass(frozen=True)
class StoredCredential:
    """Runtime credential row as persisted (tokens still encrypted)."""

    platform_id: str
    principal: Principal
    access_token_encrypted: str
    refresh_token_encrypted: str | None
    expires_at: datetime
    scopes: list[str] = field(default_factory=list)
    status: CredentialStatus = CredentialStatus.ACTIVE
    updated_at: datetime | None = None


@dataclass(frozen=True)
class RuntimeCredential:
    """Decrypted runtime credential returned by the credential store."""

    platform_id: str
    principal: Principal
    token_set: TokenSet
    status: CredentialStatus = CredentialStatus.ACTIVE

    @property
    def is_revoked(self) -> bool:
        return self.status is CredentialStatus.REVOKED
