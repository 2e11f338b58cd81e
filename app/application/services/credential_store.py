"""Credential store: app credentials and runtime OAuth grants, encrypted at rest.

Every stored secret (client id/secret, developer token, access and refresh
tokens) passes through the SecretCodec before it reaches a repository.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from app.application.dtos.credentials import (
    REQUIRED_APP_CREDENTIAL_FIELDS,
    AppCredentials,
    PlatformResult,
    RuntimeCredential,
    StoredCredential,
)
from app.domain.enums import ConnectionStatus, CredentialStatus, PlatformName
from app.domain.exceptions import (
    CredentialsInvalid,
    CredentialsNotFound,
    DecryptionError,
    ValidationException,
)
from app.domain.value_objects import Principal, TokenSet
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import ensure_utc

if TYPE_CHECKING:
    from app.application.interfaces.repositories import (
        IOrganizationRepository,
        IPlatformCredentialRepository,
        IPlatformRepository,
    )
    from app.application.interfaces.services import ISecretCodec

logger = get_logger(__name__)


class CredentialStore:
    """Persist per-organization app credentials and per-principal token sets."""

    def __init__(
        self,
        organization_repo: IOrganizationRepository,
        platform_repo: IPlatformRepository,
        credential_repo: IPlatformCredentialRepository,
        codec: ISecretCodec,
    ) -> None:
        self.organization_repo = organization_repo
        self.platform_repo = platform_repo
        self.credential_repo = credential_repo
        self.codec = codec

    # ---- Platform application credentials ----

    async def save_app_credentials(
        self,
        organization_id: str,
        platform: PlatformName,
        fields: dict[str, str],
    ) -> PlatformResult:
        """Encrypt and store app credentials; creates organization and platform lazily.

        Raises:
            ValidationException: A required field is missing or blank.
        """
        required = REQUIRED_APP_CREDENTIAL_FIELDS[platform]
        cleaned: dict[str, str] = {}
        for name in required:
            value = (fields.get(name) or "").strip()
            if not value:
                raise ValidationException(f"{name} is required", field=name)
            cleaned[name] = value
        encrypted = {name: self.codec.encrypt(value) for name, value in cleaned.items()}
        await self.organization_repo.set_app_credentials(
            organization_id, platform, encrypted
        )
        platform_row = await self.platform_repo.get_or_create(organization_id, platform)
        logger.info(
            "Saved %s app credentials for organization %s", platform.value, organization_id
        )
        return platform_row

    async def get_app_credentials(
        self, organization_id: str, platform: PlatformName
    ) -> AppCredentials:
        """Return decrypted app credentials.

        Raises:
            CredentialsNotFound: Nothing stored for this organization/platform.
            CredentialsInvalid: A required field is empty or cannot be decrypted.
        """
        encrypted = await self.organization_repo.get_app_credentials(
            organization_id, platform
        )
        if not encrypted:
            raise CredentialsNotFound(platform.value)
        decrypted: dict[str, str] = {}
        for name in REQUIRED_APP_CREDENTIAL_FIELDS[platform]:
            envelope = encrypted.get(name)
            if not envelope:
                raise CredentialsInvalid(platform.value, f"{name} is missing")
            try:
                value = self.codec.decrypt(envelope)
            except DecryptionError as e:
                logger.error(
                    "Failed to decrypt %s.%s for organization %s",
                    platform.value,
                    name,
                    organization_id,
                )
                raise CredentialsInvalid(platform.value, f"{name} could not be decrypted") from e
            if not value.strip():
                raise CredentialsInvalid(platform.value, f"{name} is empty")
            decrypted[name] = value
        return AppCredentials(platform=platform, fields=decrypted)

    # ---- Organization settings ----

    async def linkedin_sign_in_enabled(self, organization_id: str) -> bool:
        """LinkedIn user sign-in flag; enabled when never set."""
        enabled = await self.organization_repo.get_linkedin_sign_in_enabled(organization_id)
        return True if enabled is None else enabled

    async def set_linkedin_sign_in_enabled(self, organization_id: str, enabled: bool) -> None:
        await self.organization_repo.set_linkedin_sign_in_enabled(organization_id, enabled)
        logger.info(
            "LinkedIn sign-in %s for organization %s",
            "enabled" if enabled else "disabled",
            organization_id,
        )

    # ---- Platforms ----

    async def ensure_platform(
        self, organization_id: str, platform: PlatformName
    ) -> PlatformResult:
        return await self.platform_repo.get_or_create(organization_id, platform)

    async def get_platform(
        self, organization_id: str, platform: PlatformName
    ) -> PlatformResult | None:
        return await self.platform_repo.get(organization_id, platform)

    async def get_platform_by_id(self, platform_id: str) -> PlatformResult | None:
        return await self.platform_repo.get_by_id(platform_id)

    async def set_connection_status(
        self, platform_id: str, status: ConnectionStatus
    ) -> None:
        await self.platform_repo.set_connection_status(platform_id, status)

    # ---- Runtime credentials ----

    async def upsert_runtime_credential(
        self,
        platform_id: str,
        principal: Principal,
        token_set: TokenSet,
    ) -> RuntimeCredential:
        """Store token_set for (platform_id, principal), replacing any existing row.

        A fresh upsert always resets status to active; this is how a revoked
        grant re-enters the valid state after re-authorization.
        """
        stored = StoredCredential(
            platform_id=platform_id,
            principal=principal,
            access_token_encrypted=self.codec.encrypt(token_set.access_token),
            refresh_token_encrypted=self.codec.encrypt_optional(token_set.refresh_token),
            expires_at=token_set.expires_at,
            scopes=list(token_set.scopes),
            status=CredentialStatus.ACTIVE,
        )
        await self.credential_repo.upsert(stored)
        logger.debug(
            "Upserted runtime credential platform=%s principal=%s expires_at=%s",
            platform_id,
            principal.principal_type.value,
            token_set.expires_at.isoformat(),
        )
        return RuntimeCredential(
            platform_id=platform_id,
            principal=principal,
            token_set=token_set,
            status=CredentialStatus.ACTIVE,
        )

    async def get_runtime_credential(
        self, platform_id: str, principal: Principal
    ) -> RuntimeCredential | None:
        """Return the decrypted credential, or None when no grant exists.

        Raises:
            CredentialsInvalid: Stored tokens cannot be decrypted.
        """
        stored = await self.credential_repo.get(platform_id, principal)
        if stored is None:
            return None
        try:
            access_token = self.codec.decrypt(stored.access_token_encrypted)
            refresh_token = self.codec.decrypt_optional(stored.refresh_token_encrypted)
        except DecryptionError as e:
            logger.error(
                "Failed to decrypt runtime credential platform=%s principal=%s",
                platform_id,
                principal.principal_type.value,
            )
            raise CredentialsInvalid("runtime credential", "token could not be decrypted") from e
        token_set = TokenSet(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_at=ensure_utc(stored.expires_at) or stored.expires_at,
            scopes=tuple(stored.scopes),
        )
        return RuntimeCredential(
            platform_id=platform_id,
            principal=principal,
            token_set=token_set,
            status=stored.status,
        )

    async def delete_runtime_credential(
        self, platform_id: str, principal: Principal
    ) -> bool:
        return await self.credential_repo.delete(platform_id, principal)

    async def mark_revoked(self, platform_id: str, principal: Principal) -> None:
        """Flag the grant as revoked so later calls fail without contacting the provider."""
        await self.credential_repo.set_status(
            platform_id, principal, CredentialStatus.REVOKED
        )
