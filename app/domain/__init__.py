"""Domain layer: value objects, enums, and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from app.domain.enums import (
    ConnectionStatus,
    CredentialStatus,
    PlatformName,
    PrincipalType,
    ProviderName,
    RefreshTokenPolicy,
    UserRole,
)
from app.domain.exceptions import (
    AdConnectException,
    AuthenticationRequired,
    ConsentRequired,
    CredentialsInvalid,
    CredentialsNotFound,
    DatabaseNotConfigured,
    DecryptionError,
    Forbidden,
    InvalidState,
    NotFound,
    ProviderException,
    ProviderGrantRevoked,
    ProviderRequestError,
    ReauthorizationRequired,
    TransientProviderError,
    TransientRefreshFailure,
    Unauthenticated,
    ValidationException,
)
from app.domain.value_objects import CallerIdentity, Principal, TokenSet

__all__ = [
    "AdConnectException",
    "AuthenticationRequired",
    "CallerIdentity",
    "ConnectionStatus",
    "ConsentRequired",
    "CredentialStatus",
    "CredentialsInvalid",
    "CredentialsNotFound",
    "DatabaseNotConfigured",
    "DecryptionError",
    "Forbidden",
    "InvalidState",
    "NotFound",
    "PlatformName",
    "Principal",
    "ProviderException",
    "ProviderGrantRevoked",
    "ProviderRequestError",
    "PrincipalType",
    "ProviderName",
    "ReauthorizationRequired",
    "RefreshTokenPolicy",
    "TokenSet",
    "TransientProviderError",
    "TransientRefreshFailure",
    "Unauthenticated",
    "UserRole",
    "ValidationException",
]
