"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Required secrets (SECRET_KEY, ENCRYPTION_KEY) are
validated at load time.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    All settings are optional with defaults except those validated in
    validate_required (secret_key, encryption_key).
    """

    # App
    app_name: str = "adconnect"
    app_version: str = "1.0.0"
    debug: bool = False

    # Database (PostgreSQL via asyncpg; schema managed by Alembic)
    database_url: str = ""
    database_echo: bool = False
    db_pool_size: int | None = None
    db_max_overflow: int | None = None
    db_command_timeout: int | None = None

    # Security
    secret_key: SecretStr = SecretStr("")
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    # Secret Codec key for credentials at rest. 32 characters are used as the raw
    # AES-256 key; any other length is stretched with HKDF-SHA256.
    encryption_key: SecretStr = SecretStr("")

    # CORS
    allowed_origins: str = "http://localhost:3000,http://localhost:8080"

    # Redis-backed sessions (authorization state, staged page selection)
    redis_enabled: bool = True
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: SecretStr | None = None
    session_ttl_seconds: int = 3600
    session_cookie_name: str = "adconnect_session"
    session_cookie_secure: bool = True

    # Outbound provider calls
    provider_timeout_seconds: float = 30.0
    # Treat a token as expired this many seconds before expires_at.
    token_refresh_skew_seconds: int = 0

    # OAuth redirect URIs registered with each provider
    google_redirect_uri: str = "http://localhost:8000/api/v1/platforms/google_ads/callback"
    linkedin_redirect_uri: str = "http://localhost:8000/api/v1/platforms/linkedin/callback"
    linkedin_page_redirect_uri: str = (
        "http://localhost:8000/api/v1/platforms/linkedin_page/callback"
    )
    linkedin_api_version: str = "202411"
    google_ads_api_version: str = "v17"

    # Frontend route the page-selection step redirects to
    frontend_page_selection_url: str = "http://localhost:3000/linkedin/select-page"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_required(self) -> "Settings":
        """Validate required secrets.

        - SECRET_KEY signs caller JWTs and OAuth state tokens.
        - ENCRYPTION_KEY encrypts credentials at rest; rotating it makes stored
          credentials undecryptable.
        """
        if not self.secret_key.get_secret_value():
            raise ValueError(
                "SECRET_KEY is required. Generate with: openssl rand -hex 32."
            )
        if not self.encryption_key.get_secret_value():
            raise ValueError(
                "ENCRYPTION_KEY is required. Generate with: openssl rand -hex 16 "
                "(32 characters)."
            )
        if self.provider_timeout_seconds <= 0:
            raise ValueError("PROVIDER_TIMEOUT_SECONDS must be positive")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
