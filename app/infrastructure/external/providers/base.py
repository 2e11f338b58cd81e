"""Provider adapter base: authorization URL, code exchange, refresh, error classification.

Subclasses declare endpoints and scopes as ClassVars and implement
fetch_profile plus their provider-specific reads. All outbound calls carry
a bounded timeout; timeouts, transport errors, 429 and 5xx surface as
TransientProviderError, revocations as ProviderGrantRevoked.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, ClassVar
from urllib.parse import urlencode

import httpx

from app.domain.enums import ProviderName, RefreshTokenPolicy
from app.domain.exceptions import (
    ConsentRequired,
    ProviderGrantRevoked,
    ProviderRequestError,
    TransientProviderError,
    ValidationException,
)
from app.domain.value_objects import TokenSet
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import Clock, SystemClock, expires_at_from

if TYPE_CHECKING:
    from app.application.dtos.credentials import AppCredentials
    from app.application.dtos.provider import ProviderProfile

logger = get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0

# Token endpoint errors that mean the grant itself is gone.
_REVOCATION_ERRORS = frozenset({"invalid_grant", "invalid_token", "unauthorized_client"})

_SCOPE_SPLIT_RE = re.compile(r"[\s,]+")


def _parse_retry_after(response: httpx.Response) -> int | None:
    value = response.headers.get("Retry-After")
    if value and value.isdigit():
        return int(value)
    return None


def _error_payload(response: httpx.Response) -> dict[str, Any]:
    """Return the JSON error body, or {} when the body is not JSON."""
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


class ProviderAdapter(ABC):
    """Base OAuth 2.0 authorization-code adapter for one provider."""

    PROVIDER_NAME: ClassVar[ProviderName]
    AUTHORIZATION_ENDPOINT: ClassVar[str]
    TOKEN_ENDPOINT: ClassVar[str]
    DEFAULT_SCOPES: ClassVar[tuple[str, ...]]
    # Used when a token response omits expires_in.
    DEFAULT_EXPIRES_IN: ClassVar[int] = 3600
    # True: an authorization grant without refresh_token is rejected with ConsentRequired.
    REFRESH_TOKEN_REQUIRED_ON_GRANT: ClassVar[bool] = False
    REFRESH_TOKEN_POLICY: ClassVar[RefreshTokenPolicy] = RefreshTokenPolicy.KEEP_EXISTING

    _RESERVED_AUTH_PARAMS: ClassVar[frozenset[str]] = frozenset(
        {"client_id", "redirect_uri", "response_type", "scope", "state"}
    )

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        clock: Clock | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._http_client = http_client
        self.clock = clock or SystemClock()
        self.timeout = timeout

    # ---- Authorization URL ----

    def build_authorization_url(
        self,
        app_credentials: AppCredentials,
        redirect_uri: str,
        scope: list[str] | tuple[str, ...],
        state: str,
        **extra_params: str,
    ) -> str:
        """Return the consent URL (response_type=code plus provider extras).

        Raises:
            ValidationException: extra_params tries to override a reserved parameter.
        """
        overridden = self._RESERVED_AUTH_PARAMS.intersection(extra_params)
        if overridden:
            raise ValidationException(
                f"Cannot override reserved OAuth parameters: {', '.join(sorted(overridden))}"
            )
        params = {
            "client_id": app_credentials.client_id,
            "redirect_uri": redirect_uri,
            "response_type": "code",
            "scope": " ".join(scope or self.DEFAULT_SCOPES),
            "state": state,
        }
        params.update(self._get_authorization_params())
        params.update(extra_params)
        return f"{self.AUTHORIZATION_ENDPOINT}?{urlencode(params)}"

    def _get_authorization_params(self) -> dict[str, str]:
        """Provider-specific query parameters (offline access, forced consent)."""
        return {}

    # ---- Token exchanges ----

    async def exchange_code(
        self, app_credentials: AppCredentials, code: str, redirect_uri: str
    ) -> TokenSet:
        """Exchange an authorization code for a TokenSet.

        Raises:
            ConsentRequired: The provider omitted the refresh token and this adapter needs one.
            ProviderGrantRevoked: The code was rejected (expired, reused).
            TransientProviderError: Network failure, timeout, 429 or 5xx.
        """
        payload = await self._post_token(
            {
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": redirect_uri,
                "client_id": app_credentials.client_id,
                "client_secret": app_credentials.client_secret,
            },
            operation="exchange_code",
        )
        token_set = self._normalize_token_response(payload)
        if self.REFRESH_TOKEN_REQUIRED_ON_GRANT and not token_set.refresh_token:
            logger.warning(
                "%s authorization grant returned no refresh token", self.PROVIDER_NAME.value
            )
            raise ConsentRequired(self.PROVIDER_NAME.value)
        return token_set

    async def refresh(self, app_credentials: AppCredentials, refresh_token: str) -> TokenSet:
        """Exchange a refresh token for a new TokenSet.

        A response without refresh_token keeps the old one under KEEP_EXISTING
        and is an error under REQUIRED.
        """
        payload = await self._post_token(
            {
                "grant_type": "refresh_token",
                "refresh_token": refresh_token,
                "client_id": app_credentials.client_id,
                "client_secret": app_credentials.client_secret,
            },
            operation="refresh",
        )
        token_set = self._normalize_token_response(payload)
        if not token_set.refresh_token:
            if self.REFRESH_TOKEN_POLICY is RefreshTokenPolicy.REQUIRED:
                raise ProviderRequestError(
                    self.PROVIDER_NAME.value, 200, "refresh", "refresh_token_missing"
                )
            token_set = token_set.with_refresh_token(refresh_token)
        return token_set

    def _normalize_token_response(self, payload: dict[str, Any]) -> TokenSet:
        """Map a token endpoint response to TokenSet; expires_at is computed now."""
        access_token = payload.get("access_token")
        if not access_token:
            raise ProviderRequestError(
                self.PROVIDER_NAME.value, 200, "token", "access_token_missing"
            )
        expires_in = payload.get("expires_in") or self.DEFAULT_EXPIRES_IN
        raw_scope = payload.get("scope") or ""
        scopes = tuple(s for s in _SCOPE_SPLIT_RE.split(raw_scope) if s)
        return TokenSet(
            access_token=access_token,
            refresh_token=payload.get("refresh_token") or None,
            expires_at=expires_at_from(self.clock, int(expires_in)),
            scopes=scopes,
        )

    async def _post_token(self, data: dict[str, str], operation: str) -> dict[str, Any]:
        response = await self._send(
            "POST",
            self.TOKEN_ENDPOINT,
            operation=operation,
            data=data,
            headers={"Accept": "application/json"},
        )
        if 200 <= response.status_code < 300:
            return response.json()
        body = _error_payload(response)
        error = body.get("error")
        if isinstance(error, dict):
            error = error.get("status") or error.get("message")
        description = body.get("error_description")
        logger.error(
            "%s %s failed: status=%s error=%s",
            self.PROVIDER_NAME.value,
            operation,
            response.status_code,
            error,
        )
        if response.status_code in (400, 401) and self._is_revocation(error, operation):
            raise ProviderGrantRevoked(self.PROVIDER_NAME.value, error, description)
        self._raise_for_status(response, operation, error)
        return {}

    def _is_revocation(self, error: str | None, operation: str) -> bool:
        """Return True when a token endpoint error means the grant is unusable."""
        if error in _REVOCATION_ERRORS:
            return True
        # Refresh with a revoked/expired refresh token comes back as invalid_request on some providers.
        return operation == "refresh" and error == "invalid_request"

    # ---- HTTP helpers ----

    @asynccontextmanager
    async def _client(self) -> AsyncIterator[httpx.AsyncClient]:
        """Yield the shared client, or a short-lived one when none was injected."""
        if self._http_client is not None:
            yield self._http_client
            return
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            yield client

    async def _send(
        self, method: str, url: str, *, operation: str, **kwargs: Any
    ) -> httpx.Response:
        """Send one request with the adapter timeout; classify transport failures as transient."""
        try:
            async with self._client() as client:
                return await client.request(method, url, timeout=self.timeout, **kwargs)
        except httpx.TimeoutException as e:
            logger.warning("%s %s timed out", self.PROVIDER_NAME.value, operation)
            raise TransientProviderError(
                self.PROVIDER_NAME.value, f"{operation} timed out"
            ) from e
        except httpx.TransportError as e:
            logger.warning(
                "%s %s transport error: %s", self.PROVIDER_NAME.value, operation, e
            )
            raise TransientProviderError(
                self.PROVIDER_NAME.value, f"{operation} failed: network error"
            ) from e

    def _raise_for_status(
        self, response: httpx.Response, operation: str, provider_error: str | None = None
    ) -> None:
        """Raise the classified error for a non-2xx response; return on success."""
        status = response.status_code
        if 200 <= status < 300:
            return
        if status == 429:
            raise TransientProviderError(
                self.PROVIDER_NAME.value,
                f"{operation} rate limited",
                status_code=status,
                retry_after=_parse_retry_after(response),
            )
        if status >= 500:
            raise TransientProviderError(
                self.PROVIDER_NAME.value,
                f"{operation} failed with provider error",
                status_code=status,
            )
        raise ProviderRequestError(self.PROVIDER_NAME.value, status, operation, provider_error)

    async def _get_json(
        self,
        url: str,
        access_token: str,
        *,
        operation: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """GET with a bearer token. 401 means the access token was revoked."""
        request_headers = {"Authorization": f"Bearer {access_token}"}
        request_headers.update(headers or {})
        response = await self._send(
            "GET", url, operation=operation, params=params, headers=request_headers
        )
        if response.status_code == 401:
            raise ProviderGrantRevoked(self.PROVIDER_NAME.value, "invalid_token")
        self._raise_for_status(response, operation)
        return response.json()

    @abstractmethod
    async def fetch_profile(self, access_token: str) -> ProviderProfile:
        """Return the identity behind access_token."""
