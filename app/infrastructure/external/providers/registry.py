"""Provider registry: dispatch adapters by provider-name tag."""

from __future__ import annotations

from typing import Any, ClassVar

import httpx

from app.domain.enums import ProviderName
from app.domain.exceptions import ValidationException
from app.infrastructure.external.providers.base import ProviderAdapter
from app.infrastructure.external.providers.google_ads import GoogleAdsAdapter
from app.infrastructure.external.providers.linkedin import (
    LinkedInPageAdapter,
    LinkedInProfileAdapter,
)
from app.shared.utils.datetime import Clock


class ProviderRegistry:
    """Holds one adapter instance per provider, sharing an HTTP client and clock."""

    _adapters: ClassVar[dict[ProviderName, type[ProviderAdapter]]] = {
        ProviderName.GOOGLE_ADS: GoogleAdsAdapter,
        ProviderName.LINKEDIN: LinkedInProfileAdapter,
        ProviderName.LINKEDIN_PAGE: LinkedInPageAdapter,
    }

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        clock: Clock | None = None,
        timeout: float = 30.0,
        adapter_options: dict[ProviderName, dict[str, Any]] | None = None,
    ) -> None:
        options = adapter_options or {}
        self._instances: dict[ProviderName, ProviderAdapter] = {
            name: adapter_cls(
                http_client=http_client,
                clock=clock,
                timeout=timeout,
                **options.get(name, {}),
            )
            for name, adapter_cls in self._adapters.items()
        }

    @classmethod
    def list_providers(cls) -> list[str]:
        return sorted(p.value for p in cls._adapters)

    def get(self, provider: ProviderName | str) -> ProviderAdapter:
        """Return the adapter for provider.

        Raises:
            ValidationException: Unknown provider tag.
        """
        try:
            key = provider if isinstance(provider, ProviderName) else ProviderName(provider)
            return self._instances[key]
        except (ValueError, KeyError) as e:
            raise ValidationException(
                f"Unsupported provider: {provider}. Supported: {', '.join(self.list_providers())}",
                field="provider",
            ) from e
