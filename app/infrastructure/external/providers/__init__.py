"""Provider adapters (Google Ads, LinkedIn profile, LinkedIn page) and registry."""

from app.infrastructure.external.providers.base import ProviderAdapter
from app.infrastructure.external.providers.google_ads import GoogleAdsAdapter
from app.infrastructure.external.providers.linkedin import (
    LinkedInPageAdapter,
    LinkedInProfileAdapter,
)
from app.infrastructure.external.providers.registry import ProviderRegistry

__all__ = [
    "GoogleAdsAdapter",
    "LinkedInPageAdapter",
    "LinkedInProfileAdapter",
    "ProviderAdapter",
    "ProviderRegistry",
]
