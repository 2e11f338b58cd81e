"""Persistence models: ORM entities and mixins."""

from app.infrastructure.persistence.models.linkedin_profile import LinkedInProfile
from app.infrastructure.persistence.models.managed_account import (
    AdAccount,
    CampaignGroup,
    ManagedAccount,
)
from app.infrastructure.persistence.models.mixins import (
    CuidMixin,
    OrganizationMixin,
    OrganizationScopedModel,
    TimestampMixin,
)
from app.infrastructure.persistence.models.organization import Organization
from app.infrastructure.persistence.models.platform import Platform, PlatformCredential

__all__ = [
    "AdAccount",
    "CampaignGroup",
    "CuidMixin",
    "LinkedInProfile",
    "ManagedAccount",
    "Organization",
    "OrganizationMixin",
    "OrganizationScopedModel",
    "Platform",
    "PlatformCredential",
    "TimestampMixin",
]
