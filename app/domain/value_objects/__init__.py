"""Domain value objects and shared value types."""

from app.domain.value_objects.core import CallerIdentity, Principal, TokenSet

__all__ = [
    "CallerIdentity",
    "Principal",
    "TokenSet",
]
