"""Shared utilities: datetime/clock and generators."""

from app.shared.utils.datetime import (
    Clock,
    FixedClock,
    SystemClock,
    ensure_utc,
    expires_at_from,
    utc_now,
)
from app.shared.utils.generators import generate_cuid, generate_nonce

__all__ = [
    "Clock",
    "FixedClock",
    "SystemClock",
    "ensure_utc",
    "expires_at_from",
    "generate_cuid",
    "generate_nonce",
    "utc_now",
]
