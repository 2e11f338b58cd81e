"""Shared utilities: telemetry (logging), clock and id helpers.

Used by domain, application, and infrastructure. No business logic.
"""

from app.shared.utils import (
    Clock,
    FixedClock,
    SystemClock,
    ensure_utc,
    generate_cuid,
    generate_nonce,
    utc_now,
)

__all__ = [
    "Clock",
    "FixedClock",
    "SystemClock",
    "ensure_utc",
    "generate_cuid",
    "generate_nonce",
    "utc_now",
]
