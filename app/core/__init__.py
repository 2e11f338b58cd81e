"""Core: config, rate limits, exception handlers and application bootstrap."""

from app.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
