"""Environment-driven configuration."""

from .settings import CacheSettings, RateLimitSettings, Settings

__all__ = ["CacheSettings", "RateLimitSettings", "Settings"]
