"""Configuration settings for the application."""
import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


def _env_list(name: str) -> List[str]:
    return [item.strip() for item in os.getenv(name, "").split(",") if item.strip()]


@dataclass
class CacheSettings:
    signal_ttl_seconds: int = field(
        default_factory=lambda: _env_int("SIGNAL_CACHE_TTL_SECONDS", 5 * 60)
    )
    signal_capacity: int = field(
        default_factory=lambda: _env_int("SIGNAL_CACHE_CAPACITY", 100)
    )
    generation_ttl_seconds: int = field(
        default_factory=lambda: _env_int("GENERATION_CACHE_TTL_SECONDS", 10 * 60)
    )
    generation_capacity: int = field(
        default_factory=lambda: _env_int("GENERATION_CACHE_CAPACITY", 100)
    )


@dataclass
class RateLimitSettings:
    max_requests: int = field(
        default_factory=lambda: _env_int("RATE_LIMIT_MAX_REQUESTS", 10)
    )
    window_seconds: int = field(
        default_factory=lambda: _env_int("RATE_LIMIT_WINDOW_SECONDS", 60)
    )
    max_clients: int = field(
        default_factory=lambda: _env_int("RATE_LIMIT_MAX_CLIENTS", 1000)
    )


@dataclass
class Settings:
    cache: CacheSettings = field(default_factory=CacheSettings)
    rate_limit: RateLimitSettings = field(default_factory=RateLimitSettings)

    # API Keys
    openai_api_key: str = field(default_factory=lambda: os.getenv("OPENAI_API_KEY", ""))
    elevenlabs_api_key: str = field(
        default_factory=lambda: os.getenv("ELEVENLABS_API_KEY", "")
    )
    github_token: str = field(default_factory=lambda: os.getenv("GITHUB_TOKEN", ""))

    openai_model: str = field(
        default_factory=lambda: os.getenv("OPENAI_MODEL", "gpt-4o-mini")
    )
    host: str = field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: _env_int("PORT", 3000))
    allowed_origins: List[str] = field(
        default_factory=lambda: _env_list("ALLOWED_ORIGINS")
    )
    # Peers whose X-Forwarded-For / X-Real-IP headers name the real caller.
    trusted_proxies: List[str] = field(
        default_factory=lambda: _env_list("TRUSTED_PROXIES")
    )
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "info"))
    environment: str = field(
        default_factory=lambda: os.getenv("ENVIRONMENT", "development")
    )

    def missing_keys(self) -> List[str]:
        """Names of required API keys that are not configured."""
        missing = []
        if not self.openai_api_key:
            missing.append("OPENAI_API_KEY")
        if not self.elevenlabs_api_key:
            missing.append("ELEVENLABS_API_KEY")
        return missing
