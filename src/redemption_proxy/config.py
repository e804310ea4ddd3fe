import os
from dataclasses import dataclass
from functools import lru_cache

import redis
from dotenv import load_dotenv

load_dotenv()

DEFAULT_ORIGIN_REGEX = (
    r"^https?://(www\.)?("
    r"ftg-redemption-test\.mybrightsites\.com"
    r"|ftg-redemption\.mybrightsites\.com"
    r"|redeem\.forbestravelguide\.com"
    r")$"
)


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Airtable
    airtable_api_key: str | None = os.getenv("AIRTABLE_API_KEY")
    airtable_api_url: str = os.getenv("AIRTABLE_API_URL", "https://api.airtable.com/v0")
    airtable_base_id: str = os.getenv("AIRTABLE_BASE_ID", "appC9GXdjmEmFlNk7")
    airtable_table: str = os.getenv("AIRTABLE_TABLE", "tblSsW6kAWQd3LZVa")
    airtable_timeout: float = float(os.getenv("AIRTABLE_TIMEOUT", "10.0"))

    # Cache
    cache_backend: str = os.getenv("CACHE_BACKEND", "memory")  # or "redis"
    cache_ttl: int = int(os.getenv("CACHE_TTL", "300"))
    cache_key_prefix: str = os.getenv("CACHE_KEY_PREFIX", "redemption")

    # Redis (only used when CACHE_BACKEND=redis)
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    redis_password: str | None = os.getenv("REDIS_PASSWORD")

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    api_reload: bool = os.getenv("API_RELOAD", "false").lower() == "true"
    api_prefix: str = os.getenv("API_PREFIX", "")
    allowed_origin_regex: str = os.getenv("ALLOWED_ORIGIN_REGEX", DEFAULT_ORIGIN_REGEX)

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "info")

    @property
    def uses_redis(self) -> bool:
        """Check if the shared Redis cache backend is configured.

        Returns:
            True if CACHE_BACKEND is redis, False for the in-process cache
        """
        return self.cache_backend.lower() == "redis"

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.cache_ttl <= 0:
            raise ValueError("CACHE_TTL must be a positive number of seconds")

        if self.cache_backend.lower() not in ("memory", "redis"):
            raise ValueError(
                f"CACHE_BACKEND must be one of ['memory', 'redis'], got {self.cache_backend}"
            )

        if self.airtable_timeout <= 0:
            raise ValueError("AIRTABLE_TIMEOUT must be positive")

        if self.api_prefix and not self.api_prefix.startswith("/"):
            raise ValueError("API_PREFIX must start with '/'")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


def get_redis_client() -> redis.Redis:
    """Create a Redis client instance."""
    return redis.from_url(
        settings.redis_url,
        password=settings.redis_password,
        decode_responses=True,
    )
