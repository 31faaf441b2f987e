import os
from dataclasses import dataclass
from functools import lru_cache

import redis.asyncio as redis
from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Provider
    gemini_api_key: str | None = os.getenv("GEMINI_API_KEY")
    gemini_base_url: str = os.getenv(
        "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
    )
    # Header carrying the API key; "Authorization" sends "Bearer <key>"
    gemini_auth_header: str = os.getenv("GEMINI_AUTH_HEADER", "x-goog-api-key")
    default_model: str = os.getenv("DEFAULT_MODEL", "gemini-2.5-flash-image")
    request_timeout: float = float(os.getenv("REQUEST_TIMEOUT", "120"))

    # Cache
    cache_ttl: float = float(os.getenv("CACHE_TTL", "1800"))  # 30 minutes
    cache_capacity: int = int(os.getenv("CACHE_CAPACITY", "50"))

    # Retry (seconds)
    max_retries: int = int(os.getenv("MAX_RETRIES", "2"))
    retry_base_delay: float = float(os.getenv("RETRY_BASE_DELAY", "1.0"))
    retry_max_delay: float = float(os.getenv("RETRY_MAX_DELAY", "30.0"))
    retry_jitter: float = float(os.getenv("RETRY_JITTER", "1.0"))
    retry_unknown_errors: bool = os.getenv("RETRY_UNKNOWN_ERRORS", "false").lower() == "true"

    # Variation fan-out
    variation_concurrency: int = int(os.getenv("VARIATION_CONCURRENCY", "2"))

    # Credentials
    credential_backend: str = os.getenv("CREDENTIAL_BACKEND", "env")  # "env" or "redis"
    credential_key_name: str = os.getenv("CREDENTIAL_KEY_NAME", "gemini_api_key")
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    redis_password: str | None = os.getenv("REDIS_PASSWORD")

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    api_reload: bool = os.getenv("API_RELOAD", "true").lower() == "true"

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.cache_ttl <= 0:
            raise ValueError("CACHE_TTL must be positive")

        if self.cache_capacity < 1:
            raise ValueError("CACHE_CAPACITY must be at least 1")

        if self.max_retries < 0:
            raise ValueError("MAX_RETRIES must not be negative")

        if self.retry_base_delay < 0 or self.retry_jitter < 0:
            raise ValueError("RETRY_BASE_DELAY and RETRY_JITTER must not be negative")

        if self.retry_max_delay < self.retry_base_delay:
            raise ValueError("RETRY_MAX_DELAY must be >= RETRY_BASE_DELAY")

        if self.variation_concurrency < 1:
            raise ValueError("VARIATION_CONCURRENCY must be at least 1")

        if self.credential_backend not in ("env", "redis"):
            raise ValueError(
                f"CREDENTIAL_BACKEND must be 'env' or 'redis', got {self.credential_backend!r}"
            )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


def get_redis_client() -> redis.Redis:
    """Create an asyncio Redis client instance."""
    return redis.from_url(
        settings.redis_url,
        password=settings.redis_password,
        decode_responses=True,
    )
