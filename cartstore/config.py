"""Runtime settings read from the environment (and a local .env file)."""
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root if present; real env vars take precedence
load_dotenv(Path(__file__).resolve().parent.parent / ".env", override=False)

DEFAULT_CART_KEY = "cart:products"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Settings:
    upstash_redis_rest_url: str
    upstash_redis_rest_token: str
    cart_key: str = DEFAULT_CART_KEY
    cart_ttl_seconds: int | None = None  # None = never expire
    log_level: str = "INFO"

    @property
    def redis_configured(self) -> bool:
        return bool(self.upstash_redis_rest_url and self.upstash_redis_rest_token)


def _parse_ttl(raw: str) -> int | None:
    try:
        ttl = int(raw)
    except ValueError:
        raise ValueError(f"CART_TTL_SECONDS must be an integer, got {raw!r}") from None
    if ttl < 0:
        raise ValueError("CART_TTL_SECONDS must be >= 0")
    return ttl or None


def _parse_log_level(raw: str) -> str:
    level = raw.strip().upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {raw!r}")
    return level


def load_settings() -> Settings:
    """Build settings from the current environment."""
    return Settings(
        upstash_redis_rest_url=os.environ.get("UPSTASH_REDIS_REST_URL", ""),
        upstash_redis_rest_token=os.environ.get("UPSTASH_REDIS_REST_TOKEN", ""),
        cart_key=os.environ.get("CART_STORAGE_KEY") or DEFAULT_CART_KEY,
        cart_ttl_seconds=_parse_ttl(os.environ.get("CART_TTL_SECONDS", "0")),
        log_level=_parse_log_level(os.environ.get("LOG_LEVEL", "INFO")),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached settings for the process."""
    return load_settings()
