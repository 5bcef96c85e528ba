"""Environment-driven settings for the storefront demo."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional, Tuple

from dotenv import load_dotenv


# Load environment variables from .env if present
load_dotenv()

LIVE_MODE = "live_mode"
TEST_MODE = "test_mode"

DEFAULT_PRODUCT_ID = "pdt_Wi9yels9t5RHrfN4BjxNw"
DEFAULT_PORT = 3000
DEFAULT_TIMEOUT_SEC = 5.0


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    cleaned = value.strip()
    return cleaned or None


def _env_float(name: str, default: float) -> float:
    raw = _clean(os.getenv(name))
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _env_int(name: str, default: int) -> int:
    raw = _clean(os.getenv(name))
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    api_key: Optional[str]
    environment: str
    return_url: Optional[str]
    webhook_key: Optional[str]
    default_product_id: str
    provider_timeout: float
    host: str
    port: int
    cors_origins: Tuple[str, ...]

    @property
    def is_live(self) -> bool:
        return self.environment == LIVE_MODE

    @classmethod
    def from_env(cls) -> "Settings":
        environment = _clean(os.getenv("DODO_PAYMENTS_ENVIRONMENT")) or TEST_MODE
        raw_origins = os.getenv("CORS_ALLOW_ORIGINS", "") or ""
        origins = tuple(o.strip() for o in raw_origins.split(",") if o.strip()) or ("*",)
        return cls(
            api_key=_clean(os.getenv("DODO_PAYMENTS_API_KEY")),
            environment=environment,
            return_url=_clean(os.getenv("DODO_PAYMENTS_RETURN_URL")),
            webhook_key=_clean(os.getenv("DODO_PAYMENTS_WEBHOOK_KEY")),
            default_product_id=_clean(os.getenv("DEFAULT_PRODUCT_ID")) or DEFAULT_PRODUCT_ID,
            provider_timeout=_env_float("DODO_PAYMENTS_TIMEOUT_SEC", DEFAULT_TIMEOUT_SEC),
            host=_clean(os.getenv("HOST")) or "0.0.0.0",
            port=_env_int("PORT", DEFAULT_PORT),
            cors_origins=origins,
        )


def get_settings() -> Settings:
    """Read settings from the current environment (no caching, tests monkeypatch env)."""
    return Settings.from_env()


__all__ = ["LIVE_MODE", "TEST_MODE", "Settings", "get_settings"]
