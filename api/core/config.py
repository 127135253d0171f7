"""
Process configuration.

Settings are read from the environment once and then treated as read-only.
Routes receive them through `Depends(get_settings)` so tests can override.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

DEFAULT_SYSTEM_USER_ID = "b42558e8-6c12-4eb2-9ee1-172cee858ca1"
DEFAULT_INTERNAL_API_TOKEN = "your-secret-token-here"


def _env_str(name: str, default: str) -> str:
    return os.environ.get(name, "").strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    items = tuple(item.strip() for item in raw.split(",") if item.strip())
    return items or default


@dataclass(frozen=True)
class Settings:
    database_url: str
    system_user_id: str = DEFAULT_SYSTEM_USER_ID
    internal_api_token: str = DEFAULT_INTERNAL_API_TOKEN
    cors_origins: tuple[str, ...] = ("*",)
    db_pool_min_size: int = 1
    db_pool_max_size: int = 5
    db_command_timeout: int = 30
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3000


def load_settings() -> Settings:
    # DATABASE_URL may be empty here; the pool refuses to start without it.
    return Settings(
        database_url=os.environ.get("DATABASE_URL", "").strip(),
        system_user_id=_env_str("SYSTEM_USER_ID", DEFAULT_SYSTEM_USER_ID),
        internal_api_token=_env_str("INTERNAL_API_TOKEN", DEFAULT_INTERNAL_API_TOKEN),
        cors_origins=_env_list("CORS_ORIGINS", ("*",)),
        db_pool_min_size=_env_int("DB_POOL_MIN_SIZE", 1),
        db_pool_max_size=_env_int("DB_POOL_MAX_SIZE", 5),
        db_command_timeout=_env_int("DB_COMMAND_TIMEOUT", 30),
        log_level=_env_str("LOG_LEVEL", "INFO").upper(),
        host=_env_str("HOST", "0.0.0.0"),
        port=_env_int("PORT", 3000),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
