from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple


_DATABASE_URL_ENV = "DATABASE_URL"
_JWT_SECRET_ENV = "JWT_SECRET_KEY"
_JWT_ALGORITHM_ENV = "JWT_ALGORITHM"
_JWT_EXPIRE_ENV = "JWT_EXPIRE_MINUTES"
_TIMEZONE_ENV = "MILL_TIMEZONE"
_CORS_ORIGINS_ENV = "CORS_ORIGINS"
_LOG_LEVEL_ENV = "LOG_LEVEL"

_DEFAULT_CORS_ORIGINS = (
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
)


@dataclass(frozen=True)
class Settings:
    database_url: str
    jwt_secret_key: str
    jwt_algorithm: str
    jwt_expire_minutes: int
    timezone: str
    cors_origins: Tuple[str, ...]
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_list_env(name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    value = os.getenv(name)
    if value is None:
        return default
    items = tuple(part.strip() for part in value.split(",") if part.strip())
    return items or default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        database_url=_read_str_env(_DATABASE_URL_ENV, "sqlite:///./tmp/olive_mill.db"),
        jwt_secret_key=_read_str_env(_JWT_SECRET_ENV, "change-me-olive-mill"),
        jwt_algorithm=_read_str_env(_JWT_ALGORITHM_ENV, "HS256"),
        jwt_expire_minutes=_read_positive_int(_JWT_EXPIRE_ENV, 24 * 60),
        timezone=_read_str_env(_TIMEZONE_ENV, "Africa/Tunis"),
        cors_origins=_read_list_env(_CORS_ORIGINS_ENV, _DEFAULT_CORS_ORIGINS),
        log_level=_read_log_level("INFO"),
    )
