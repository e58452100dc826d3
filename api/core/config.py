"""
Environment-driven settings.

Every value is read on demand so tests (and operators) can change the
environment without re-importing modules.
"""

from __future__ import annotations

import os

DEFAULT_JWT_SECRET = "dev-change-this-secret-before-deploying"
DEFAULT_OVERPASS_API_URL = "https://overpass-api.de/api/interpreter"
DEFAULT_CORS_ORIGINS = ("http://localhost:3000", "http://127.0.0.1:3000")


def env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def env_str(name: str, default: str) -> str:
    return os.environ.get(name, default).strip() or default


def jwt_secret() -> str:
    # Local default keeps development simple.
    # In production, set JWT_SECRET in environment.
    return env_str("JWT_SECRET", DEFAULT_JWT_SECRET)


def jwt_algorithm() -> str:
    return env_str("JWT_ALG", "HS256")


def jwt_expire_minutes() -> int:
    return env_int("JWT_EXPIRE_MIN", 60)


def bcrypt_rounds() -> int:
    rounds = env_int("BCRYPT_ROUNDS", 10)
    # bcrypt only accepts cost factors in [4, 31].
    return min(max(rounds, 4), 31)


def overpass_api_url() -> str:
    return env_str("OVERPASS_API_URL", DEFAULT_OVERPASS_API_URL)


def overpass_timeout_s() -> float:
    return env_float("OVERPASS_TIMEOUT_S", 30.0)


def cors_origins() -> list[str]:
    raw = os.environ.get("CORS_ORIGINS", "").strip()
    if not raw:
        return list(DEFAULT_CORS_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def log_level() -> str:
    return env_str("LOG_LEVEL", "INFO")
