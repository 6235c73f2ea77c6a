from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - PERSISTENCE_BACKEND: 'memory' (default) or 'sqlite'
    - SQLITE_DB_PATH: path to sqlite db file. Default './data/tracker.db'
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - JWT_SECRET: secret used to sign access tokens
    - JWT_ALGORITHM: signing algorithm (default: HS256)
    - TOKEN_TTL_MINUTES: access token lifetime (default: 7 days)
    - LOG_LEVEL: root log level name (default: INFO)
    - TRACKER_API_URL: base URL the client talks to
    - SESSION_FILE: where the client keeps the logged-in identity record
    """

    persistence_backend: str = "memory"
    sqlite_db_path: str = "./data/tracker.db"
    cors_allow_origins: List[str] = field(default_factory=lambda: ["*"])
    jwt_secret: str = "change-me"
    jwt_algorithm: str = "HS256"
    token_ttl_minutes: int = 60 * 24 * 7
    log_level: str = "INFO"
    api_base_url: str = "http://localhost:8000"
    session_file: str = "./.tracker/session.json"


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_int(value: str, default: int) -> int:
    try:
        parsed = int(value.strip())
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    backend = _get_env("PERSISTENCE_BACKEND", "memory").strip().lower()
    if backend not in {"memory", "sqlite"}:
        backend = "memory"

    log_level = _get_env("LOG_LEVEL", "INFO").strip().upper()
    if log_level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        log_level = "INFO"

    return Settings(
        persistence_backend=backend,
        sqlite_db_path=_get_env("SQLITE_DB_PATH", "./data/tracker.db").strip(),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        jwt_secret=_get_env("JWT_SECRET", "change-me"),
        jwt_algorithm=_get_env("JWT_ALGORITHM", "HS256").strip(),
        token_ttl_minutes=_parse_int(_get_env("TOKEN_TTL_MINUTES", str(60 * 24 * 7)), 60 * 24 * 7),
        log_level=log_level,
        api_base_url=_get_env("TRACKER_API_URL", "http://localhost:8000").rstrip("/"),
        session_file=_get_env("SESSION_FILE", "./.tracker/session.json").strip(),
    )
