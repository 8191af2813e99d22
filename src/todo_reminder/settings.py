from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - PORT: HTTP listen port. Default 3000
    - HOST: HTTP listen address. Default '0.0.0.0'
    - REMINDER_INTERVAL_SECONDS: period of the reminder sweep. Default 15
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - LOG_LEVEL: root log level name. Default 'INFO'
    """

    port: int = 3000
    host: str = "0.0.0.0"
    reminder_interval_seconds: float = 15.0
    cors_allow_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value.strip() == "":
        return default
    return value


def _parse_port(value: str, default: int) -> int:
    try:
        port = int(value.strip())
    except ValueError:
        return default
    if not (0 < port < 65536):
        return default
    return port


def _parse_interval(value: str, default: float) -> float:
    try:
        interval = float(value.strip())
    except ValueError:
        return default
    # Zero, negative, inf and nan all fall back
    if not (0 < interval < float("inf")):
        return default
    return interval


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
    log_level = _get_env("LOG_LEVEL", "INFO").strip().upper()
    if log_level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
        log_level = "INFO"

    return Settings(
        port=_parse_port(_get_env("PORT", "3000"), 3000),
        host=_get_env("HOST", "0.0.0.0").strip(),
        reminder_interval_seconds=_parse_interval(_get_env("REMINDER_INTERVAL_SECONDS", "15"), 15.0),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        log_level=log_level,
    )
