"""Runtime configuration read from the environment (and `.env`, via dotenv)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


def _env_number(name: str, default, cast):
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw.strip())
    except ValueError as exc:
        raise ValueError(f"{name} must be a {cast.__name__}, got {raw!r}") from exc


@dataclass(frozen=True)
class RelaySettings:
    """Settings for the relay server, the confirmation engine, and alerts."""

    host: str = "0.0.0.0"
    port: int = 5000
    frontend_url: str = "http://localhost:3000"
    discord_webhook_url: Optional[str] = None
    notifications_enabled: bool = True
    alert_timeout_seconds: float = 10.0
    required_count: int = 10
    window_seconds: float = 10.0
    tracked_class: str = "person"
    max_detections: int = 1000
    database_dir: str = "database"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "RelaySettings":
        """Build settings from environment variables, loading `.env` first if present."""
        if load_env_file:
            load_dotenv()
        return cls(
            host=os.getenv("HOST", cls.host),
            port=_env_number("PORT", cls.port, int),
            frontend_url=os.getenv("FRONTEND_URL", cls.frontend_url),
            discord_webhook_url=os.getenv("DISCORD_WEBHOOK_URL") or None,
            notifications_enabled=_env_bool("DISCORD_NOTIFICATIONS_ENABLED", cls.notifications_enabled),
            alert_timeout_seconds=_env_number("ALERT_TIMEOUT_SECONDS", cls.alert_timeout_seconds, float),
            required_count=_env_number("REQUIRED_DETECTIONS", cls.required_count, int),
            window_seconds=_env_number("TIME_WINDOW_SECONDS", cls.window_seconds, float),
            tracked_class=os.getenv("TRACKING_OBJECT", cls.tracked_class),
            max_detections=_env_number("MAX_DETECTIONS", cls.max_detections, int),
            database_dir=os.getenv("DATABASE_DIR", cls.database_dir),
            log_level=os.getenv("LOG_LEVEL", cls.log_level),
        )
