"""Configuration for the bank portal client."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_API_BASE_URL = "http://localhost:9090/api"
DEFAULT_AUTH_BASE_URL = "http://localhost:9090/auth"
DEFAULT_SESSION_PATH = "~/.bank_portal/session.json"


@dataclass(frozen=True)
class PortalConfig:
    api_base_url: str = DEFAULT_API_BASE_URL
    auth_base_url: str = DEFAULT_AUTH_BASE_URL
    timeout_seconds: float = 10.0
    notification_poll_seconds: float = 60.0
    session_path: Path = Path(DEFAULT_SESSION_PATH).expanduser()
    log_level: str = "INFO"
    config_path: str | None = None


def load_config() -> PortalConfig:
    config_path = os.getenv("BANK_PORTAL_CONFIG_PATH")
    if config_path:
        _load_env_file(config_path)

    return PortalConfig(
        api_base_url=os.getenv("BANK_API_BASE_URL", DEFAULT_API_BASE_URL).rstrip("/"),
        auth_base_url=os.getenv("BANK_AUTH_BASE_URL", DEFAULT_AUTH_BASE_URL).rstrip(
            "/"
        ),
        timeout_seconds=_get_float("BANK_API_TIMEOUT", 10.0),
        notification_poll_seconds=_get_float("BANK_NOTIFICATION_POLL_SECONDS", 60.0),
        session_path=Path(
            os.getenv("BANK_SESSION_PATH", DEFAULT_SESSION_PATH)
        ).expanduser(),
        log_level=os.getenv("BANK_LOG_LEVEL", "INFO").upper(),
        config_path=config_path,
    )


def _get_float(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None or value == "":
        return default
    try:
        parsed = float(value)
    except ValueError:
        return default
    if parsed <= 0:
        return default
    return parsed


def _load_env_file(path: str) -> None:
    env_path = Path(path)
    if not env_path.exists():
        return
    for line in env_path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key and key not in os.environ:
            os.environ[key] = value
