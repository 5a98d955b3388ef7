"""Startup-time helpers for safe config logging."""

import os

from paybridge.common.logging import logger

SECRET_MARKERS = ("KEY", "SECRET", "PASSWORD", "TOKEN")


def _safe_env(name: str) -> str:
    """Return env value, redacting secret-like variables down to set/unset."""

    value = os.getenv(name)
    if not value:
        return "<unset>"
    if any(marker in name for marker in SECRET_MARKERS):
        return "<redacted>"
    return value


def log_startup_config(service_name: str, keys: list[str], gateway_configured: bool) -> None:
    """Log selected env keys and whether payments go to the gateway or stay simulated."""

    config = {"service": service_name, "gateway_mode": "live" if gateway_configured else "simulation-only"}
    for key in keys:
        config[key] = _safe_env(key)
    logger.info("startup_config=%s", config)
