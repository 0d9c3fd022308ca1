"""Environment driven configuration for the Route widget."""
from __future__ import annotations

import logging
import os

ZABBIX_URL = os.environ.get("ZABBIX_URL", "http://localhost/zabbix")
ZABBIX_API_TOKEN = os.environ.get("ZABBIX_API_TOKEN")  # export ZABBIX_API_TOKEN=xxxx
ZABBIX_TIMEOUT = float(os.environ.get("ZABBIX_TIMEOUT", "30"))

DEFAULT_TIMEZONE = os.environ.get("WMROUTE_TIMEZONE", "UTC")

TILE_URL = os.environ.get(
    "WMROUTE_TILE_URL", "https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png"
)
TILE_ATTRIBUTION = "&copy; OpenStreetMap contributors"

# Seconds to wait after the first paint so entrance animations can finish.
READY_SETTLE_DELAY = float(os.environ.get("WMROUTE_READY_DELAY", "0.3"))

LOG_LEVEL = os.environ.get("WMROUTE_LOG_LEVEL", "INFO")
DEBUG_MODE = os.environ.get("WMROUTE_DEBUG", "").lower() in {"1", "true", "yes"}


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for the command line entry points."""

    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


__all__ = [
    "DEBUG_MODE",
    "DEFAULT_TIMEZONE",
    "LOG_LEVEL",
    "READY_SETTLE_DELAY",
    "TILE_ATTRIBUTION",
    "TILE_URL",
    "ZABBIX_API_TOKEN",
    "ZABBIX_TIMEOUT",
    "ZABBIX_URL",
    "configure_logging",
]
