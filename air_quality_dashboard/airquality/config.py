"""
Configuration module for the Air Quality Dashboard.

Settings are read from environment variables, optionally loaded from a .env
file. Explicit constructor arguments always take precedence over the
environment.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

VALID_SOURCE_MODES = ("mock", "http")

DEFAULT_API_BASE_URL = "http://localhost:8080/api"
DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_TOP_N = 10
DEFAULT_REFRESH_INTERVAL_SECONDS = 60


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


@dataclass(frozen=True)
class DashboardConfig:
    """
    Runtime settings shared by the data source, the controllers and the UI.

    Attributes:
        source_mode: "mock" for built-in sample payloads, "http" for the REST backend
        api_base_url: Base URL of the REST backend (no trailing slash)
        request_timeout: Per-request timeout in seconds
        top_n: Number of cities shown in the "most polluted" chart
        refresh_interval_seconds: UI auto-refresh cadence
        log_level: Level name passed to setup_logging
        log_file: Optional log file path
    """

    source_mode: str = "mock"
    api_base_url: str = DEFAULT_API_BASE_URL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    top_n: int = DEFAULT_TOP_N
    refresh_interval_seconds: int = DEFAULT_REFRESH_INTERVAL_SECONDS
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @classmethod
    def from_env(cls, source_mode: Optional[str] = None, api_base_url: Optional[str] = None) -> "DashboardConfig":
        """
        Builds a configuration from AIRQUALITY_* environment variables.

        Args:
            source_mode: Optional override for AIRQUALITY_SOURCE_MODE
            api_base_url: Optional override for AIRQUALITY_API_BASE_URL

        Returns:
            DashboardConfig with invalid values replaced by defaults
        """
        # explicit parameter > environment variable > default
        env_mode = os.getenv("AIRQUALITY_SOURCE_MODE", "").strip().lower()
        mode = source_mode.lower() if source_mode else env_mode
        if mode not in VALID_SOURCE_MODES:
            mode = "mock"

        base_url = api_base_url or os.getenv("AIRQUALITY_API_BASE_URL") or DEFAULT_API_BASE_URL

        return cls(
            source_mode=mode,
            api_base_url=base_url.rstrip("/"),
            request_timeout=_env_float("AIRQUALITY_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT),
            top_n=_env_int("AIRQUALITY_TOP_N", DEFAULT_TOP_N),
            refresh_interval_seconds=_env_int(
                "AIRQUALITY_REFRESH_INTERVAL_SECONDS", DEFAULT_REFRESH_INTERVAL_SECONDS
            ),
            log_level=os.getenv("AIRQUALITY_LOG_LEVEL", "INFO").upper(),
            log_file=os.getenv("AIRQUALITY_LOG_FILE") or None,
        )
