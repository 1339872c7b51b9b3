"""Configuration settings for the Bagyo Watch service."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

import boto3
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger("bagyo.config")

# Shared SSM client for secret reads. Default to a region so imports do not
# fail in environments without AWS configuration (e.g. CI test runners).
_ssm_client = boto3.client(
    "ssm",
    region_name=os.getenv("AWS_REGION") or os.getenv("AWS_DEFAULT_REGION") or "ap-southeast-1",
)

OPENWEATHER_KEY_PARAMETER = "/bagyo/openweather/api_key"


def _get_bool(env_var: str, default: bool = False) -> bool:
    """Parse an environment variable into a boolean with a default."""

    value = os.getenv(env_var)
    if value is None:
        return default

    return value.lower() in {"1", "true", "yes", "on"}


def _get_optional_float(env_var: str) -> float | None:
    value = os.getenv(env_var)
    return float(value) if value else None


@lru_cache(maxsize=1)
def get_openweather_api_key() -> str:
    """Fetch the OpenWeatherMap API key from AWS SSM Parameter Store.

    Only consulted when ``OPENWEATHER_API_KEY`` is not set. The value is cached
    in-memory to avoid repeated SSM calls.
    """

    try:
        response = _ssm_client.get_parameter(
            Name=OPENWEATHER_KEY_PARAMETER, WithDecryption=True
        )
        value = response.get("Parameter", {}).get("Value")
    except (ClientError, BotoCoreError) as exc:  # pragma: no cover - AWS error passthrough
        logger.error("Failed to load OpenWeather API key from SSM: %s", exc)
        raise RuntimeError("Unable to load OpenWeather API key from SSM") from exc

    if not value:
        logger.error("Received empty OpenWeather API key from SSM")
        raise RuntimeError("OpenWeather API key not configured in SSM")

    return value


@dataclass
class Settings:
    """Service configuration loaded from environment variables."""

    bagyo_env: str = os.getenv("BAGYO_ENV", "local")
    log_level: str = os.getenv("BAGYO_LOG_LEVEL", "INFO")

    # Weather provider (OpenWeatherMap)
    openweather_base_url: str = os.getenv(
        "OPENWEATHER_BASE_URL", "https://api.openweathermap.org/data/2.5"
    )
    openweather_geocoding_url: str = os.getenv(
        "OPENWEATHER_GEOCODING_URL", "https://api.openweathermap.org/geo/1.0"
    )
    openweather_api_key: str = os.getenv("OPENWEATHER_API_KEY", "")
    weather_timeout: float = float(os.getenv("WEATHER_TIMEOUT", "10.0"))
    timezone: str = os.getenv("BAGYO_TIMEZONE", "Asia/Manila")
    country_label: str = os.getenv("BAGYO_COUNTRY_LABEL", "Philippines")

    # Location provider
    device_latitude: float | None = _get_optional_float("BAGYO_LATITUDE")
    device_longitude: float | None = _get_optional_float("BAGYO_LONGITUDE")
    location_timeout: float = float(os.getenv("LOCATION_TIMEOUT", "15.0"))

    # Refresh cycle
    refresh_interval_seconds: float = float(os.getenv("REFRESH_INTERVAL_SECONDS", "300"))
    provider_timeout: float = float(os.getenv("PROVIDER_TIMEOUT", "20.0"))
    enable_scheduler: bool = _get_bool("ENABLE_SCHEDULER", default=True)

    # Notifications
    notify_webhook_url: str | None = os.getenv("NOTIFY_WEBHOOK_URL")
    notify_timeout: float = float(os.getenv("NOTIFY_TIMEOUT", "5.0"))
    alert_dedup_minutes: int = int(os.getenv("ALERT_DEDUP_MINUTES", "0"))


settings = Settings()


def resolve_openweather_api_key() -> str:
    """Return the configured API key, falling back to SSM."""

    if settings.openweather_api_key:
        return settings.openweather_api_key
    return get_openweather_api_key()


__all__ = [
    "settings",
    "Settings",
    "get_openweather_api_key",
    "resolve_openweather_api_key",
]
