"""Weather ingestion using the OpenWeatherMap 2.5 API."""

from __future__ import annotations

from datetime import date, datetime, timezone, tzinfo
import logging
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import httpx

from bagyo.config import resolve_openweather_api_key, settings
from bagyo.errors import ProviderUnavailable
from bagyo.models.weather import Condition, Location, Reading

logger = logging.getLogger("bagyo.ingestors.weather")

FORECAST_DAYS = 5
PREFERRED_FORECAST_HOUR = 12


def _resolve_timezone(name: str) -> tzinfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %s; bucketing forecast days in UTC", name)
        return timezone.utc


def _parse_entry(
    item: dict[str, Any], location: Location, precipitation_window: str
) -> Reading:
    """Normalize one OpenWeather observation or forecast item."""

    main = item.get("main") or {}
    weather = (item.get("weather") or [{}])[0]
    wind = item.get("wind") or {}
    rain = item.get("rain") or {}
    timestamp = (
        datetime.fromtimestamp(item["dt"], tz=timezone.utc)
        if item.get("dt") is not None
        else datetime.now(timezone.utc)
    )

    return Reading(
        timestamp=timestamp,
        location=location,
        wind_speed_ms=float(wind["speed"]),
        wind_direction_deg=wind.get("deg"),
        condition=Condition.parse(weather.get("main")),
        humidity_pct=float(main.get("humidity") or 0.0),
        precipitation_mm=float(rain.get(precipitation_window) or 0.0),
        temperature_c=main.get("temp"),
        description=weather.get("description"),
    )


def bucket_forecast_days(
    items: list[dict[str, Any]], tz: tzinfo, limit: int = FORECAST_DAYS
) -> list[dict[str, Any]]:
    """Keep one forecast item per calendar day, preferring the midday sample."""

    by_day: dict[date, dict[str, Any]] = {}
    for item in items:
        local = datetime.fromtimestamp(item["dt"], tz=timezone.utc).astimezone(tz)
        day = local.date()
        if day not in by_day or local.hour == PREFERRED_FORECAST_HOUR:
            by_day[day] = item
    return list(by_day.values())[:limit]


class OpenWeatherIngestor:
    """Fetch current conditions and a daily forecast from OpenWeatherMap."""

    def __init__(
        self,
        *,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        timezone_name: str | None = None,
        country_label: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.openweather_base_url).rstrip("/")
        self.api_key = api_key
        self.timeout = timeout or settings.weather_timeout
        self.tz = _resolve_timezone(timezone_name or settings.timezone)
        self.country_label = country_label or settings.country_label
        self.transport = transport

    async def fetch_reading(self, lat: float, lon: float) -> Reading:
        payload = await self._get("weather", lat, lon)
        name = payload.get("name")
        location = Location(
            latitude=lat,
            longitude=lon,
            label=f"{name}, {self.country_label}" if name else self.country_label,
            city=name or None,
        )
        try:
            reading = _parse_entry(payload, location, "1h")
        except (KeyError, TypeError, ValueError) as exc:
            logger.error("Malformed weather payload: %s", exc)
            raise ProviderUnavailable("Weather payload malformed") from exc

        logger.debug("Weather reading ingested: %s", reading)
        return reading

    async def fetch_forecast(self, lat: float, lon: float) -> list[Reading]:
        payload = await self._get("forecast", lat, lon)
        items = payload.get("list") or []
        location = Location(latitude=lat, longitude=lon, label=self.country_label)

        try:
            forecast = [
                _parse_entry(item, location, "3h")
                for item in bucket_forecast_days(items, self.tz)
            ]
        except (KeyError, TypeError, ValueError) as exc:
            logger.error("Malformed forecast payload: %s", exc)
            raise ProviderUnavailable("Forecast payload malformed") from exc

        logger.debug("Forecast ingested: %s days from %s items", len(forecast), len(items))
        return forecast

    async def _get(self, endpoint: str, lat: float, lon: float) -> dict[str, Any]:
        try:
            api_key = self.api_key or resolve_openweather_api_key()
        except RuntimeError as exc:
            raise ProviderUnavailable("Weather API key unavailable") from exc

        params = {"lat": lat, "lon": lon, "appid": api_key, "units": "metric"}

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.get(f"{self.base_url}/{endpoint}", params=params)
                response.raise_for_status()
        except httpx.TimeoutException as exc:
            logger.error("Weather request timed out: %s", exc)
            raise ProviderUnavailable("Weather service timeout") from exc
        except httpx.HTTPStatusError as exc:
            logger.error(
                "Weather service returned error: status=%s body=%s",
                exc.response.status_code,
                exc.response.text,
            )
            raise ProviderUnavailable("Weather service error") from exc
        except httpx.RequestError as exc:
            logger.error("Weather request failed: %s", exc)
            raise ProviderUnavailable("Weather request failed") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            logger.error("Failed to parse weather JSON response: %s", exc)
            raise ProviderUnavailable("Weather response was not JSON") from exc

        if not isinstance(payload, dict):
            raise ProviderUnavailable("Weather response had an unexpected shape")
        return payload


__all__ = ["OpenWeatherIngestor", "bucket_forecast_days"]
