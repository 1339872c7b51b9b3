"""Device location resolution with reverse geocoding and a Manila fallback."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from bagyo.config import resolve_openweather_api_key, settings
from bagyo.models.weather import Location

logger = logging.getLogger("bagyo.ingestors.location")

DEFAULT_LOCATION = Location(
    latitude=14.5995,
    longitude=120.9842,
    label="Manila, Metro Manila, Philippines",
    city="Manila",
    province="Metro Manila",
)


class LocationIngestor:
    """Resolve the device's coordinates into a labelled location.

    Coordinates come from configuration or from ``update_position`` (a client
    reporting its GPS fix). Without coordinates the default location is used,
    the same as a denied location permission on a handset.
    """

    def __init__(
        self,
        *,
        latitude: float | None = None,
        longitude: float | None = None,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.latitude = latitude if latitude is not None else settings.device_latitude
        self.longitude = longitude if longitude is not None else settings.device_longitude
        self.base_url = (base_url or settings.openweather_geocoding_url).rstrip("/")
        self.api_key = api_key
        self.timeout = timeout or settings.location_timeout
        self.transport = transport

    def update_position(self, latitude: float, longitude: float) -> None:
        self.latitude = latitude
        self.longitude = longitude
        logger.info("Device position updated to %.4f, %.4f", latitude, longitude)

    async def fetch_location(self) -> Location:
        if self.latitude is None or self.longitude is None:
            logger.warning("No device coordinates available; using default location (Manila)")
            return DEFAULT_LOCATION

        lat, lon = self.latitude, self.longitude
        place = await self._reverse_geocode(lat, lon)
        if place is None:
            return Location(
                latitude=lat,
                longitude=lon,
                label="Unknown Location",
                city="Unknown",
                province=settings.country_label,
            )

        city = place.get("name") or "Unknown"
        province = place.get("state") or place.get("county") or settings.country_label
        return Location(
            latitude=lat,
            longitude=lon,
            label=place.get("display_name") or f"{city}, {settings.country_label}",
            city=city,
            province=province,
        )

    async def _reverse_geocode(self, lat: float, lon: float) -> dict[str, Any] | None:
        try:
            api_key = self.api_key or resolve_openweather_api_key()
        except RuntimeError as exc:
            logger.warning("Reverse geocoding skipped: %s", exc)
            return None

        params = {"lat": lat, "lon": lon, "limit": 1, "appid": api_key}
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.get(f"{self.base_url}/reverse", params=params)
                response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            logger.error("Reverse geocoding failed: %s", exc)
            return None
        except ValueError as exc:
            logger.error("Failed to parse geocoding JSON response: %s", exc)
            return None

        if not isinstance(payload, list) or not payload or not isinstance(payload[0], dict):
            logger.warning("Reverse geocoding returned no match for %.4f, %.4f", lat, lon)
            return None
        return payload[0]


__all__ = ["DEFAULT_LOCATION", "LocationIngestor"]
