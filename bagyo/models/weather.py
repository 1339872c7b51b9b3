"""Normalized location and weather reading models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Condition(str, Enum):
    """Main weather condition group reported by the provider."""

    CLEAR = "Clear"
    CLOUDS = "Clouds"
    RAIN = "Rain"
    DRIZZLE = "Drizzle"
    THUNDERSTORM = "Thunderstorm"
    OTHER = "Other"

    @classmethod
    def parse(cls, raw: str | None) -> "Condition":
        """Map a provider condition name onto the known set."""

        for member in cls:
            if raw == member.value:
                return member
        return cls.OTHER

    @property
    def is_precipitating(self) -> bool:
        return self in PRECIPITATING_CONDITIONS


PRECIPITATING_CONDITIONS = frozenset(
    {Condition.RAIN, Condition.DRIZZLE, Condition.THUNDERSTORM}
)


class Location(BaseModel):
    """A resolved device location."""

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., description="Latitude in decimal degrees")
    longitude: float = Field(..., description="Longitude in decimal degrees")
    label: str = Field(..., description="Human-readable place label")
    city: Optional[str] = Field(default=None, description="City or municipality")
    province: Optional[str] = Field(default=None, description="Province or region")


class Reading(BaseModel):
    """One normalized weather snapshot for a location.

    Forecast entries reuse this model with ``timestamp`` set to the forecast
    sample time.
    """

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(..., description="Time of the observation or forecast sample (UTC)")
    location: Location = Field(..., description="Location the reading applies to")
    wind_speed_ms: float = Field(..., description="Sustained wind speed in meters per second")
    wind_direction_deg: Optional[float] = Field(
        default=None,
        description="Wind heading in degrees clockwise from north; None when not reported",
    )
    condition: Condition = Field(default=Condition.CLEAR, description="Main condition group")
    humidity_pct: float = Field(default=0.0, description="Relative humidity in percent")
    precipitation_mm: float = Field(default=0.0, description="Precipitation amount in millimeters")
    temperature_c: Optional[float] = Field(default=None, description="Air temperature in Celsius")
    description: Optional[str] = Field(default=None, description="Provider text summary")

    @property
    def wind_speed_kmh(self) -> int:
        """Wind speed converted to km/h, rounded to a whole number."""
        return round(self.wind_speed_ms * 3.6)


__all__ = ["Condition", "Location", "PRECIPITATING_CONDITIONS", "Reading"]
