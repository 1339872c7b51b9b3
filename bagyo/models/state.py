"""Published threat state consumed by the presentation layer."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from bagyo.domain import SignalLevel
from bagyo.models.alerts import Alert
from bagyo.models.projection import ProjectionResult
from bagyo.models.weather import Location, Reading


class ThreatState(BaseModel):
    """Snapshot published once per completed refresh cycle."""

    model_config = ConfigDict(frozen=True)

    reading: Optional[Reading] = Field(default=None, description="Latest successful reading")
    forecast: list[Reading] = Field(default_factory=list, description="Day-bucketed forecast")
    location: Optional[Location] = Field(default=None, description="Location used for the cycle")
    signal_level: SignalLevel = Field(default=SignalLevel.NONE, description="Classified signal")
    signal_description: str = Field(default="", description="Localized signal description")
    wind_compass: Optional[str] = Field(default=None, description="Wind heading as a compass point")
    alert_history: list[Alert] = Field(default_factory=list, description="Alerts, newest first")
    projection: ProjectionResult = Field(default_factory=ProjectionResult)
    loading: bool = Field(default=False, description="A refresh cycle is in flight")
    stale: bool = Field(
        default=False, description="The last cycle could not refresh the reading"
    )
    updated_at: Optional[datetime] = Field(default=None, description="When the state was built")


class SignalLevelInfo(BaseModel):
    """Reference row describing one signal level."""

    level: int = Field(..., description="Signal level 0-5")
    description: str = Field(..., description="Localized description")
    min_wind_speed_ms: float = Field(..., description="Inclusive lower bound (m/s)")
    max_wind_speed_ms: Optional[float] = Field(
        default=None, description="Exclusive upper bound (m/s); None for the top level"
    )


class LocationUpdate(BaseModel):
    """Device coordinates reported by a client."""

    latitude: float = Field(..., ge=-90, le=90, description="Latitude in decimal degrees")
    longitude: float = Field(..., ge=-180, le=180, description="Longitude in decimal degrees")


__all__ = ["LocationUpdate", "SignalLevelInfo", "ThreatState"]
