"""Map overlay geometry produced by the storm projector."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class GeoPoint(BaseModel):
    """A latitude/longitude pair."""

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., description="Latitude in decimal degrees")
    longitude: float = Field(..., description="Longitude in decimal degrees")


class ForecastPosition(GeoPoint):
    """A dead-reckoned storm position ``hours_ahead`` hours from now."""

    hours_ahead: int = Field(..., description="Forecast offset in hours; 0 is the current position")


class VortexBand(BaseModel):
    """One spiral-shaped intensity band of the storm vortex."""

    model_config = ConfigDict(frozen=True)

    band_index: int = Field(..., description="0 is the innermost band")
    intensity: float = Field(..., description="Normalized intensity, 1.0 at the core")
    ring: list[GeoPoint] = Field(..., description="Closed polygon ring")
    fill_color: str = Field(..., description="RGBA fill color")
    stroke_color: str = Field(..., description="RGBA stroke color")
    stroke_width: float = Field(default=1.5, description="Stroke width in pixels")


class WindFlowLine(BaseModel):
    """Decorative inflow polyline around the storm center."""

    model_config = ConfigDict(frozen=True)

    points: list[GeoPoint] = Field(..., description="Polyline vertices, outermost first")


class PrecipitationZone(BaseModel):
    """A circular rain area for map display."""

    model_config = ConfigDict(frozen=True)

    center: GeoPoint = Field(..., description="Circle center")
    radius_m: float = Field(..., description="Circle radius in meters")
    fill_color: str = Field(..., description="RGBA fill color")
    stroke_color: str = Field(..., description="RGBA stroke color")
    precipitation_mm: Optional[float] = Field(
        default=None, description="Forecast precipitation behind the zone, if any"
    )
    day_index: Optional[int] = Field(
        default=None, description="Forecast day index; None for the current zone"
    )


class ProjectionResult(BaseModel):
    """All derived map overlays for one refresh cycle."""

    model_config = ConfigDict(frozen=True)

    forecast_positions: list[ForecastPosition] = Field(default_factory=list)
    vortex_bands: list[VortexBand] = Field(default_factory=list)
    wind_flow_lines: list[WindFlowLine] = Field(default_factory=list)
    precipitation_zones: list[PrecipitationZone] = Field(default_factory=list)
    current_precipitation_zone: Optional[PrecipitationZone] = Field(default=None)


__all__ = [
    "ForecastPosition",
    "GeoPoint",
    "PrecipitationZone",
    "ProjectionResult",
    "VortexBand",
    "WindFlowLine",
]
