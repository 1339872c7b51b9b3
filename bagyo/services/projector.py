"""Storm path and hazard geometry for map display.

All functions here are pure: they perform no I/O and build fresh result
objects on every call.

The forecast path is straight-line dead reckoning from the current wind speed
and heading. It ignores Coriolis curvature, recurvature and deceleration, so
it is a display aid and not a meteorological track forecast.
"""

from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Iterable, Optional, Sequence

from bagyo.domain import SignalLevel
from bagyo.models.projection import (
    ForecastPosition,
    GeoPoint,
    PrecipitationZone,
    ProjectionResult,
    VortexBand,
    WindFlowLine,
)
from bagyo.models.weather import Location, Reading

KM_PER_DEGREE: float = 111.0
"""Approximate length of one degree of latitude."""

FORECAST_HOURS: tuple[int, ...] = (6, 12, 18, 24)

DEFAULT_VORTEX_HEADING_DEG: float = 45.0
"""Spiral orientation used when the provider reports no wind heading."""


@dataclass(frozen=True)
class VortexParams:
    """Shape of the spiral vortex bands."""

    num_bands: int = 10
    points_per_band: int = 120
    spiral_turns: float = 3.0
    twist: float = 0.25        # extra rotation per radian of base angle
    eye_fraction: float = 0.1  # eye radius as a fraction of the max radius
    km_per_signal: float = 2.0


@dataclass(frozen=True)
class WindFlowParams:
    """Shape of the decorative inflow lines."""

    num_lines: int = 24
    segments: int = 3
    half_turns: float = 1.5
    reach: float = 2.2          # multiple of the vortex radius
    start_fraction: float = 0.85
    end_fraction: float = 0.25


DEFAULT_VORTEX = VortexParams()
DEFAULT_WIND_FLOW = WindFlowParams()

# (intensity strictly above, fill, stroke); core first, the last row catches the rim.
VORTEX_PALETTE: tuple[tuple[float, str, str], ...] = (
    (0.88, "rgba(147, 51, 234, 0.65)", "rgba(147, 51, 234, 0.95)"),  # purple
    (0.75, "rgba(219, 39, 119, 0.6)", "rgba(219, 39, 119, 0.9)"),    # magenta
    (0.6, "rgba(239, 68, 68, 0.55)", "rgba(239, 68, 68, 0.85)"),     # red
    (0.45, "rgba(249, 115, 22, 0.5)", "rgba(249, 115, 22, 0.8)"),    # orange
    (0.3, "rgba(234, 179, 8, 0.45)", "rgba(234, 179, 8, 0.7)"),      # yellow
    (-math.inf, "rgba(34, 197, 94, 0.4)", "rgba(34, 197, 94, 0.6)"),  # green
)

# (precipitation mm strictly above, fill, stroke); heaviest first.
RAIN_PALETTE: tuple[tuple[float, str, str], ...] = (
    (20.0, "rgba(219, 39, 119, 0.4)", "rgba(219, 39, 119, 0.7)"),
    (10.0, "rgba(249, 115, 22, 0.35)", "rgba(249, 115, 22, 0.6)"),
    (5.0, "rgba(234, 179, 8, 0.3)", "rgba(234, 179, 8, 0.5)"),
    (2.0, "rgba(34, 197, 94, 0.25)", "rgba(34, 197, 94, 0.4)"),
    (-math.inf, "rgba(59, 130, 246, 0.2)", "rgba(59, 130, 246, 0.35)"),
)

CURRENT_RAIN_PALETTE: tuple[tuple[float, str, str], ...] = (
    (6.0, "rgba(219, 39, 119, 0.35)", "rgba(219, 39, 119, 0.6)"),
    (4.0, "rgba(249, 115, 22, 0.3)", "rgba(249, 115, 22, 0.55)"),
    (-math.inf, "rgba(59, 130, 246, 0.25)", "rgba(59, 130, 246, 0.4)"),
)

RAIN_KM_PER_MM = 15.0
RAIN_MAX_RADIUS_KM = 150.0
RAIN_DRIFT_DEG_PER_DAY = 0.15
CURRENT_RAIN_KM_PER_UNIT = 12.0
CURRENT_RAIN_MAX_RADIUS_KM = 120.0


def _pick(palette: Sequence[tuple[float, str, str]], value: float) -> tuple[str, str]:
    for threshold, fill, stroke in palette:
        if value > threshold:
            return fill, stroke
    _, fill, stroke = palette[-1]
    return fill, stroke


def displace(latitude: float, longitude: float, bearing_rad: float, distance_km: float) -> GeoPoint:
    """Move ``distance_km`` along a bearing (clockwise from north) on a flat-earth approximation.

    Longitude is scaled by ``cos(latitude)`` for meridian convergence.
    """

    north_km = math.cos(bearing_rad) * distance_km
    east_km = math.sin(bearing_rad) * distance_km
    return GeoPoint(
        latitude=latitude + north_km / KM_PER_DEGREE,
        longitude=longitude + east_km / (KM_PER_DEGREE * math.cos(math.radians(latitude))),
    )


def forecast_path(
    location: Location,
    heading_deg: float,
    speed_kmh: float,
    hours: Iterable[int] = FORECAST_HOURS,
) -> list[ForecastPosition]:
    """Current position followed by constant-velocity positions at each offset.

    distance = speed * hours
    dlat = cos(heading) * distance / 111
    dlon = sin(heading) * distance / (111 * cos(lat))
    """

    bearing = math.radians(heading_deg)
    positions = [
        ForecastPosition(
            latitude=location.latitude, longitude=location.longitude, hours_ahead=0
        )
    ]
    for offset in hours:
        point = displace(location.latitude, location.longitude, bearing, speed_kmh * offset)
        positions.append(
            ForecastPosition(
                latitude=point.latitude, longitude=point.longitude, hours_ahead=offset
            )
        )
    return positions


def vortex_bands(
    center: Location,
    signal_level: int,
    heading_deg: Optional[float],
    params: VortexParams = DEFAULT_VORTEX,
) -> list[VortexBand]:
    """Spiral intensity bands, outermost first so inner bands paint on top.

    Band ``b`` spans ``[R*b/n, R*(b+1)/n]`` except the innermost, whose inner
    radius is the eye wall at ``eye_fraction * R``. Each ring's radius grows
    linearly from inner to outer while the angle sweeps ``spiral_turns``
    rotations, offset by the twist term and the wind heading.
    """

    if signal_level <= 0:
        return []

    heading = math.radians(
        heading_deg if heading_deg is not None else DEFAULT_VORTEX_HEADING_DEG
    )
    max_radius_km = signal_level * params.km_per_signal
    eye_radius_km = max_radius_km * params.eye_fraction
    n = params.num_bands

    bands: list[VortexBand] = []
    for band in range(n - 1, -1, -1):
        progress = band / n
        outer = max_radius_km * (band + 1) / n
        inner = eye_radius_km if band == 0 else max_radius_km * progress
        if inner > outer and not math.isclose(inner, outer):
            continue

        ring: list[GeoPoint] = []
        for i in range(params.points_per_band + 1):
            t = i / params.points_per_band
            base_angle = t * 2 * math.pi * params.spiral_turns
            radius = inner + (outer - inner) * t
            angle = base_angle + heading + base_angle * params.twist
            ring.append(displace(center.latitude, center.longitude, angle, radius))
        ring.append(ring[0])

        intensity = 1 - progress
        fill, stroke = _pick(VORTEX_PALETTE, intensity)
        bands.append(
            VortexBand(
                band_index=band,
                intensity=intensity,
                ring=ring,
                fill_color=fill,
                stroke_color=stroke,
            )
        )
    return bands


def wind_flow_lines(
    center: Location,
    signal_level: int,
    heading_deg: Optional[float],
    params: WindFlowParams = DEFAULT_WIND_FLOW,
    km_per_signal: float = DEFAULT_VORTEX.km_per_signal,
) -> list[WindFlowLine]:
    """Short polylines spiralling inward around the center to suggest inflow."""

    if signal_level <= 0 or heading_deg is None:
        return []

    heading = math.radians(heading_deg)
    reach_km = signal_level * km_per_signal * params.reach
    shrink = params.start_fraction - params.end_fraction

    lines: list[WindFlowLine] = []
    for line in range(params.num_lines):
        start_angle = line / params.num_lines * 2 * math.pi + heading
        points = []
        for seg in range(params.segments + 1):
            progress = seg / params.segments
            angle = start_angle + progress * math.pi * params.half_turns
            radius = reach_km * (params.start_fraction - progress * shrink)
            points.append(displace(center.latitude, center.longitude, angle, radius))
        lines.append(WindFlowLine(points=points))
    return lines


def precipitation_zones(
    location: Location,
    forecast: Sequence[Reading],
    heading_deg: Optional[float],
) -> list[PrecipitationZone]:
    """Rain circles for forecast days, drifting downwind day by day."""

    bearing = math.radians(heading_deg) if heading_deg is not None else 0.0
    zones: list[PrecipitationZone] = []
    for day_index, day in enumerate(forecast):
        amount = day.precipitation_mm
        if amount <= 0 or not day.condition.is_precipitating:
            continue

        radius_km = min(amount * RAIN_KM_PER_MM, RAIN_MAX_RADIUS_KM)
        drift_km = day_index * RAIN_DRIFT_DEG_PER_DAY * KM_PER_DEGREE
        fill, stroke = _pick(RAIN_PALETTE, amount)
        zones.append(
            PrecipitationZone(
                center=displace(location.latitude, location.longitude, bearing, drift_km),
                radius_m=radius_km * 1000,
                fill_color=fill,
                stroke_color=stroke,
                precipitation_mm=amount,
                day_index=day_index,
            )
        )
    return zones


def current_precipitation_zone(
    location: Location, reading: Reading
) -> PrecipitationZone | None:
    """Rain circle at the current position, sized from humidity as an intensity proxy."""

    if not reading.condition.is_precipitating:
        return None

    if reading.humidity_pct > 80:
        intensity = 8
    elif reading.humidity_pct > 60:
        intensity = 4
    else:
        intensity = 2
    radius_km = min(intensity * CURRENT_RAIN_KM_PER_UNIT, CURRENT_RAIN_MAX_RADIUS_KM)
    fill, stroke = _pick(CURRENT_RAIN_PALETTE, intensity)
    return PrecipitationZone(
        center=GeoPoint(latitude=location.latitude, longitude=location.longitude),
        radius_m=radius_km * 1000,
        fill_color=fill,
        stroke_color=stroke,
    )


def project(
    reading: Reading,
    location: Location,
    signal_level: SignalLevel | int,
    forecast: Sequence[Reading] = (),
    *,
    vortex: VortexParams = DEFAULT_VORTEX,
    wind_flow: WindFlowParams = DEFAULT_WIND_FLOW,
) -> ProjectionResult:
    """Build every map overlay for one cycle.

    With no signal only rain zones are produced; the caller shows a plain
    location marker.
    """

    level = int(signal_level)
    heading = reading.wind_direction_deg
    zones = precipitation_zones(location, forecast, heading)
    current_zone = current_precipitation_zone(location, reading)

    if level <= 0:
        return ProjectionResult(
            precipitation_zones=zones, current_precipitation_zone=current_zone
        )

    path = (
        forecast_path(location, heading, reading.wind_speed_kmh)
        if heading is not None
        else []
    )
    return ProjectionResult(
        forecast_positions=path,
        vortex_bands=vortex_bands(location, level, heading, vortex),
        wind_flow_lines=wind_flow_lines(
            location, level, heading, wind_flow, km_per_signal=vortex.km_per_signal
        ),
        precipitation_zones=zones,
        current_precipitation_zone=current_zone,
    )


__all__ = [
    "DEFAULT_VORTEX",
    "DEFAULT_WIND_FLOW",
    "FORECAST_HOURS",
    "KM_PER_DEGREE",
    "VortexParams",
    "WindFlowParams",
    "current_precipitation_zone",
    "displace",
    "forecast_path",
    "precipitation_zones",
    "project",
    "vortex_bands",
    "wind_flow_lines",
]
