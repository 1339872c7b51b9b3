from datetime import datetime, timezone
import math

import pytest

from bagyo.models import Condition, Location, Reading
from bagyo.services.projector import (
    VortexParams,
    displace,
    forecast_path,
    project,
    vortex_bands,
    wind_flow_lines,
)

NOW = datetime(2024, 9, 1, 6, 0, tzinfo=timezone.utc)
MANILA = Location(latitude=14.5995, longitude=120.9842, label="Manila, Philippines")


def make_reading(speed=120 / 3.6, heading=90.0, **kwargs):
    return Reading(
        timestamp=NOW,
        location=MANILA,
        wind_speed_ms=speed,
        wind_direction_deg=heading,
        **kwargs,
    )


def km_from(center, point):
    north = (point.latitude - center.latitude) * 111
    east = (point.longitude - center.longitude) * 111 * math.cos(math.radians(center.latitude))
    return math.hypot(north, east)


def test_no_signal_produces_empty_projection():
    result = project(make_reading(5.0), MANILA, 0)

    assert result.forecast_positions == []
    assert result.vortex_bands == []
    assert result.wind_flow_lines == []
    assert result.precipitation_zones == []
    assert result.current_precipitation_zone is None


def test_signal_four_eastward_path_offsets():
    result = project(make_reading(), MANILA, 4)

    positions = result.forecast_positions
    assert [p.hours_ahead for p in positions] == [0, 6, 12, 18, 24]
    assert (positions[0].latitude, positions[0].longitude) == (MANILA.latitude, MANILA.longitude)

    six_hours = positions[1]
    expected = 720 / (111 * math.cos(math.radians(MANILA.latitude)))
    assert six_hours.longitude - MANILA.longitude == pytest.approx(expected, rel=1e-9)
    assert six_hours.longitude - MANILA.longitude == pytest.approx(6.70, abs=0.01)
    assert six_hours.latitude == pytest.approx(MANILA.latitude, abs=1e-9)

    assert positions[4].longitude - MANILA.longitude == pytest.approx(4 * expected, rel=1e-9)


def test_heading_zero_is_due_north():
    positions = forecast_path(MANILA, 0.0, 111.0, hours=(1,))

    assert positions[1].latitude == pytest.approx(MANILA.latitude + 1.0)
    assert positions[1].longitude == pytest.approx(MANILA.longitude)


def test_vortex_has_ten_bands_outermost_first():
    bands = vortex_bands(MANILA, 4, 90.0)

    assert len(bands) == 10
    assert [band.band_index for band in bands] == list(range(9, -1, -1))
    assert bands[0].intensity == pytest.approx(0.1)
    assert bands[-1].intensity == pytest.approx(1.0)
    assert bands[-1].fill_color.startswith("rgba(147, 51, 234")
    assert bands[0].fill_color.startswith("rgba(34, 197, 94")


@pytest.mark.parametrize("level", [1, 2, 3, 4, 5])
def test_every_signal_level_renders_ten_bands_with_core(level):
    bands = vortex_bands(MANILA, level, 90.0)

    assert len(bands) == 10
    assert bands[-1].band_index == 0
    assert bands[-1].intensity == pytest.approx(1.0)
    assert bands[-1].fill_color.startswith("rgba(147, 51, 234")
    for point in bands[-1].ring:
        assert km_from(MANILA, point) == pytest.approx(0.1 * level * 2.0)


def test_vortex_rings_are_closed_spirals_within_radius():
    bands = vortex_bands(MANILA, 4, 90.0)
    max_radius = 4 * 2.0

    outer = bands[0]
    assert len(outer.ring) == 122
    assert outer.ring[0] == outer.ring[-1]
    assert km_from(MANILA, outer.ring[0]) == pytest.approx(0.9 * max_radius)
    assert km_from(MANILA, outer.ring[-2]) == pytest.approx(max_radius)

    eye = bands[-1]
    for point in eye.ring:
        assert km_from(MANILA, point) == pytest.approx(0.1 * max_radius)


def test_vortex_radius_scales_with_signal():
    params = VortexParams(km_per_signal=5.0)
    bands = vortex_bands(MANILA, 2, 0.0, params)

    assert km_from(MANILA, bands[0].ring[-2]) == pytest.approx(10.0)


def test_missing_heading_skips_path_and_flow_lines_but_keeps_vortex():
    result = project(make_reading(heading=None), MANILA, 3)

    assert result.forecast_positions == []
    assert result.wind_flow_lines == []
    assert len(result.vortex_bands) == 10


def test_wind_flow_lines_spiral_inward():
    lines = wind_flow_lines(MANILA, 3, 45.0)

    assert len(lines) == 24
    for line in lines:
        assert len(line.points) == 4
        distances = [km_from(MANILA, point) for point in line.points]
        assert distances == sorted(distances, reverse=True)
    assert km_from(MANILA, lines[0].points[0]) == pytest.approx(3 * 2.0 * 2.2 * 0.85)


def test_precipitation_zones_follow_forecast_rain():
    forecast = [
        make_reading(condition=Condition.RAIN, precipitation_mm=12.0),
        make_reading(condition=Condition.CLEAR, precipitation_mm=0.0),
        make_reading(condition=Condition.DRIZZLE, precipitation_mm=3.0),
    ]

    zones = project(make_reading(), MANILA, 0, forecast).precipitation_zones

    assert [zone.day_index for zone in zones] == [0, 2]
    heavy, light = zones
    assert heavy.radius_m == pytest.approx(150_000)
    assert heavy.fill_color.startswith("rgba(249, 115, 22")
    assert light.radius_m == pytest.approx(45_000)
    assert light.center.latitude == pytest.approx(MANILA.latitude)
    assert km_from(MANILA, light.center) == pytest.approx(2 * 0.15 * 111)
    assert light.center.longitude > MANILA.longitude


def test_current_precipitation_zone_uses_humidity():
    raining = make_reading(condition=Condition.THUNDERSTORM, humidity_pct=85)
    result = project(raining, MANILA, 2)

    zone = result.current_precipitation_zone
    assert zone is not None
    assert zone.radius_m == pytest.approx(96_000)
    assert (zone.center.latitude, zone.center.longitude) == (MANILA.latitude, MANILA.longitude)

    dry = project(make_reading(condition=Condition.CLOUDS), MANILA, 2)
    assert dry.current_precipitation_zone is None


def test_projection_is_deterministic():
    reading = make_reading()
    forecast = [make_reading(condition=Condition.RAIN, precipitation_mm=6.0)]

    assert project(reading, MANILA, 4, forecast) == project(reading, MANILA, 4, forecast)


def test_displace_scales_longitude_by_latitude():
    point = displace(60.0, 0.0, math.pi / 2, 111.0)

    assert point.longitude == pytest.approx(2.0)
    assert point.latitude == pytest.approx(60.0)
