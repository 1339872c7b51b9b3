"""Static reference data shown next to storm information."""

from __future__ import annotations

COMPASS_POINTS: tuple[str, ...] = (
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
)

EMERGENCY_HOTLINES: dict[str, str] = {
    "NDRRMC": "911",
    "RED_CROSS": "143",
    "PAGASA": "(02) 8284-0800",
    "PHIVOLCS": "(02) 426-1468",
}


def compass_point(degrees: float) -> str:
    """Abbreviate a heading in degrees to one of 16 compass points."""

    index = int((degrees % 360) / 22.5 + 0.5) % len(COMPASS_POINTS)
    return COMPASS_POINTS[index]


__all__ = ["COMPASS_POINTS", "EMERGENCY_HOTLINES", "compass_point"]
