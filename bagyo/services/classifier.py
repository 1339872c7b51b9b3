"""Wind speed to signal level classification."""

from __future__ import annotations

import logging
import math
from typing import Any

from bagyo.domain import SIGNAL_THRESHOLDS_MS, SignalLevel
from bagyo.errors import InvalidReading

logger = logging.getLogger("bagyo.classifier")


def _validated_speed(wind_speed_ms: Any) -> float:
    try:
        speed = float(wind_speed_ms)
    except (TypeError, ValueError) as exc:
        raise InvalidReading(f"Wind speed is not numeric: {wind_speed_ms!r}") from exc
    if not math.isfinite(speed):
        raise InvalidReading(f"Wind speed is not finite: {speed}")
    if speed < 0:
        raise InvalidReading(f"Wind speed is negative: {speed}")
    return speed


def classify(wind_speed_ms: float) -> SignalLevel:
    """Map a sustained wind speed (m/s) to a public signal level.

    Thresholds are inclusive lower bounds checked from the highest tier down.
    Garbage readings classify as ``SignalLevel.NONE`` instead of raising.
    """

    try:
        speed = _validated_speed(wind_speed_ms)
    except InvalidReading as exc:
        logger.warning("Invalid reading classified as no signal: %s", exc)
        return SignalLevel.NONE

    for threshold, level in SIGNAL_THRESHOLDS_MS:
        if speed >= threshold:
            return level
    return SignalLevel.NONE


__all__ = ["classify"]
