"""Domain enums and reference tables."""

from .reference import COMPASS_POINTS, EMERGENCY_HOTLINES, compass_point
from .signals import (
    SIGNAL_DESCRIPTIONS,
    SIGNAL_THRESHOLDS_MS,
    AlertTone,
    Language,
    SignalLevel,
    Theme,
    threshold_range,
)

__all__ = [
    "AlertTone",
    "COMPASS_POINTS",
    "EMERGENCY_HOTLINES",
    "Language",
    "SIGNAL_DESCRIPTIONS",
    "SIGNAL_THRESHOLDS_MS",
    "SignalLevel",
    "Theme",
    "compass_point",
    "threshold_range",
]
