"""Public storm signal levels and their bilingual descriptions."""

from __future__ import annotations

from enum import Enum, IntEnum


class Language(str, Enum):
    """Languages supported for alert messages and descriptions."""

    FIL = "fil"
    EN = "en"


class Theme(str, Enum):
    """Display theme preference, stored alongside the other user settings."""

    LIGHT = "light"
    DARK = "dark"


class AlertTone(str, Enum):
    """Tone of an alert message: levels 1-2 caution, 3-4 urgent, 5 evacuate."""

    CAUTION = "caution"
    URGENT = "urgent"
    EVACUATE = "evacuate"


class SignalLevel(IntEnum):
    """Discrete typhoon signal derived solely from sustained wind speed."""

    NONE = 0
    SIGNAL_1 = 1
    SIGNAL_2 = 2
    SIGNAL_3 = 3
    SIGNAL_4 = 4
    SIGNAL_5 = 5

    @property
    def tone(self) -> AlertTone | None:
        if self == SignalLevel.NONE:
            return None
        if self <= SignalLevel.SIGNAL_2:
            return AlertTone.CAUTION
        if self <= SignalLevel.SIGNAL_4:
            return AlertTone.URGENT
        return AlertTone.EVACUATE

    def describe(self, language: Language = Language.EN) -> str:
        """Short localized description, e.g. ``Super Typhoon``."""

        return SIGNAL_DESCRIPTIONS[Language(language)][self]


# Inclusive lower bounds in m/s, highest first so boundaries resolve upward.
SIGNAL_THRESHOLDS_MS: tuple[tuple[float, SignalLevel], ...] = (
    (220.0, SignalLevel.SIGNAL_5),
    (185.0, SignalLevel.SIGNAL_4),
    (100.0, SignalLevel.SIGNAL_3),
    (60.0, SignalLevel.SIGNAL_2),
    (30.0, SignalLevel.SIGNAL_1),
)

SIGNAL_DESCRIPTIONS: dict[Language, dict[SignalLevel, str]] = {
    Language.FIL: {
        SignalLevel.NONE: "Walang Signal",
        SignalLevel.SIGNAL_1: "Malakas na Hangin",
        SignalLevel.SIGNAL_2: "Tanda ng Bagyo",
        SignalLevel.SIGNAL_3: "Malakas na Bagyo",
        SignalLevel.SIGNAL_4: "Napakalakas na Bagyo",
        SignalLevel.SIGNAL_5: "Super Bagyo",
    },
    Language.EN: {
        SignalLevel.NONE: "No Signal",
        SignalLevel.SIGNAL_1: "Strong Wind",
        SignalLevel.SIGNAL_2: "Tropical Storm",
        SignalLevel.SIGNAL_3: "Strong Storm",
        SignalLevel.SIGNAL_4: "Very Strong Storm",
        SignalLevel.SIGNAL_5: "Super Typhoon",
    },
}


def threshold_range(level: SignalLevel) -> tuple[float, float | None]:
    """Return the ``[lower, upper)`` wind speed band for a level (m/s)."""

    bounds = [threshold for threshold, _ in SIGNAL_THRESHOLDS_MS]
    if level == SignalLevel.NONE:
        return 0.0, bounds[-1]
    index = [lvl for _, lvl in SIGNAL_THRESHOLDS_MS].index(level)
    upper = bounds[index - 1] if index > 0 else None
    return bounds[index], upper


__all__ = [
    "AlertTone",
    "Language",
    "SignalLevel",
    "SIGNAL_DESCRIPTIONS",
    "SIGNAL_THRESHOLDS_MS",
    "Theme",
    "threshold_range",
]
