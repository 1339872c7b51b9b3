"""Pydantic models for Bagyo Watch."""

from .alerts import Alert, UserSettings, dump_history, load_history
from .projection import (
    ForecastPosition,
    GeoPoint,
    PrecipitationZone,
    ProjectionResult,
    VortexBand,
    WindFlowLine,
)
from .state import LocationUpdate, SignalLevelInfo, ThreatState
from .weather import Condition, Location, Reading

__all__ = [
    "Alert",
    "Condition",
    "ForecastPosition",
    "GeoPoint",
    "Location",
    "LocationUpdate",
    "PrecipitationZone",
    "ProjectionResult",
    "Reading",
    "SignalLevelInfo",
    "ThreatState",
    "UserSettings",
    "VortexBand",
    "WindFlowLine",
    "dump_history",
    "load_history",
]
