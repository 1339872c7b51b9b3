"""Alert history and user settings models."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from bagyo.domain import Language, Theme


class Alert(BaseModel):
    """A recorded storm alert. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique, time-derived identifier (epoch milliseconds)")
    message: str = Field(..., description="Localized alert message")
    signal_level: int = Field(..., ge=1, le=5, description="Signal level that raised the alert")
    timestamp: datetime = Field(..., description="When the alert was raised (UTC)")
    location: str = Field(..., description="Location label at the time of the alert")
    wind_speed_ms: float = Field(..., description="Wind speed that raised the alert (m/s)")


class UserSettings(BaseModel):
    """Preferences that shape alerting and message language."""

    model_config = ConfigDict(frozen=True)

    notifications_enabled: bool = Field(default=True, description="Record and deliver alerts")
    sound_enabled: bool = Field(default=True, description="Ask the notifier to play a tone")
    language: Language = Field(default=Language.FIL, description="Alert message language")
    theme: Theme = Field(default=Theme.DARK, description="Display theme")


AlertHistoryAdapter = TypeAdapter(list[Alert])


def dump_history(history: list[Alert]) -> str:
    """Serialize an alert history (newest first) to a JSON array."""

    return AlertHistoryAdapter.dump_json(history).decode("utf-8")


def load_history(raw: str) -> list[Alert]:
    return AlertHistoryAdapter.validate_json(raw)


__all__ = [
    "Alert",
    "AlertHistoryAdapter",
    "UserSettings",
    "dump_history",
    "load_history",
]
