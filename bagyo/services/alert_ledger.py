"""Alert generation, history persistence and notification dispatch."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
import logging
from typing import Callable

from pydantic import ValidationError

from bagyo.domain import AlertTone, Language, SignalLevel
from bagyo.errors import PersistenceFailure
from bagyo.models.alerts import Alert, UserSettings, dump_history, load_history
from bagyo.models.weather import Reading
from bagyo.services.notifier import Notifier, PulsePattern, pulse_pattern_for
from bagyo.storage import ALERT_HISTORY_KEY, KeyValueStore, OrderedWriteQueue

logger = logging.getLogger("bagyo.alert_ledger")

ALERT_TEMPLATES: dict[Language, dict[AlertTone, str]] = {
    Language.FIL: {
        AlertTone.CAUTION: "⚠️ Signal #{signal} sa {location}. Dahan-dahan lang, ingat!",
        AlertTone.URGENT: "🚨 Signal #{signal} sa {location}! Manatili sa loob ng bahay!",
        AlertTone.EVACUATE: "🚨🚨 Signal #{signal} sa {location}! EVACUATE IF NECESSARY!",
    },
    Language.EN: {
        AlertTone.CAUTION: "⚠️ Signal #{signal} in {location}. Take care!",
        AlertTone.URGENT: "🚨 Signal #{signal} in {location}! Stay indoors!",
        AlertTone.EVACUATE: "🚨🚨 Signal #{signal} in {location}! EVACUATE IF NECESSARY!",
    },
}


def render_message(level: SignalLevel | int, location: str, language: Language) -> str:
    """Render the alert text for a signal level in the requested language."""

    level = SignalLevel(level)
    templates = ALERT_TEMPLATES.get(Language(language), ALERT_TEMPLATES[Language.EN])
    return templates[level.tone].format(signal=int(level), location=location)


@dataclass(frozen=True)
class Notification:
    """A notification requested for one refresh cycle."""

    message: str
    urgency: int
    play_sound: bool
    pattern: PulsePattern


@dataclass(frozen=True)
class LedgerResult:
    """Outcome of processing one cycle: the history to publish and what was raised."""

    history: list[Alert] = field(default_factory=list)
    alert: Alert | None = None
    notification: Notification | None = None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _next_alert_id(now: datetime, history: list[Alert]) -> str:
    """Millisecond epoch id, bumped to stay ahead of the newest existing id."""

    candidate = int(now.timestamp() * 1000)
    if history and history[0].id.isdigit():
        candidate = max(candidate, int(history[0].id) + 1)
    return str(candidate)


class AlertLedger:
    """Sole owner and writer of the alert history.

    Every cycle with a non-zero signal and notifications enabled appends a new
    alert; there is no suppression of repeats unless ``dedup_window`` is set.
    """

    def __init__(
        self,
        store: KeyValueStore,
        notifier: Notifier,
        *,
        writer: OrderedWriteQueue | None = None,
        dedup_window: timedelta | None = None,
        clock: Callable[[], datetime] = _utcnow,
        history_key: str = ALERT_HISTORY_KEY,
    ) -> None:
        self._store = store
        self._notifier = notifier
        self._writer = writer or OrderedWriteQueue(store)
        self._dedup_window = dedup_window if dedup_window and dedup_window > timedelta(0) else None
        self._clock = clock
        self._history_key = history_key
        self._history: list[Alert] = []

    @property
    def history(self) -> list[Alert]:
        return list(self._history)

    @property
    def writer(self) -> OrderedWriteQueue:
        return self._writer

    def load(self) -> list[Alert]:
        """Restore the persisted history; unreadable data starts an empty one."""

        try:
            raw = self._store.get(self._history_key)
        except PersistenceFailure as exc:
            logger.error("Alert history unavailable, starting empty: %s", exc)
            raw = None

        history: list[Alert] = []
        if raw:
            try:
                history = load_history(raw)
            except ValidationError as exc:
                logger.error("Stored alert history is corrupt, starting empty: %s", exc)

        self._history = history
        logger.info("Loaded %s alerts from history", len(history))
        return list(history)

    def process(
        self,
        reading: Reading,
        signal_level: SignalLevel | int,
        settings: UserSettings,
        history: list[Alert] | None = None,
    ) -> LedgerResult:
        """Record and announce an alert for one cycle when the signal warrants it.

        ``history`` is the history the caller last observed; on a retry it must
        already include the previous attempt's alert.
        """

        level = SignalLevel(signal_level)
        current = list(self._history if history is None else history)

        if level == SignalLevel.NONE:
            return LedgerResult(history=current)

        if not settings.notifications_enabled:
            logger.info(
                "Signal #%s at %s not recorded: notifications disabled",
                int(level),
                reading.location.label,
            )
            return LedgerResult(history=current)

        now = self._clock()
        if self._is_repeat(level, now, current):
            logger.info("Signal #%s already alerted within dedup window", int(level))
            return LedgerResult(history=current)

        message = render_message(level, reading.location.label, settings.language)
        alert = Alert(
            id=_next_alert_id(now, current),
            message=message,
            signal_level=int(level),
            timestamp=now,
            location=reading.location.label,
            wind_speed_ms=reading.wind_speed_ms,
        )
        new_history = [alert, *current]
        self._history = new_history
        self._writer.submit(self._history_key, dump_history(new_history))

        notification = Notification(
            message=message,
            urgency=int(level),
            play_sound=settings.sound_enabled,
            pattern=pulse_pattern_for(int(level)),
        )
        self._dispatch(notification)

        logger.info(
            "Alert %s raised: signal #%s at %s (%.1f m/s)",
            alert.id,
            alert.signal_level,
            alert.location,
            alert.wind_speed_ms,
        )
        return LedgerResult(history=list(new_history), alert=alert, notification=notification)

    def reset(self) -> None:
        """Explicit bulk reset: the only way alerts are ever removed."""

        self._history = []
        self._writer.submit(self._history_key, dump_history([]))
        logger.info("Alert history cleared")

    def _is_repeat(self, level: SignalLevel, now: datetime, history: list[Alert]) -> bool:
        if self._dedup_window is None or not history:
            return False
        latest = history[0]
        return latest.signal_level == int(level) and now - latest.timestamp < self._dedup_window

    def _dispatch(self, notification: Notification) -> None:
        try:
            self._notifier.deliver(
                notification.message, notification.urgency, notification.play_sound
            )
        except Exception as exc:  # pragma: no cover - defensive logging
            logger.error("Notifier failed to deliver alert: %s", exc)


__all__ = [
    "ALERT_TEMPLATES",
    "AlertLedger",
    "LedgerResult",
    "Notification",
    "render_message",
]
