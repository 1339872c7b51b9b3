"""Refresh-cycle orchestration and published threat state."""

from __future__ import annotations

import asyncio
import contextlib
from datetime import datetime, timedelta, timezone
from enum import Enum
import logging
from typing import Callable, Optional, Protocol

from pydantic import ValidationError

from bagyo.config import settings
from bagyo.domain import compass_point
from bagyo.errors import PersistenceFailure
from bagyo.ingestors import DEFAULT_LOCATION, LocationIngestor, OpenWeatherIngestor
from bagyo.models.alerts import UserSettings
from bagyo.models.state import ThreatState
from bagyo.models.weather import Location, Reading
from bagyo.services.alert_ledger import AlertLedger
from bagyo.services.classifier import classify
from bagyo.services.notifier import build_notifier
from bagyo.services.projector import project
from bagyo.storage import SETTINGS_KEY, KeyValueStore, OrderedWriteQueue, SqlKeyValueStore

logger = logging.getLogger("bagyo.orchestrator")

Subscriber = Callable[[ThreatState], None]


class CycleState(str, Enum):
    IDLE = "idle"
    FETCHING_LOCATION = "fetching_location"
    FETCHING_WEATHER = "fetching_weather"
    CLASSIFYING = "classifying"
    ALERTING = "alerting"
    PROJECTING = "projecting"
    PUBLISHED = "published"


class LocationProvider(Protocol):
    async def fetch_location(self) -> Location:
        """Return the current location, or a fallback when it cannot be resolved."""


class WeatherProvider(Protocol):
    async def fetch_reading(self, lat: float, lon: float) -> Reading:
        """Return current conditions at a coordinate."""

    async def fetch_forecast(self, lat: float, lon: float) -> list[Reading]:
        """Return up to five day-bucketed forecast entries."""


class ThreatStore:
    """Holds the latest published state and notifies subscribers on change."""

    def __init__(self, initial: ThreatState | None = None) -> None:
        self._state = initial or ThreatState()
        self._subscribers: list[Subscriber] = []

    @property
    def state(self) -> ThreatState:
        return self._state

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback; returns a function that unsubscribes it."""

        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, state: ThreatState) -> None:
        self._state = state
        for callback in list(self._subscribers):
            try:
                callback(state)
            except Exception as exc:
                logger.error("Threat state subscriber failed: %s", exc)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ThreatAssessmentOrchestrator:
    """Run refresh cycles: locate, fetch, classify, alert, project, publish.

    Only one cycle is ever in flight. A refresh requested while a cycle runs
    joins that cycle and receives its result. Provider failures never fail a
    cycle: the location falls back to the last known (or default) location
    and a missing reading republishes the previous state marked stale.
    """

    def __init__(
        self,
        *,
        location_provider: LocationProvider,
        weather_provider: WeatherProvider,
        ledger: AlertLedger,
        store: KeyValueStore,
        writer: OrderedWriteQueue | None = None,
        state_store: ThreatStore | None = None,
        refresh_interval: float | None = None,
        provider_timeout: float | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._location_provider = location_provider
        self._weather_provider = weather_provider
        self._ledger = ledger
        self._store = store
        self._writer = writer or ledger.writer
        self.state_store = state_store or ThreatStore()
        self.refresh_interval = refresh_interval or settings.refresh_interval_seconds
        self.provider_timeout = provider_timeout or settings.provider_timeout
        self._clock = clock

        self._user_settings = UserSettings()
        self._cycle_state = CycleState.IDLE
        self._inflight: asyncio.Task | None = None
        self._scheduler: asyncio.Task | None = None
        self._last_location: Location | None = None
        self._last_forecast: list[Reading] = []

    @property
    def state(self) -> ThreatState:
        return self.state_store.state

    @property
    def user_settings(self) -> UserSettings:
        return self._user_settings

    @property
    def cycle_state(self) -> CycleState:
        return self._cycle_state

    @property
    def scheduler_running(self) -> bool:
        return self._scheduler is not None and not self._scheduler.done()

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        return self.state_store.subscribe(callback)

    # ----- persisted state -----

    def load(self) -> ThreatState:
        """Restore settings and alert history, then publish the initial state."""

        self._user_settings = self._load_user_settings()
        history = self._ledger.load()
        state = self.state.model_copy(
            update={
                "alert_history": history,
                "signal_description": self.state.signal_level.describe(
                    self._user_settings.language
                ),
            }
        )
        self.state_store.publish(state)
        return state

    def update_settings(self, new_settings: UserSettings) -> UserSettings:
        self._user_settings = new_settings
        self._writer.submit(SETTINGS_KEY, new_settings.model_dump_json())
        self.state_store.publish(
            self.state.model_copy(
                update={
                    "signal_description": self.state.signal_level.describe(
                        new_settings.language
                    )
                }
            )
        )
        logger.info(
            "Settings updated: notifications=%s sound=%s language=%s",
            new_settings.notifications_enabled,
            new_settings.sound_enabled,
            new_settings.language.value,
        )
        return new_settings

    def reset(self) -> ThreatState:
        """Clear alert history and restore default settings."""

        self._ledger.reset()
        self._user_settings = UserSettings()
        self._writer.submit(SETTINGS_KEY, self._user_settings.model_dump_json())
        state = self.state.model_copy(
            update={
                "alert_history": [],
                "signal_description": self.state.signal_level.describe(
                    self._user_settings.language
                ),
            }
        )
        self.state_store.publish(state)
        return state

    def update_position(self, latitude: float, longitude: float) -> None:
        updater = getattr(self._location_provider, "update_position", None)
        if updater is None:
            raise RuntimeError("Location provider does not accept position updates")
        updater(latitude, longitude)

    def _load_user_settings(self) -> UserSettings:
        try:
            raw = self._store.get(SETTINGS_KEY)
        except PersistenceFailure as exc:
            logger.error("Settings unavailable, using defaults: %s", exc)
            return UserSettings()
        if not raw:
            return UserSettings()
        try:
            return UserSettings.model_validate_json(raw)
        except ValidationError as exc:
            logger.error("Stored settings are corrupt, using defaults: %s", exc)
            return UserSettings()

    # ----- refresh cycles -----

    async def refresh(self) -> ThreatState:
        """Run a refresh cycle, or join the one already in flight."""

        if self._inflight is not None and not self._inflight.done():
            logger.debug("Refresh requested while a cycle is in flight; joining it")
        else:
            self._inflight = asyncio.get_running_loop().create_task(self._run_cycle())
        return await asyncio.shield(self._inflight)

    def start(self) -> asyncio.Task:
        """Start the periodic refresh loop (first cycle runs immediately)."""

        if self._scheduler is None or self._scheduler.done():
            self._scheduler = asyncio.get_running_loop().create_task(self._run_forever())
            logger.info("Refresh scheduler started (every %ss)", self.refresh_interval)
        return self._scheduler

    async def stop(self) -> None:
        scheduler, self._scheduler = self._scheduler, None
        if scheduler is not None:
            scheduler.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await scheduler
        if self._inflight is not None and not self._inflight.done():
            with contextlib.suppress(Exception):
                await self._inflight
        await self._writer.close()

    async def _run_forever(self) -> None:
        while True:
            await self.refresh()
            await asyncio.sleep(self.refresh_interval)

    def _set_cycle_state(self, state: CycleState) -> None:
        self._cycle_state = state
        logger.debug("Cycle state -> %s", state.value)

    async def _run_cycle(self) -> ThreatState:
        previous = self.state
        self.state_store.publish(previous.model_copy(update={"loading": True}))

        try:
            self._set_cycle_state(CycleState.FETCHING_LOCATION)
            location = await self._fetch_location()

            self._set_cycle_state(CycleState.FETCHING_WEATHER)
            reading, forecast = await asyncio.gather(
                self._fetch_reading(location), self._fetch_forecast(location)
            )
            if reading is None:
                return self._publish_stale(previous)

            self._set_cycle_state(CycleState.CLASSIFYING)
            level = classify(reading.wind_speed_ms)

            self._set_cycle_state(CycleState.ALERTING)
            result = self._ledger.process(
                reading, level, self._user_settings, self._ledger.history
            )

            self._set_cycle_state(CycleState.PROJECTING)
            projection = project(reading, location, level, forecast)
        except Exception as exc:  # pragma: no cover - defensive logging
            logger.error("Refresh cycle failed; keeping previous state: %s", exc)
            return self._publish_stale(previous)

        state = ThreatState(
            reading=reading,
            forecast=forecast,
            location=location,
            signal_level=level,
            signal_description=level.describe(self._user_settings.language),
            wind_compass=(
                compass_point(reading.wind_direction_deg)
                if reading.wind_direction_deg is not None
                else None
            ),
            alert_history=result.history,
            projection=projection,
            loading=False,
            stale=False,
            updated_at=self._clock(),
        )
        self._set_cycle_state(CycleState.PUBLISHED)
        self.state_store.publish(state)
        logger.info(
            "Cycle published: %s signal=#%s wind=%.1f m/s alerts=%s bands=%s",
            location.label,
            int(level),
            reading.wind_speed_ms,
            len(result.history),
            len(projection.vortex_bands),
        )
        return state

    def _publish_stale(self, previous: ThreatState) -> ThreatState:
        state = previous.model_copy(
            update={
                "loading": False,
                "stale": True,
                "alert_history": self._ledger.history,
                "updated_at": self._clock(),
            }
        )
        self._set_cycle_state(CycleState.PUBLISHED)
        self.state_store.publish(state)
        logger.warning("Published last known state; weather could not be refreshed")
        return state

    async def _fetch_location(self) -> Location:
        try:
            location = await asyncio.wait_for(
                self._location_provider.fetch_location(), self.provider_timeout
            )
        except Exception as exc:
            fallback = self._last_location or DEFAULT_LOCATION
            logger.warning(
                "Location unavailable (%s: %s); using %s",
                type(exc).__name__,
                exc,
                fallback.label,
            )
            return fallback
        self._last_location = location
        return location

    async def _fetch_reading(self, location: Location) -> Optional[Reading]:
        try:
            return await asyncio.wait_for(
                self._weather_provider.fetch_reading(location.latitude, location.longitude),
                self.provider_timeout,
            )
        except Exception as exc:
            logger.warning("Weather unavailable (%s: %s)", type(exc).__name__, exc)
            return None

    async def _fetch_forecast(self, location: Location) -> list[Reading]:
        try:
            forecast = await asyncio.wait_for(
                self._weather_provider.fetch_forecast(location.latitude, location.longitude),
                self.provider_timeout,
            )
        except Exception as exc:
            logger.warning(
                "Forecast unavailable (%s: %s); reusing previous forecast",
                type(exc).__name__,
                exc,
            )
            return list(self._last_forecast)
        self._last_forecast = list(forecast)
        return list(forecast)


def build_orchestrator(store: KeyValueStore | None = None) -> ThreatAssessmentOrchestrator:
    """Wire the orchestrator from configuration."""

    store = store or SqlKeyValueStore()
    writer = OrderedWriteQueue(store)
    ledger = AlertLedger(
        store,
        build_notifier(),
        writer=writer,
        dedup_window=timedelta(minutes=settings.alert_dedup_minutes),
    )
    return ThreatAssessmentOrchestrator(
        location_provider=LocationIngestor(),
        weather_provider=OpenWeatherIngestor(),
        ledger=ledger,
        store=store,
        writer=writer,
    )


__all__ = [
    "CycleState",
    "LocationProvider",
    "ThreatAssessmentOrchestrator",
    "ThreatStore",
    "WeatherProvider",
    "build_orchestrator",
]
