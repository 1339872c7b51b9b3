from datetime import datetime, timezone
from types import SimpleNamespace

from fastapi import HTTPException
import pytest

from bagyo.api import health as health_module
from bagyo.api import threat as threat_module
from bagyo.domain import Language, SignalLevel
from bagyo.models import Location, LocationUpdate, Reading, UserSettings
from bagyo.services.alert_ledger import AlertLedger
from bagyo.services.orchestrator import ThreatAssessmentOrchestrator
from bagyo.storage import InMemoryKeyValueStore

NOW = datetime(2024, 9, 1, 6, 0, tzinfo=timezone.utc)
MANILA = Location(latitude=14.5995, longitude=120.9842, label="Manila, Philippines")


class SilentNotifier:
    def deliver(self, message, urgency, play_sound):
        pass


class FixedLocation:
    def __init__(self):
        self.positions = []

    async def fetch_location(self):
        if self.positions:
            lat, lon = self.positions[-1]
            return Location(latitude=lat, longitude=lon, label="Reported Position")
        return MANILA

    def update_position(self, latitude, longitude):
        self.positions.append((latitude, longitude))


class ReadOnlyLocation:
    async def fetch_location(self):
        return MANILA


class SteadyWeather:
    async def fetch_reading(self, lat, lon):
        location = Location(latitude=lat, longitude=lon, label="Manila, Philippines")
        return Reading(timestamp=NOW, location=location, wind_speed_ms=120.0, wind_direction_deg=270)

    async def fetch_forecast(self, lat, lon):
        return []


def make_orchestrator(location=None):
    store = InMemoryKeyValueStore()
    ledger = AlertLedger(store, SilentNotifier(), clock=lambda: NOW)
    return ThreatAssessmentOrchestrator(
        location_provider=location or FixedLocation(),
        weather_provider=SteadyWeather(),
        ledger=ledger,
        store=store,
        refresh_interval=60,
        provider_timeout=1,
    )


def test_health_check_before_startup(monkeypatch):
    monkeypatch.setattr(health_module.settings, "bagyo_env", "test")
    request = SimpleNamespace(app=SimpleNamespace(state=SimpleNamespace()))

    assert health_module.health_check(request) == {
        "status": "starting",
        "env": "test",
        "scheduler": "stopped",
    }


@pytest.mark.anyio
async def test_health_check_reports_scheduler_and_cycle(monkeypatch):
    monkeypatch.setattr(health_module.settings, "bagyo_env", "test")
    orchestrator = make_orchestrator()
    request = SimpleNamespace(app=SimpleNamespace(state=SimpleNamespace(orchestrator=orchestrator)))

    idle = health_module.health_check(request)
    assert idle == {"status": "ok", "env": "test", "scheduler": "stopped", "cycle": "idle"}

    orchestrator.start()
    running = health_module.health_check(request)
    await orchestrator.stop()

    assert running["scheduler"] == "running"
    assert health_module.health_check(request)["scheduler"] == "stopped"


def test_get_orchestrator_requires_running_service():
    request = SimpleNamespace(app=SimpleNamespace(state=SimpleNamespace()))

    with pytest.raises(HTTPException) as exc_info:
        threat_module.get_orchestrator(request)
    assert exc_info.value.status_code == 503


def test_get_orchestrator_returns_app_state_instance():
    orchestrator = make_orchestrator()
    request = SimpleNamespace(app=SimpleNamespace(state=SimpleNamespace(orchestrator=orchestrator)))

    assert threat_module.get_orchestrator(request) is orchestrator


@pytest.mark.anyio
async def test_refresh_then_read_threat_and_alerts():
    orchestrator = make_orchestrator()

    refreshed = await threat_module.refresh_threat(orchestrator)
    current = threat_module.read_threat(orchestrator)
    alerts = threat_module.list_alerts(orchestrator)

    assert refreshed is current
    assert current.signal_level == SignalLevel.SIGNAL_3
    assert current.wind_compass == "W"
    assert len(alerts) == 1
    assert alerts[0].signal_level == 3


@pytest.mark.anyio
async def test_update_location_refreshes_at_reported_position():
    location = FixedLocation()
    orchestrator = make_orchestrator(location)

    state = await threat_module.update_location(
        LocationUpdate(latitude=7.0731, longitude=125.6128), orchestrator
    )

    assert location.positions == [(7.0731, 125.6128)]
    assert state.location.label == "Reported Position"


@pytest.mark.anyio
async def test_update_location_conflicts_without_position_support():
    orchestrator = make_orchestrator(ReadOnlyLocation())

    with pytest.raises(HTTPException) as exc_info:
        await threat_module.update_location(
            LocationUpdate(latitude=7.0, longitude=125.0), orchestrator
        )
    assert exc_info.value.status_code == 409


@pytest.mark.anyio
async def test_reset_clears_alerts_and_settings():
    orchestrator = make_orchestrator()
    threat_module.update_settings(UserSettings(language=Language.EN), orchestrator)
    await threat_module.refresh_threat(orchestrator)

    state = threat_module.reset_data(orchestrator)

    assert state.alert_history == []
    assert threat_module.read_settings(orchestrator) == UserSettings()


def test_settings_round_trip():
    orchestrator = make_orchestrator()
    updated = UserSettings(sound_enabled=False, language=Language.EN)

    assert threat_module.update_settings(updated, orchestrator) == updated
    assert threat_module.read_settings(orchestrator) == updated


def test_list_signals_describes_thresholds():
    rows = threat_module.list_signals(Language.FIL)

    assert [row.level for row in rows] == [0, 1, 2, 3, 4, 5]
    assert rows[0].min_wind_speed_ms == 0.0
    assert rows[0].max_wind_speed_ms == 30.0
    assert rows[3].description == "Malakas na Bagyo"
    assert rows[5].min_wind_speed_ms == 220.0
    assert rows[5].max_wind_speed_ms is None


def test_list_hotlines():
    hotlines = threat_module.list_hotlines()

    assert hotlines["NDRRMC"] == "911"
    assert hotlines["RED_CROSS"] == "143"
    assert hotlines["PAGASA"] == "(02) 8284-0800"
    assert hotlines["PHIVOLCS"] == "(02) 426-1468"
