from datetime import datetime, timezone
import threading

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import bagyo.db_models  # noqa: F401 - registers tables on Base.metadata
from bagyo.db import Base
from bagyo.errors import PersistenceFailure
from bagyo.models import Location, Reading, UserSettings
from bagyo.services.alert_ledger import AlertLedger
from bagyo.storage import InMemoryKeyValueStore, OrderedWriteQueue, SqlKeyValueStore


def make_session_factory(tmp_path, create_tables=True):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'bagyo-test.db'}",
        connect_args={"check_same_thread": False},
    )
    if create_tables:
        Base.metadata.create_all(bind=engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


class RecordingStore(InMemoryKeyValueStore):
    def __init__(self):
        super().__init__()
        self.writes = []
        self.threads = set()

    def set(self, key, value):
        self.writes.append((key, value))
        self.threads.add(threading.get_ident())
        super().set(key, value)


class FailingStore(InMemoryKeyValueStore):
    def set(self, key, value):
        raise PersistenceFailure(f"Unable to write {key}")


class SilentNotifier:
    def deliver(self, message, urgency, play_sound):
        pass


def test_sql_store_get_set_and_overwrite(tmp_path):
    store = SqlKeyValueStore(make_session_factory(tmp_path))

    assert store.get("settings") is None
    store.set("settings", '{"language": "en"}')
    assert store.get("settings") == '{"language": "en"}'
    store.set("settings", '{"language": "fil"}')
    assert store.get("settings") == '{"language": "fil"}'


def test_sql_store_errors_become_persistence_failures(tmp_path, caplog):
    caplog.set_level("ERROR", logger="bagyo.storage")
    store = SqlKeyValueStore(make_session_factory(tmp_path, create_tables=False))

    with pytest.raises(PersistenceFailure):
        store.get("alertHistory")
    with pytest.raises(PersistenceFailure):
        store.set("alertHistory", "[]")
    assert "Failed to write key alertHistory" in caplog.text


def test_alert_history_survives_restart_in_sql_store(tmp_path):
    factory = make_session_factory(tmp_path)
    now = datetime(2024, 9, 1, 6, 0, tzinfo=timezone.utc)
    reading = Reading(
        timestamp=now,
        location=Location(latitude=14.5995, longitude=120.9842, label="Manila, Philippines"),
        wind_speed_ms=120.0,
        wind_direction_deg=45.0,
    )

    ledger = AlertLedger(SqlKeyValueStore(factory), SilentNotifier(), clock=lambda: now)
    result = ledger.process(reading, 3, UserSettings())

    restored = AlertLedger(SqlKeyValueStore(factory), SilentNotifier()).load()
    assert restored == result.history


def test_write_queue_writes_inline_without_event_loop():
    store = RecordingStore()
    writer = OrderedWriteQueue(store)

    writer.submit("settings", "{}")

    assert store.writes == [("settings", "{}")]
    assert writer.store is store


@pytest.mark.anyio
async def test_write_queue_preserves_submission_order():
    store = RecordingStore()
    writer = OrderedWriteQueue(store)

    for index in range(20):
        writer.submit("alertHistory", str(index))
    assert store.writes == []

    await writer.drain()

    assert [value for _, value in store.writes] == [str(index) for index in range(20)]
    assert store.get("alertHistory") == "19"
    assert threading.get_ident() not in store.threads
    await writer.close()


@pytest.mark.anyio
async def test_write_queue_restarts_after_close():
    store = RecordingStore()
    writer = OrderedWriteQueue(store)

    writer.submit("settings", "first")
    await writer.close()
    writer.submit("settings", "second")
    await writer.close()

    assert [value for _, value in store.writes] == ["first", "second"]


@pytest.mark.anyio
async def test_write_queue_logs_and_continues_after_failure(caplog):
    caplog.set_level("ERROR", logger="bagyo.storage.write_queue")
    writer = OrderedWriteQueue(FailingStore())

    writer.submit("alertHistory", "[]")
    writer.submit("settings", "{}")
    await writer.close()

    assert "Persisting alertHistory failed" in caplog.text
    assert "Persisting settings failed" in caplog.text
