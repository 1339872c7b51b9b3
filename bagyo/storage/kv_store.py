"""Key-value stores for alert history and user settings."""

from __future__ import annotations

import logging
from threading import Lock
from typing import Callable, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bagyo.errors import PersistenceFailure

logger = logging.getLogger("bagyo.storage")

ALERT_HISTORY_KEY = "alertHistory"
SETTINGS_KEY = "settings"


class KeyValueStore(Protocol):
    """Get/set of opaque string blobs keyed by string."""

    def get(self, key: str) -> str | None:
        """Return the stored value, or None when the key is absent."""

    def set(self, key: str, value: str) -> None:
        """Store a value, raising PersistenceFailure when the write fails."""


class InMemoryKeyValueStore:
    """Process-local store, used by tests and ephemeral deployments."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})
        self._lock = Lock()

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value


class SqlKeyValueStore:
    """Key-value store backed by the ``kv_entries`` table."""

    def __init__(self, session_factory: Callable[[], Session] | None = None) -> None:
        if session_factory is None:
            from bagyo.db import SessionLocal

            session_factory = SessionLocal
        self._session_factory = session_factory

    def get(self, key: str) -> str | None:
        from bagyo.db_models import KeyValueEntry

        session = self._session_factory()
        try:
            entry = session.get(KeyValueEntry, key)
            return entry.value if entry is not None else None
        except SQLAlchemyError as exc:
            logger.error("Failed to read key %s: %s", key, exc)
            raise PersistenceFailure(f"Unable to read {key}") from exc
        finally:
            session.close()

    def set(self, key: str, value: str) -> None:
        from bagyo.db_models import KeyValueEntry

        session = self._session_factory()
        try:
            entry = session.get(KeyValueEntry, key)
            if entry is None:
                session.add(KeyValueEntry(key=key, value=value))
            else:
                entry.value = value
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error("Failed to write key %s: %s", key, exc)
            raise PersistenceFailure(f"Unable to write {key}") from exc
        finally:
            session.close()


__all__ = [
    "ALERT_HISTORY_KEY",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "SETTINGS_KEY",
    "SqlKeyValueStore",
]
