"""Persistence adapters for Bagyo Watch."""

from .kv_store import (
    ALERT_HISTORY_KEY,
    SETTINGS_KEY,
    InMemoryKeyValueStore,
    KeyValueStore,
    SqlKeyValueStore,
)
from .write_queue import OrderedWriteQueue

__all__ = [
    "ALERT_HISTORY_KEY",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "OrderedWriteQueue",
    "SETTINGS_KEY",
    "SqlKeyValueStore",
]
