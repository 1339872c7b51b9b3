"""Ordered, best-effort persistence of key-value writes."""

from __future__ import annotations

import asyncio
import contextlib
import logging

from bagyo.errors import PersistenceFailure
from bagyo.storage.kv_store import KeyValueStore

logger = logging.getLogger("bagyo.storage.write_queue")


class OrderedWriteQueue:
    """Issue store writes one at a time, in the order they were submitted.

    Inside a running event loop, ``submit`` only enqueues; a single worker task
    drains the queue through ``asyncio.to_thread`` so a slow store never blocks
    a refresh cycle. Outside an event loop the write happens inline. Failures
    are logged and never raised: callers keep their in-memory copy as the
    authoritative state.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store
        self._queue: asyncio.Queue | None = None
        self._worker: asyncio.Task | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    @property
    def store(self) -> KeyValueStore:
        return self._store

    def submit(self, key: str, value: str) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._write(key, value)
            return

        queue = self._queue
        if queue is None or self._loop is not loop or self._worker is None or self._worker.done():
            queue = self._start(loop)
        queue.put_nowait((key, value))

    async def drain(self) -> None:
        """Wait until every submitted write has been attempted."""

        if self._queue is None or self._loop is not asyncio.get_running_loop():
            return
        await self._queue.join()

    async def close(self) -> None:
        await self.drain()
        worker, self._worker = self._worker, None
        if worker is not None:
            worker.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await worker

    def _start(self, loop: asyncio.AbstractEventLoop) -> asyncio.Queue:
        if self._queue is not None and not self._queue.empty():
            logger.warning(
                "Discarding %s pending writes from a previous event loop",
                self._queue.qsize(),
            )
        self._loop = loop
        self._queue = asyncio.Queue()
        self._worker = loop.create_task(self._run(self._queue))
        return self._queue

    async def _run(self, queue: asyncio.Queue) -> None:
        while True:
            key, value = await queue.get()
            try:
                await asyncio.to_thread(self._write, key, value)
            except Exception as exc:  # pragma: no cover - defensive logging
                logger.error("Unexpected error persisting %s: %s", key, exc)
            finally:
                queue.task_done()

    def _write(self, key: str, value: str) -> bool:
        try:
            self._store.set(key, value)
        except PersistenceFailure as exc:
            logger.error("Persisting %s failed; in-memory state kept: %s", key, exc)
            return False
        logger.debug("Persisted %s (%d bytes)", key, len(value))
        return True


__all__ = ["OrderedWriteQueue"]
