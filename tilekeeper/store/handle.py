"""
The process-wide store handle.

The store is opened on first use and kept for the lifetime of the process.
Callers that race to use it before it is open all wait on the same open.
"""

import asyncio
import threading
from typing import Callable

import structlog

from ..errors import StorageUnavailableError
from .core import TileStore


class StoreHandle:
    factory: Callable[[], TileStore]

    def __init__(self, factory: Callable[[], TileStore]):
        self.factory = factory
        self.logger = structlog.get_logger()

        self._store: TileStore | None = None
        self._error: StorageUnavailableError | None = None
        self._lock = threading.Lock()

    def open(self) -> TileStore:
        """
        Open the store (blocking) if that has not happened yet, and return it.

        A failure to open is remembered: every later call raises the same
        ``StorageUnavailableError`` until ``reset`` is called.
        """
        with self._lock:
            if self._error is not None:
                raise self._error

            if self._store is None:
                store = self.factory()

                try:
                    store.open()
                except StorageUnavailableError as e:
                    self._error = e
                    self.logger.error("store.handle.failed", error=str(e))
                    raise

                self._store = store
                self.logger.info("store.handle.opened", store=type(store).__name__)

            return self._store

    async def get(self) -> TileStore:
        store = self._store

        if store is not None:
            return store

        return await asyncio.to_thread(self.open)

    def reset(self) -> None:
        """
        Forget the current store (closing it) and any remembered failure, so
        the next request opens afresh.
        """
        with self._lock:
            if self._store is not None:
                self._store.close()

            self._store = None
            self._error = None


def _default_store() -> TileStore:
    from ..settings import settings

    return settings.create_store()


store_handle = StoreHandle(factory=_default_store)


async def get_store() -> TileStore:
    """
    The shared store, opened on first use.
    """
    return await store_handle.get()
