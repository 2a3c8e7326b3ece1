"""
A tile store held entirely in memory.
"""

import threading

from ..errors import TileNotFoundError
from ..grid.descriptor import StoredTileMeta, TileDescriptor
from .core import TileStore


class InMemoryTileStore(TileStore):
    """
    A simple in-memory store, useful for tests and for short-lived processes
    that do not need the tiles to outlive them.
    """

    records: dict[str, tuple[StoredTileMeta, bytes]]

    def __init__(self):
        self.records = {}
        self._lock = threading.Lock()
        super().__init__()

    async def count(self) -> int:
        with self._lock:
            return len(self.records)

    async def list_by_template(self, url_template: str) -> list[StoredTileMeta]:
        with self._lock:
            return [
                meta
                for meta, _ in self.records.values()
                if meta.url_template == url_template
            ]

    async def list_by_zoom(self, z: int) -> list[StoredTileMeta]:
        with self._lock:
            return [meta for meta, _ in self.records.values() if meta.z == z]

    async def save(self, descriptor: TileDescriptor, blob: bytes) -> None:
        meta = StoredTileMeta.model_validate(descriptor.model_dump())

        with self._lock:
            self.records[descriptor.key] = (meta, bytes(blob))

        self.logger.debug("store.inmemory.saved", tile_key=descriptor.key)

    async def get(self, key: str) -> bytes:
        with self._lock:
            record = self.records.get(key)

        if record is None:
            self.logger.debug("store.inmemory.miss", tile_key=key)
            raise TileNotFoundError(f"Tile {key} not found in store")

        return record[1]

    async def remove(self, key: str) -> None:
        with self._lock:
            self.records.pop(key, None)

        self.logger.debug("store.inmemory.removed", tile_key=key)

    async def clear(self) -> None:
        with self._lock:
            self.records.clear()

        self.logger.info("store.inmemory.cleared")
