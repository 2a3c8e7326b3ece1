"""
Core (abstract) tile store.
"""

from abc import ABC, abstractmethod

import structlog
from structlog.types import FilteringBoundLogger

from ..grid.descriptor import StoredTileMeta, TileDescriptor


class TileStore(ABC):
    """
    Persistent collection of tile payloads keyed by tile key, with lookups
    by URL template and by zoom level.

    All data operations are coroutines. ``open`` is blocking and must be
    called (usually through a ``StoreHandle``) before any of them.
    """

    logger: FilteringBoundLogger

    def __init__(self):
        self.logger = structlog.get_logger()

    def open(self) -> None:
        """
        Prepare the underlying storage for use. Safe to call more than once.
        """
        return

    def close(self) -> None:
        return

    @abstractmethod
    async def count(self) -> int:
        raise NotImplementedError

    @abstractmethod
    async def list_by_template(self, url_template: str) -> list[StoredTileMeta]:
        raise NotImplementedError

    @abstractmethod
    async def list_by_zoom(self, z: int) -> list[StoredTileMeta]:
        raise NotImplementedError

    @abstractmethod
    async def save(self, descriptor: TileDescriptor, blob: bytes) -> None:
        """
        Insert the tile, fully replacing any record with the same key.
        """
        raise NotImplementedError

    @abstractmethod
    async def get(self, key: str) -> bytes:
        """
        The payload stored under ``key``. Raises ``TileNotFoundError`` when
        there is none.
        """
        raise NotImplementedError

    @abstractmethod
    async def remove(self, key: str) -> None:
        """
        Delete the tile stored under ``key``, if any.
        """
        raise NotImplementedError

    @abstractmethod
    async def clear(self) -> None:
        raise NotImplementedError
