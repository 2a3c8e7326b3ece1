"""
Persistence of tile payloads.
"""

from .core import TileStore
from .handle import StoreHandle, get_store, store_handle
from .memory import InMemoryTileStore
from .sql import SQLTileStore

__all__ = (
    "TileStore",
    "StoreHandle",
    "get_store",
    "store_handle",
    "InMemoryTileStore",
    "SQLTileStore",
)
