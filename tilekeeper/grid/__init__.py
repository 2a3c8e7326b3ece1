"""
Tile addressing: coordinate systems, tile sources, viewport resolution and
coverage projection. Everything here is pure and free of I/O.
"""

from .crs import CRS, EPSG3857, EPSG4326, Bounds, Point, get_crs
from .descriptor import StoredTileMeta, TileDescriptor
from .geojson import to_geojson
from .resolver import compute_tiles, compute_tiles_for_area
from .source import TileSource, default_subdomain, template, tile_url

__all__ = (
    "CRS",
    "EPSG3857",
    "EPSG4326",
    "Bounds",
    "Point",
    "get_crs",
    "StoredTileMeta",
    "TileDescriptor",
    "to_geojson",
    "compute_tiles",
    "compute_tiles_for_area",
    "TileSource",
    "default_subdomain",
    "template",
    "tile_url",
)
