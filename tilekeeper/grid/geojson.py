"""
Projection of stored tiles back into geographic polygons, for drawing the
coverage of the cache on a map.
"""

from typing import Any, Iterable

from .crs import CRS, EPSG3857, Point
from .descriptor import TileDescriptor


def tile_polygon(
    x: int, y: int, zoom: int, tile_size: int = 256, crs: CRS = EPSG3857
) -> list[list[float]]:
    """
    Closed ring of ``[lng, lat]`` positions outlining the tile at rendering
    row ``y``, running north-west, north-east, south-east, south-west.
    """
    top_left = Point(x * tile_size, y * tile_size)
    bottom_right = Point(top_left.x + tile_size, top_left.y + tile_size)

    north, west = crs.pixel_to_geo(top_left, zoom)
    south, east = crs.pixel_to_geo(bottom_right, zoom)

    return [
        [west, north],
        [east, north],
        [east, south],
        [west, south],
        [west, north],
    ]


def to_geojson(
    tiles: Iterable[TileDescriptor],
    tile_size: int = 256,
    crs: CRS = EPSG3857,
    tms: bool = False,
) -> dict[str, Any]:
    """
    Build a GeoJSON FeatureCollection with one polygon per tile. The tile
    metadata is carried in each feature's properties.

    When ``tms`` is set, the stored rows are numbered from the bottom of the
    world and are flipped back (at each tile's own zoom) before projecting.
    """
    features = []

    for tile in tiles:
        y = tile.y

        if tms:
            y = crs.world_max_y(tile.z, tile_size) - y

        features.append(
            {
                "type": "Feature",
                "properties": tile.model_dump(by_alias=True),
                "geometry": {
                    "type": "Polygon",
                    "coordinates": [tile_polygon(tile.x, y, tile.z, tile_size, crs)],
                },
            }
        )

    return {"type": "FeatureCollection", "features": features}
