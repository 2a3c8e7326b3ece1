"""
Coordinate reference systems, mapping geographic coordinates to world pixel
space at a given zoom level.

Pixel space has its origin at the top-left (north-west) corner of the world
and y grows downward. At zoom ``z`` the world is ``256 * 2**z`` pixels along
each unit of the CRS's projected extent.
"""

import math
from abc import ABC, abstractmethod
from typing import NamedTuple


class Point(NamedTuple):
    x: float
    y: float

    def divide_by(self, value: float) -> "Point":
        return Point(self.x / value, self.y / value)

    def floor(self) -> "Point":
        return Point(math.floor(self.x), math.floor(self.y))

    def ceil(self) -> "Point":
        return Point(math.ceil(self.x), math.ceil(self.y))


class Bounds(NamedTuple):
    min: Point
    max: Point

    @classmethod
    def from_points(cls, a: Point, b: Point) -> "Bounds":
        """
        Build bounds from two arbitrary corners, normalizing them so that
        ``min <= max`` on both axes.
        """
        return cls(
            Point(min(a.x, b.x), min(a.y, b.y)),
            Point(max(a.x, b.x), max(a.y, b.y)),
        )


class CRS(ABC):
    code: str

    def scale(self, zoom: int) -> float:
        return 256 * 2**zoom

    @abstractmethod
    def projected_bounds(self, zoom: int) -> Bounds:
        """The full extent of the world in pixels at ``zoom``."""
        raise NotImplementedError

    @abstractmethod
    def pixel_to_geo(self, point: Point, zoom: int) -> tuple[float, float]:
        """Convert a world pixel to ``(lat, lng)`` at ``zoom``."""
        raise NotImplementedError

    @abstractmethod
    def geo_to_pixel(self, lat: float, lng: float, zoom: int) -> Point:
        """Convert ``(lat, lng)`` to a world pixel at ``zoom``."""
        raise NotImplementedError

    def pixel_bounds(
        self, south: float, west: float, north: float, east: float, zoom: int
    ) -> Bounds:
        """
        Pixel bounds covering a geographic bounding box at ``zoom``.
        """
        return Bounds.from_points(
            self.geo_to_pixel(north, west, zoom), self.geo_to_pixel(south, east, zoom)
        )

    def world_max_y(self, zoom: int, tile_size: int) -> int:
        """
        Index of the last tile row of the world at ``zoom``. Used to flip rows
        between the XYZ and TMS numbering schemes.
        """
        return math.ceil(self.projected_bounds(zoom).max.y / tile_size) - 1


class SphericalMercator(CRS):
    """
    EPSG:3857, the web mercator projection used by most slippy maps.
    """

    code = "EPSG3857"
    max_latitude = 85.0511287798

    def projected_bounds(self, zoom: int) -> Bounds:
        s = self.scale(zoom)
        return Bounds(Point(0, 0), Point(s, s))

    def pixel_to_geo(self, point: Point, zoom: int) -> tuple[float, float]:
        s = self.scale(zoom)
        lng = (point.x / s - 0.5) * 360.0
        lat = math.degrees(
            2 * math.atan(math.exp(math.pi * (1 - 2 * point.y / s))) - math.pi / 2
        )
        return lat, lng

    def geo_to_pixel(self, lat: float, lng: float, zoom: int) -> Point:
        s = self.scale(zoom)
        lat = max(min(self.max_latitude, lat), -self.max_latitude)
        sin = math.sin(math.radians(lat))
        x = (lng / 360.0 + 0.5) * s
        y = (0.5 - math.log((1 + sin) / (1 - sin)) / (4 * math.pi)) * s
        return Point(x, y)


class Equirectangular(CRS):
    """
    EPSG:4326, plate carree. The world is two tiles wide and one tall at zoom 0.
    """

    code = "EPSG4326"

    def projected_bounds(self, zoom: int) -> Bounds:
        s = self.scale(zoom)
        return Bounds(Point(0, 0), Point(2 * s, s))

    def pixel_to_geo(self, point: Point, zoom: int) -> tuple[float, float]:
        s = self.scale(zoom)
        return (0.5 - point.y / s) * 180.0, (point.x / s - 1) * 180.0

    def geo_to_pixel(self, lat: float, lng: float, zoom: int) -> Point:
        s = self.scale(zoom)
        return Point((lng / 180.0 + 1) * s, (0.5 - lat / 180.0) * s)


EPSG3857 = SphericalMercator()
EPSG4326 = Equirectangular()

CRS_BY_CODE: dict[str, CRS] = {crs.code: crs for crs in (EPSG3857, EPSG4326)}


def get_crs(code: str) -> CRS:
    """
    Look up a CRS by its code, accepting both ``EPSG3857`` and ``EPSG:3857``.
    """
    try:
        return CRS_BY_CODE[code.upper().replace(":", "")]
    except KeyError:
        raise ValueError(f"Unknown CRS {code}")
