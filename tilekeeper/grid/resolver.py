"""
Resolution of a pixel viewport into the tiles covering it.
"""

from .crs import CRS, EPSG3857, Bounds, Point
from .descriptor import TileDescriptor
from .source import SubdomainSelector, TileSource, default_subdomain, tile_url


def tile_range(bounds: Bounds, tile_size: int) -> Bounds:
    """
    Convert world pixel bounds into an inclusive range of tile indices.

    A max edge lying exactly on a tile boundary does not pull in the next
    tile, so ``(0, 0)-(512, 512)`` at 256px covers tiles 0 and 1 on each
    axis. Zero-size bounds always cover one tile.
    """
    low = bounds.min.divide_by(tile_size).floor()
    high = bounds.max.divide_by(tile_size).ceil()
    return Bounds(low, Point(max(low.x, high.x - 1), max(low.y, high.y - 1)))


def _subdomain_value(source: TileSource, chosen: str | None) -> str:
    if chosen is not None:
        return chosen

    # Without subdomains the placeholder is resolved from the options, or left as-is.
    return str(source.options.get("s", "{s}"))


def compute_tiles(
    source: TileSource,
    pixel_bounds: Bounds,
    zoom: int,
    crs: CRS = EPSG3857,
    retina: bool = False,
    select_subdomain: SubdomainSelector = default_subdomain,
) -> list[TileDescriptor]:
    """
    Enumerate the tiles covering ``pixel_bounds``, rows top to bottom and
    columns left to right within each row.

    Parameters
    ----------
    source : TileSource
        The tile layer to resolve URLs for.
    pixel_bounds : Bounds
        Viewport in world pixels at the display zoom.
    zoom : int
        Zoom level used to resolve the tile URLs.
    crs : CRS
        Used to find the number of tile rows in the world, for TMS inversion.
    retina : bool
        Fill the {r} placeholder with the retina suffix.
    select_subdomain : SubdomainSelector
        Picks the subdomain of the fetch URL for a tile; must be deterministic.

    Returns
    -------
    list[TileDescriptor]
    """
    tiles = []
    tile_bounds = tile_range(pixel_bounds, source.tile_size)
    world_max_y = crs.world_max_y(zoom, source.tile_size)

    for j in range(int(tile_bounds.min.y), int(tile_bounds.max.y) + 1):
        for i in range(int(tile_bounds.min.x), int(tile_bounds.max.x) + 1):
            inverted_y = world_max_y - j
            y = inverted_y if source.tms else j

            data = {**source.options, "x": i, "y": y, "z": zoom}

            chosen = (
                select_subdomain((i, y), source.subdomains)
                if source.subdomains
                else None
            )

            tiles.append(
                TileDescriptor(
                    key=tile_url(
                        source.url_template,
                        {**data, "s": _subdomain_value(source, source.first_subdomain)},
                        retina=retina,
                    ),
                    url=tile_url(
                        source.url_template,
                        {**data, "s": _subdomain_value(source, chosen)},
                        retina=retina,
                    ),
                    url_template=source.url_template,
                    x=i,
                    y=y,
                    z=zoom,
                    inverted_y=inverted_y,
                )
            )

    return tiles


def compute_tiles_for_area(
    source: TileSource,
    south: float,
    west: float,
    north: float,
    east: float,
    zoom: int,
    crs: CRS = EPSG3857,
    retina: bool = False,
) -> list[TileDescriptor]:
    """
    Tiles covering a geographic bounding box at ``zoom``.
    """
    bounds = crs.pixel_bounds(south, west, north, east, zoom)
    return compute_tiles(source, bounds, zoom, crs=crs, retina=retina)
