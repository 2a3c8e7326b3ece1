"""
An example of caching the tiles of a small area for offline use.

Two modes: download the area into the store, and write its coverage as GeoJSON.
"""

import asyncio
import json
import sys

from tilekeeper.fetch import download_tiles
from tilekeeper.grid import TileSource, compute_tiles_for_area, to_geojson
from tilekeeper.store import get_store

source = TileSource(
    url_template="https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png",
    subdomains="abc",
)

mode = sys.argv[1]

if mode == "download":
    # Central Berlin, zoom levels 10 to 13.
    tiles = [
        tile
        for zoom in range(10, 14)
        for tile in compute_tiles_for_area(
            source, south=52.49, west=13.35, north=52.54, east=13.45, zoom=zoom
        )
    ]

    async def run():
        store = await get_store()
        return await download_tiles(store, tiles)

    saved, failures = asyncio.run(run())
    print(f"Saved {len(saved)} tiles, {len(failures)} failed.")

if mode == "coverage":

    async def run():
        store = await get_store()
        return await store.list_by_template(source.url_template)

    with open("coverage.geojson", "w") as handle:
        json.dump(to_geojson(asyncio.run(run())), handle)
