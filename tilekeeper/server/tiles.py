"""
Endpoints for stored tiles.
"""

import mimetypes

from fastapi import APIRouter, HTTPException, Query, Response

from tilekeeper.errors import TileNotFoundError
from tilekeeper.grid.descriptor import StoredTileMeta
from tilekeeper.grid.geojson import to_geojson
from tilekeeper.settings import settings
from tilekeeper.store import get_store

tiles_router = APIRouter(tags=["Tiles"])


@tiles_router.get(
    "/tiles/count",
    summary="Count the stored tiles.",
    description="The total number of tiles in the store, across all layers.",
)
async def get_count():
    store = await get_store()
    return {"count": await store.count()}


@tiles_router.get(
    "/tiles",
    response_model=list[StoredTileMeta],
    response_model_by_alias=True,
    summary="List the stored tiles of a layer.",
    description="Metadata (without the image data) for every tile stored from the given URL template.",
)
async def get_tiles(template: str = Query(description="URL template of the layer.")):
    store = await get_store()
    return await store.list_by_template(template)


@tiles_router.get(
    "/tiles/zoom/{z}",
    response_model=list[StoredTileMeta],
    response_model_by_alias=True,
    summary="List the stored tiles at a zoom level.",
)
async def get_tiles_at_zoom(z: int):
    store = await get_store()
    return await store.list_by_zoom(z)


@tiles_router.get(
    "/tile",
    summary="Retrieve an individual tile.",
    description="The stored image data for the tile with the given key.",
)
async def get_tile(key: str = Query(description="Cache key of the tile.")):
    store = await get_store()

    try:
        blob = await store.get(key)
    except TileNotFoundError:
        raise HTTPException(status_code=404, detail="Tile not found")

    media_type, _ = mimetypes.guess_type(key.split("?")[0])

    return Response(content=blob, media_type=media_type or "application/octet-stream")


@tiles_router.delete("/tile", status_code=204, summary="Remove an individual tile.")
async def delete_tile(key: str = Query(description="Cache key of the tile.")):
    store = await get_store()
    await store.remove(key)


@tiles_router.delete("/tiles", status_code=204, summary="Remove every stored tile.")
async def delete_tiles():
    store = await get_store()
    await store.clear()


@tiles_router.get(
    "/coverage",
    summary="Get the coverage of a layer as GeoJSON.",
    description="A FeatureCollection with one polygon for each stored tile of the layer.",
)
async def get_coverage(
    template: str = Query(description="URL template of the layer."),
    tile_size: int = Query(default=256, gt=0),
    tms: bool = False,
):
    store = await get_store()
    tiles = await store.list_by_template(template)
    return to_geojson(tiles, tile_size=tile_size, crs=settings.get_crs(), tms=tms)
