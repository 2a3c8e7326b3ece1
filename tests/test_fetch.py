import asyncio

import httpx
import pytest

from tilekeeper.errors import FetchFailedError, StorageIOError
from tilekeeper.fetch import download_tile, download_tiles
from tilekeeper.grid.crs import Bounds, Point
from tilekeeper.grid.resolver import compute_tiles
from tilekeeper.grid.source import TileSource
from tilekeeper.store import InMemoryTileStore


def _handler(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/1/1/1.png":
        return httpx.Response(404)

    if request.url.host == "down.example.org":
        raise httpx.ConnectError("connection refused", request=request)

    return httpx.Response(200, content=request.url.path.encode())


def _client() -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(_handler))


def test_download_tile():
    async def run():
        async with _client() as client:
            return await download_tile(client, "https://a.example.org/0/0/0.png")

    assert asyncio.run(run()) == b"/0/0/0.png"


def test_download_tile_bad_status():
    async def run():
        async with _client() as client:
            return await download_tile(client, "https://a.example.org/1/1/1.png")

    with pytest.raises(FetchFailedError) as exc:
        asyncio.run(run())

    assert exc.value.url == "https://a.example.org/1/1/1.png"
    assert "404" in exc.value.reason


def test_download_tile_transport_error():
    async def run():
        async with _client() as client:
            return await download_tile(client, "https://down.example.org/0/0/0.png")

    with pytest.raises(FetchFailedError):
        asyncio.run(run())


def test_download_tiles_saves_and_collects_failures():
    source = TileSource(url_template="https://{s}.example.org/{z}/{x}/{y}.png")
    tiles = compute_tiles(source, Bounds(Point(0, 0), Point(511, 511)), 1)
    store = InMemoryTileStore()

    async def run():
        async with _client() as client:
            return await download_tiles(store, tiles, client=client, concurrency=2)

    saved, failures = asyncio.run(run())

    assert len(saved) == 3
    assert [failure.url for failure in failures] == ["https://c.example.org/1/1/1.png"]
    assert asyncio.run(store.count()) == 3

    for tile in saved:
        assert asyncio.run(store.get(tile.key)) == f"/1/{tile.x}/{tile.y}.png".encode()

    assert asyncio.run(store.list_by_template(source.url_template)) != []


class BrokenDiskStore(InMemoryTileStore):
    """Fails to save the first tile; every other save is slower than the failure."""

    async def save(self, descriptor, blob):
        if (descriptor.x, descriptor.y) == (0, 0):
            raise StorageIOError("disk full")

        await asyncio.sleep(0.05)
        await super().save(descriptor, blob)


def test_download_tiles_stops_saving_after_storage_error():
    source = TileSource(url_template="https://{s}.example.org/{z}/{x}/{y}.png")
    tiles = compute_tiles(source, Bounds(Point(0, 0), Point(1023, 1023)), 2)
    store = BrokenDiskStore()

    async def run():
        async with _client() as client:
            with pytest.raises(StorageIOError):
                await download_tiles(store, tiles, client=client, concurrency=16)

            saved_when_failed = await store.count()
            await asyncio.sleep(0.2)
            return saved_when_failed, await store.count()

    assert len(tiles) == 16
    assert asyncio.run(run()) == (0, 0)
