"""
Downloading tiles and saving them into a store.

The store never fetches anything itself; these helpers are the usual way of
filling it from a list of resolved tiles.
"""

import asyncio
from typing import Sequence

import httpx
import structlog

from .errors import FetchFailedError
from .grid.descriptor import TileDescriptor
from .settings import settings
from .store.core import TileStore

logger = structlog.get_logger()


def create_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.request_timeout_seconds),
        headers={"User-Agent": settings.user_agent},
        follow_redirects=True,
    )


async def download_tile(client: httpx.AsyncClient, url: str) -> bytes:
    """
    Fetch the raw bytes of one tile.

    Raises
    ------
    FetchFailedError
        The server answered with a non-2xx status, or the request failed.
    """
    try:
        response = await client.get(url)
    except httpx.HTTPError as e:
        raise FetchFailedError(url, str(e) or type(e).__name__) from e

    if not response.is_success:
        raise FetchFailedError(
            url, f"status {response.status_code} {response.reason_phrase}"
        )

    return response.content


async def download_tiles(
    store: TileStore,
    tiles: Sequence[TileDescriptor],
    client: httpx.AsyncClient | None = None,
    concurrency: int | None = None,
) -> tuple[list[TileDescriptor], list[FetchFailedError]]:
    """
    Download every tile in ``tiles`` and save it in ``store``.

    Failed downloads are collected and returned rather than retried; tiles
    that were downloaded are saved even when others fail. A storage error is
    not caught: the remaining downloads are cancelled before it propagates.

    Returns
    -------
    tuple[list[TileDescriptor], list[FetchFailedError]]
        The tiles that were saved, and the failures.
    """
    semaphore = asyncio.Semaphore(concurrency or settings.download_concurrency)
    saved: list[TileDescriptor] = []
    failures: list[FetchFailedError] = []

    async def fetch_and_save(http: httpx.AsyncClient, tile: TileDescriptor) -> None:
        async with semaphore:
            try:
                blob = await download_tile(http, tile.url)
            except FetchFailedError as e:
                logger.warning("fetch.failed", url=tile.url, reason=e.reason)
                failures.append(e)
                return

        await store.save(tile, blob)
        saved.append(tile)
        logger.debug("fetch.saved", tile_key=tile.key, size=len(blob))

    async def run_all(http: httpx.AsyncClient) -> None:
        tasks = [asyncio.ensure_future(fetch_and_save(http, tile)) for tile in tiles]

        try:
            await asyncio.gather(*tasks)
        except BaseException:
            # Nothing may keep writing to the store once the call has failed.
            for task in tasks:
                task.cancel()

            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    if client is None:
        async with create_client() as http:
            await run_all(http)
    else:
        await run_all(client)

    logger.info("fetch.finished", saved=len(saved), failed=len(failures))

    return saved, failures
