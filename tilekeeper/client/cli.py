"""
CLI components (using typer)
"""

import asyncio
import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

CONSOLE = Console()

APP = typer.Typer()


def _parse_options(options: list[str]) -> dict[str, str]:
    parsed = {}

    for option in options:
        name, sep, value = option.partition("=")

        if not sep:
            raise typer.BadParameter(f"Expected NAME=VALUE, got {option}")

        parsed[name.strip()] = value

    return parsed


@APP.command()
def count():
    """
    Print the number of stored tiles.
    """
    from tilekeeper.store import get_store

    async def run():
        store = await get_store()
        return await store.count()

    CONSOLE.print(f"{asyncio.run(run())} tiles stored.")


@APP.command(name="list")
def list_tiles(template: str):
    """
    List the stored tiles of the layer with the given URL template.
    """
    from tilekeeper.store import get_store

    async def run():
        store = await get_store()
        return await store.list_by_template(template)

    tiles = asyncio.run(run())

    table = Table("z", "x", "y", "key")

    for tile in sorted(tiles, key=lambda t: (t.z, t.y, t.x)):
        table.add_row(str(tile.z), str(tile.x), str(tile.y), tile.key)

    CONSOLE.print(table)
    CONSOLE.print(f"{len(tiles)} tiles stored for {template}.")


@APP.command()
def remove(key: str):
    """
    Remove a single tile by its key.
    """
    from tilekeeper.store import get_store

    async def run():
        store = await get_store()
        await store.remove(key)

    asyncio.run(run())
    CONSOLE.print(f"Tile {key} removed.")


@APP.command()
def clear(yes: bool = typer.Option(False, "--yes", help="Do not ask for confirmation.")):
    """
    Remove every stored tile.
    """
    from tilekeeper.store import get_store

    if not yes:
        typer.confirm("Remove all stored tiles?", abort=True)

    async def run():
        store = await get_store()
        await store.clear()

    asyncio.run(run())
    CONSOLE.print("All tiles removed.")


@APP.command()
def coverage(
    template: str,
    output: Path | None = None,
    tile_size: int = 256,
    tms: bool = False,
):
    """
    Write the coverage of a layer's stored tiles as GeoJSON.
    """
    from tilekeeper.grid.geojson import to_geojson
    from tilekeeper.settings import settings
    from tilekeeper.store import get_store

    async def run():
        store = await get_store()
        return await store.list_by_template(template)

    geojson = to_geojson(
        asyncio.run(run()), tile_size=tile_size, crs=settings.get_crs(), tms=tms
    )

    if output is None:
        typer.echo(json.dumps(geojson, indent=2))
        return

    with output.open("w") as handle:
        json.dump(geojson, handle, indent=2)

    CONSOLE.print(f"Wrote {len(geojson['features'])} tiles to {output}.")


@APP.command()
def seed(
    template: str,
    south: float = typer.Option(...),
    west: float = typer.Option(...),
    north: float = typer.Option(...),
    east: float = typer.Option(...),
    zoom: list[int] = typer.Option(..., help="Zoom level; may be repeated."),
    subdomains: str = "abc",
    tile_size: int = 256,
    tms: bool = False,
    option: list[str] = typer.Option([], help="Extra template value as NAME=VALUE."),
):
    """
    Download the tiles of a layer covering a bounding box and store them.
    """
    from tilekeeper.fetch import download_tiles
    from tilekeeper.grid.resolver import compute_tiles_for_area
    from tilekeeper.grid.source import TileSource
    from tilekeeper.settings import settings
    from tilekeeper.store import get_store

    source = TileSource(
        url_template=template,
        tile_size=tile_size,
        subdomains=subdomains,
        tms=tms,
        options=_parse_options(option),
    )

    tiles = [
        tile
        for level in zoom
        for tile in compute_tiles_for_area(
            source,
            south=south,
            west=west,
            north=north,
            east=east,
            zoom=level,
            crs=settings.get_crs(),
            retina=settings.retina,
        )
    ]

    CONSOLE.print(f"Downloading {len(tiles)} tiles.")

    async def run():
        store = await get_store()
        return await download_tiles(store, tiles)

    saved, failures = asyncio.run(run())

    for failure in failures:
        CONSOLE.print(f"[red]{failure}[/red]")

    CONSOLE.print(f"Saved {len(saved)} tiles, {len(failures)} failed.")

    if failures:
        raise typer.Exit(code=1)


@APP.command()
def serve(host: str = "127.0.0.1", port: int = 8000):
    """
    Serve the stored tiles over HTTP.
    """
    from uvicorn import run

    from tilekeeper.server.app import app

    run(app, host=host, port=port)


def main():
    global APP

    APP()
