import asyncio
import threading

import pytest
from sqlalchemy import text

from tilekeeper.errors import StorageIOError, StorageUnavailableError, TileNotFoundError
from tilekeeper.grid.descriptor import StoredTileMeta
from tilekeeper.store import InMemoryTileStore, SQLTileStore

OTHER_TEMPLATE = "https://{s}.tiles.example.net/{z}/{x}/{y}.jpg"


@pytest.fixture(params=["sqlite", "inmemory"])
def store(request, tmp_path):
    if request.param == "sqlite":
        store = SQLTileStore(f"sqlite:///{tmp_path / 'tiles.db'}")
    else:
        store = InMemoryTileStore()

    store.open()

    yield store

    store.close()


def test_save_and_get(store, make_tile):
    tile = make_tile(1, 2, 3)
    blob = b"\x89PNG\r\n\x1a\n" + bytes(range(256))

    asyncio.run(store.save(tile, blob))

    assert asyncio.run(store.get(tile.key)) == blob


def test_get_missing(store):
    with pytest.raises(TileNotFoundError):
        asyncio.run(store.get("https://a.tile.example.org/0/0/0.png"))


def test_remove(store, make_tile):
    tile = make_tile(0, 0, 0)

    asyncio.run(store.save(tile, b"data"))
    asyncio.run(store.remove(tile.key))

    with pytest.raises(TileNotFoundError):
        asyncio.run(store.get(tile.key))

    # Removing again is not an error.
    asyncio.run(store.remove(tile.key))
    assert asyncio.run(store.count()) == 0


def test_save_replaces(store, make_tile):
    first = make_tile(0, 0, 1)
    second = first.model_copy(
        update={"url": "https://b.tile.example.org/1/0/0.png", "url_template": OTHER_TEMPLATE}
    )

    asyncio.run(store.save(first, b"old"))
    asyncio.run(store.save(second, b"new"))

    assert asyncio.run(store.count()) == 1
    assert asyncio.run(store.get(first.key)) == b"new"
    assert asyncio.run(store.list_by_template(first.url_template)) == []

    (stored,) = asyncio.run(store.list_by_template(OTHER_TEMPLATE))
    assert stored.url == "https://b.tile.example.org/1/0/0.png"


def test_count_and_clear(store, make_tile):
    tiles = [make_tile(x, y, 2) for x in range(4) for y in range(4)]

    async def fill():
        await asyncio.gather(*(store.save(tile, b"%d" % i) for i, tile in enumerate(tiles)))

    asyncio.run(fill())
    assert asyncio.run(store.count()) == 16

    asyncio.run(store.remove(tiles[0].key))
    assert asyncio.run(store.count()) == 15

    asyncio.run(store.clear())
    assert asyncio.run(store.count()) == 0
    assert asyncio.run(store.list_by_template(tiles[0].url_template)) == []


def test_list_by_template(store, make_tile):
    ours = [make_tile(0, 0, 1), make_tile(1, 0, 1)]
    theirs = make_tile(0, 0, 1, template=OTHER_TEMPLATE)

    for tile in [*ours, theirs]:
        asyncio.run(store.save(tile, b"data"))

    listed = asyncio.run(store.list_by_template(ours[0].url_template))

    assert sorted(t.key for t in listed) == sorted(t.key for t in ours)
    assert all(isinstance(t, StoredTileMeta) for t in listed)
    assert all(t.url_template == ours[0].url_template for t in listed)
    assert not hasattr(listed[0], "blob")

    by_key = {t.key: t for t in listed}
    for tile in ours:
        assert by_key[tile.key].model_dump() == tile.model_dump()

    assert [t.key for t in asyncio.run(store.list_by_template(OTHER_TEMPLATE))] == [
        theirs.key
    ]
    assert asyncio.run(store.list_by_template("https://unknown/{z}/{x}/{y}")) == []


def test_list_by_zoom(store, make_tile):
    for tile in [make_tile(0, 0, 0), make_tile(0, 0, 1), make_tile(1, 1, 1)]:
        asyncio.run(store.save(tile, b"data"))

    assert sorted((t.x, t.y) for t in asyncio.run(store.list_by_zoom(1))) == [
        (0, 0),
        (1, 1),
    ]
    assert asyncio.run(store.list_by_zoom(5)) == []


def test_empty_blob(store, make_tile):
    tile = make_tile(0, 0, 0)

    asyncio.run(store.save(tile, b""))

    assert asyncio.run(store.get(tile.key)) == b""


def test_sqlite_persists_across_reopen(tmp_path, make_tile):
    url = f"sqlite:///{tmp_path / 'tiles.db'}"
    tile = make_tile(3, 4, 5)

    first = SQLTileStore(url)
    first.open()
    asyncio.run(first.save(tile, b"persisted"))
    first.close()

    second = SQLTileStore(url)
    second.open()

    assert asyncio.run(second.get(tile.key)) == b"persisted"
    assert [t.key for t in asyncio.run(second.list_by_template(tile.url_template))] == [
        tile.key
    ]


def test_sqlite_in_memory(make_tile):
    store = SQLTileStore("sqlite://")
    store.open()
    tile = make_tile(0, 0, 0)

    asyncio.run(store.save(tile, b"memory"))

    assert asyncio.run(store.get(tile.key)) == b"memory"


def test_sqlite_requires_open(tmp_path):
    store = SQLTileStore(f"sqlite:///{tmp_path / 'tiles.db'}")

    with pytest.raises(StorageUnavailableError):
        asyncio.run(store.count())


def test_sqlite_unavailable(tmp_path):
    store = SQLTileStore(f"sqlite:///{tmp_path / 'missing' / 'dir' / 'tiles.db'}")

    with pytest.raises(StorageUnavailableError):
        store.open()


def test_sqlite_io_error(tmp_path):
    store = SQLTileStore(f"sqlite:///{tmp_path / 'tiles.db'}")
    store.open()

    with store.engine.begin() as connection:
        connection.execute(text("DROP TABLE tile_store"))

    with pytest.raises(StorageIOError):
        asyncio.run(store.count())


def test_inmemory_count_waits_for_writers(make_tile):
    store = InMemoryTileStore()
    asyncio.run(store.save(make_tile(0, 0, 1), b"tile"))
    counted = []

    store._lock.acquire()
    try:
        reader = threading.Thread(
            target=lambda: counted.append(asyncio.run(store.count()))
        )
        reader.start()
        reader.join(0.1)

        assert reader.is_alive()
        assert counted == []
    finally:
        store._lock.release()

    reader.join(1)

    assert counted == [1]
