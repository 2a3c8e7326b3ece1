"""
SQLite-backed tile store.
"""

import asyncio
import threading
from typing import Callable, TypeVar

from sqlalchemy import create_engine, delete, func, select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from ..errors import StorageIOError, StorageUnavailableError, TileNotFoundError
from ..grid.descriptor import StoredTileMeta, TileDescriptor
from .core import TileStore
from .migrations import migrate
from .orm import StoredTile

T = TypeVar("T")

META_COLUMNS = (
    StoredTile.key,
    StoredTile.url,
    StoredTile.url_template,
    StoredTile.x,
    StoredTile.y,
    StoredTile.z,
    StoredTile.inverted_y,
)


def _to_meta(row) -> StoredTileMeta:
    key, url, url_template, x, y, z, inverted_y = row
    return StoredTileMeta(
        key=key,
        url=url,
        url_template=url_template,
        x=x,
        y=y,
        z=z,
        inverted_y=inverted_y,
    )


class SQLTileStore(TileStore):
    """
    Tiles stored in a single SQLite table. Blocking database work is run in
    worker threads so the coroutines never stall the event loop.
    """

    def __init__(self, database_url: str):
        """
        Parameters
        ----------
        database_url : str
            SQLAlchemy database URL, e.g. ``sqlite:///tiles.db``. ``sqlite://``
            gives a private in-memory database.
        """
        super().__init__()

        self.database_url = database_url
        self.engine = None
        self._open_lock = threading.Lock()

    def _create_engine(self):
        if self.database_url in ("sqlite://", "sqlite:///:memory:"):
            return create_engine(
                self.database_url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )

        return create_engine(
            self.database_url, connect_args={"check_same_thread": False}
        )

    def open(self) -> None:
        with self._open_lock:
            if self.engine is not None:
                return

            log = self.logger.bind(database_url=self.database_url)

            try:
                engine = self._create_engine()

                try:
                    previous = migrate(engine)
                except BaseException:
                    engine.dispose()
                    raise
            except SQLAlchemyError as e:
                log.error("store.sqlite.unavailable", error=str(e))
                raise StorageUnavailableError(
                    f"Could not open tile database {self.database_url}"
                ) from e

            self.engine = engine
            log.info("store.sqlite.opened", previous_schema_version=previous)

    def close(self) -> None:
        with self._open_lock:
            if self.engine is not None:
                self.engine.dispose()
                self.engine = None

    async def _run(self, operation: Callable[[Session], T]) -> T:
        if self.engine is None:
            raise StorageUnavailableError("Tile database has not been opened")

        def work() -> T:
            try:
                with Session(self.engine) as session:
                    return operation(session)
            except SQLAlchemyError as e:
                raise StorageIOError(str(e)) from e

        return await asyncio.to_thread(work)

    async def count(self) -> int:
        return await self._run(
            lambda session: session.execute(
                select(func.count()).select_from(StoredTile)
            ).scalar_one()
        )

    async def list_by_template(self, url_template: str) -> list[StoredTileMeta]:
        stmt = select(*META_COLUMNS).where(StoredTile.url_template == url_template)
        rows = await self._run(lambda session: session.execute(stmt).all())
        return [_to_meta(row) for row in rows]

    async def list_by_zoom(self, z: int) -> list[StoredTileMeta]:
        stmt = select(*META_COLUMNS).where(StoredTile.z == z)
        rows = await self._run(lambda session: session.execute(stmt).all())
        return [_to_meta(row) for row in rows]

    async def save(self, descriptor: TileDescriptor, blob: bytes) -> None:
        values = {
            "key": descriptor.key,
            "url": descriptor.url,
            "urlTemplate": descriptor.url_template,
            "x": descriptor.x,
            "y": descriptor.y,
            "z": descriptor.z,
            "-y": descriptor.inverted_y,
            "blob": bytes(blob),
        }

        table = StoredTile.__table__
        stmt = insert(table).values(values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.key],
            set_={name: stmt.excluded[name] for name in values if name != "key"},
        )

        def upsert(session: Session) -> None:
            session.execute(stmt)
            session.commit()

        await self._run(upsert)
        self.logger.debug("store.sqlite.saved", tile_key=descriptor.key)

    async def get(self, key: str) -> bytes:
        stmt = select(StoredTile.blob).where(StoredTile.key == key)
        blob = await self._run(
            lambda session: session.execute(stmt).scalar_one_or_none()
        )

        if blob is None:
            self.logger.debug("store.sqlite.miss", tile_key=key)
            raise TileNotFoundError(f"Tile {key} not found in store")

        return blob

    async def remove(self, key: str) -> None:
        def delete_one(session: Session) -> None:
            session.execute(delete(StoredTile).where(StoredTile.key == key))
            session.commit()

        await self._run(delete_one)
        self.logger.debug("store.sqlite.removed", tile_key=key)

    async def clear(self) -> None:
        def delete_all(session: Session) -> None:
            session.execute(delete(StoredTile))
            session.commit()

        await self._run(delete_all)
        self.logger.info("store.sqlite.cleared")
