"""
Versioned schema upgrades for the tile database.

Steps run in order, each one exactly once per database, inside a single
transaction. The version reached is recorded in the ``tilekeeper_schema``
table; databases created before versioning was introduced count as
version 0.
"""

from dataclasses import dataclass
from typing import Callable

import structlog
from sqlalchemy import Connection, Engine, inspect, select, text
from sqlalchemy.schema import CreateTable

from ..errors import StorageUnavailableError
from .orm import SchemaVersion, StoredTile

LEGACY_TABLES = ("leaflet_offline", "leaflet_offline_areas")


@dataclass(frozen=True)
class Migration:
    version: int
    name: str
    upgrade: Callable[[Connection], None]


def create_tile_store(connection: Connection) -> None:
    connection.execute(CreateTable(StoredTile.__table__, if_not_exists=True))


def index_tile_store(connection: Connection) -> None:
    for index in StoredTile.__table__.indexes:
        index.create(connection, checkfirst=True)


def drop_legacy_stores(connection: Connection) -> None:
    """
    Destroys the tables used by the previous naming scheme. Their contents
    are not carried over.
    """
    for table in LEGACY_TABLES:
        connection.execute(text(f'DROP TABLE IF EXISTS "{table}"'))


MIGRATIONS: tuple[Migration, ...] = (
    Migration(version=1, name="create_tile_store", upgrade=create_tile_store),
    Migration(version=2, name="index_tile_store", upgrade=index_tile_store),
    Migration(version=2, name="drop_legacy_stores", upgrade=drop_legacy_stores),
)

CURRENT_VERSION = max(migration.version for migration in MIGRATIONS)


def current_version(connection: Connection) -> int:
    if not inspect(connection).has_table(SchemaVersion.__tablename__):
        return 0

    version = connection.execute(select(SchemaVersion.version)).scalar()

    return version or 0


def migrate(engine: Engine) -> int:
    """
    Bring the database behind ``engine`` up to ``CURRENT_VERSION``.

    Returns
    -------
    int
        The version the database was at before upgrading.
    """
    log = structlog.get_logger()

    with engine.begin() as connection:
        SchemaVersion.__table__.create(connection, checkfirst=True)

        found = current_version(connection)
        log = log.bind(schema_version=found)

        if found > CURRENT_VERSION:
            raise StorageUnavailableError(
                f"Database schema version {found} is newer than supported "
                f"version {CURRENT_VERSION}"
            )

        for migration in MIGRATIONS:
            if migration.version <= found:
                continue

            migration.upgrade(connection)
            log.info(
                "store.migration.applied",
                migration=migration.name,
                version=migration.version,
            )

        if found == 0:
            connection.execute(
                SchemaVersion.__table__.insert().values(id=1, version=CURRENT_VERSION)
            )
        elif found < CURRENT_VERSION:
            connection.execute(
                SchemaVersion.__table__.update().values(version=CURRENT_VERSION)
            )

    return found
